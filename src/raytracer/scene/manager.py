"""Host-side scene manager.

SceneManager wraps the field-backed primitive storage in
src.raytracer.scene.intersection with a Python-side record of what was added,
so a scene can be inspected, serialized and rebuilt.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5)
    0
    >>> scene.to_dict()
    {'spheres': [{'center': (0, 0, -1), 'radius': 0.5}]}
"""

import math
from dataclasses import dataclass, field
from typing import Any

from src.raytracer.geometry.primitive import PrimitiveKind
from src.raytracer.scene.intersection import (
    MAX_PRIMITIVES,
    add_sphere,
    clear_scene,
    get_primitive_count,
)


@dataclass(frozen=True)
class SphereInfo:
    """Host-side record of one sphere added through a SceneManager.

    Attributes:
        primitive_index: The index in the primitive storage arrays.
        center: Sphere center as given by the caller.
        radius: Sphere radius.
        kind: The primitive kind tag stored alongside it.
    """

    primitive_index: int
    center: tuple[float, float, float]
    radius: float
    kind: PrimitiveKind = PrimitiveKind.SPHERE


@dataclass
class SceneConfig:
    """Serializable description of a scene.

    Attributes:
        spheres: List of sphere configurations, each a dict with
            "center" and "radius" keys.
    """

    spheres: list[dict[str, Any]] = field(default_factory=list)


class SceneManager:
    """Builds and tracks the scene held in the primitive fields.

    There is a single scene per process (the fields are module-level), so
    creating a SceneManager clears whatever was there before.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene, in
            insertion order.
    """

    def __init__(self) -> None:
        """Start from an empty scene."""
        self.spheres: list[SphereInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove all primitives from the scene."""
        clear_scene()
        self.spheres.clear()

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: Sphere center (x, y, z).
            radius: The radius of the sphere. Must be positive.

        Returns:
            The primitive index of the added sphere.

        Raises:
            ValueError: If the radius is not positive.
            RuntimeError: If the maximum number of primitives is exceeded.
        """
        index = add_sphere(center, radius)
        self.spheres.append(
            SphereInfo(primitive_index=index, center=tuple(center), radius=radius)
        )
        return index

    def get_sphere_count(self) -> int:
        """Number of spheres added through this manager."""
        return len(self.spheres)

    def get_primitive_count(self) -> int:
        """Get the number of primitives stored in the scene fields."""
        return get_primitive_count()

    def is_empty(self) -> bool:
        """Return True if the scene has no primitives."""
        return self.get_primitive_count() == 0

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene as a SceneConfig."""
        return SceneConfig(
            spheres=[{"center": s.center, "radius": s.radius} for s in self.spheres]
        )

    def from_config(self, config: SceneConfig) -> None:
        """Replace the scene with the contents of a SceneConfig.

        Every entry is checked before the current scene is cleared, so a
        rejected configuration leaves the scene as it was.

        Raises:
            ValueError: If a sphere entry is missing keys or is degenerate.
            RuntimeError: If the configuration holds too many primitives.
        """
        entries = []
        for i, sphere in enumerate(config.spheres):
            try:
                center = tuple(sphere["center"])
                radius = float(sphere["radius"])
            except KeyError as e:
                raise ValueError(f"Sphere {i} is missing required key {e}") from e
            if not (math.isfinite(radius) and radius > 0.0):
                raise ValueError(f"Sphere {i} radius must be positive, got {radius}")
            if len(center) != 3 or not all(math.isfinite(c) for c in center):
                raise ValueError(
                    f"Sphere {i} center must be three finite components, got {center}"
                )
            entries.append((center, radius))
        if len(entries) > MAX_PRIMITIVES:
            raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")

        self.clear()
        for center, radius in entries:
            self.add_sphere(center, radius)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as a plain dictionary."""
        return {"spheres": self.to_config().spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the scene with the contents of a dictionary.

        Args:
            data: A dictionary as produced by to_dict().
        """
        self.from_config(SceneConfig(spheres=list(data.get("spheres", []))))

    @staticmethod
    def get_max_primitives() -> int:
        """Get the maximum number of primitives supported."""
        return MAX_PRIMITIVES

    def __repr__(self) -> str:
        return f"SceneManager(spheres={self.get_sphere_count()})"
