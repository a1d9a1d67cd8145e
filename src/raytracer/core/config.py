"""Render configuration and Taichi backend initialization.

RenderConfig collects the parameters consumed by camera and sampler
construction. Defaults reproduce the classic two-sphere render: a 400x200
image, 100 samples per pixel and at most 50 bounces per path.

Example:
    >>> from src.raytracer.core.config import RenderConfig, init_taichi
    >>> config = RenderConfig(width=200, height=100, samples_per_pixel=16)
    >>> init_taichi(config)
    'cpu'
"""

from dataclasses import asdict, dataclass
from typing import Any, Literal

import taichi as ti

# Taichi backends that init_taichi knows how to select
Arch = Literal["cpu", "gpu"]

DEFAULT_WIDTH = 400
DEFAULT_HEIGHT = 200
DEFAULT_SAMPLES_PER_PIXEL = 100
DEFAULT_MAX_DEPTH = 50
DEFAULT_SEED = 0


@dataclass(frozen=True)
class RenderConfig:
    """Parameters for a single render.

    Attributes:
        width: Output columns in pixels.
        height: Output rows in pixels.
        samples_per_pixel: Antialiasing sample count per pixel.
        max_depth: Maximum number of ray bounces (recursion bound).
        seed: Seed for Taichi's random number stream.
        arch: Taichi backend, "cpu" or "gpu".
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    max_depth: int = DEFAULT_MAX_DEPTH
    seed: int = DEFAULT_SEED
    arch: Arch = "cpu"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.samples_per_pixel <= 0:
            raise ValueError(
                f"samples_per_pixel must be positive, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.arch not in ("cpu", "gpu"):
            raise ValueError(f"Unknown Taichi arch: {self.arch!r}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height of the output image."""
        return self.width / self.height

    def to_dict(self) -> dict[str, Any]:
        """Convert the configuration to a plain dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Create a configuration from a dictionary.

        Unknown keys are rejected so typos do not silently fall back to
        defaults.

        Raises:
            ValueError: If the dictionary contains unknown keys or invalid values.
        """
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown render options: {sorted(unknown)}")
        return cls(**data)


def init_taichi(config: RenderConfig) -> str:
    """Initialize Taichi for the configured backend and seed.

    The seed feeds ti.random, the only random source used by the renderer,
    so two renders with the same config and scene produce the same image.
    When the GPU backend is requested but unavailable Taichi falls back to
    the CPU on its own.

    Args:
        config: The render configuration.

    Returns:
        The name of the requested backend.
    """
    arch = ti.gpu if config.arch == "gpu" else ti.cpu
    ti.init(arch=arch, random_seed=config.seed)
    return config.arch
