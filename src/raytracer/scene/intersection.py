"""Scene-level primitive storage and closest-hit intersection.

The scene is an ordered collection of tagged primitives stored in Taichi
fields (Structure of Arrays). It is built once on the host before rendering
and only read by kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.scene.intersection import (
    ...     add_sphere, clear_scene, intersect_scene
    ... )
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5)
    >>> add_sphere((0.0, -100.5, -1.0), 100.0)
    >>> # intersect_scene(ray, t_min, t_max) is called from kernels
"""

import math
from collections.abc import Sequence
from typing import Any

import taichi as ti

from src.raytracer.core.ray import Ray, vec3
from src.raytracer.geometry.primitive import Primitive, PrimitiveKind, hit_primitive
from src.raytracer.geometry.sphere import HitRecord, make_miss_record

# Capacity of the primitive fields
MAX_PRIMITIVES = 1024

# Primitive storage: Structure of Arrays layout
primitive_kinds = ti.field(dtype=ti.i32, shape=MAX_PRIMITIVES)
primitive_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PRIMITIVES)
primitive_radii = ti.field(dtype=ti.f32, shape=MAX_PRIMITIVES)
num_primitives = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all primitives from the scene.

    Resets the primitive count to zero. Field data is overwritten when new
    primitives are added.
    """
    num_primitives[None] = 0


def add_sphere(center: Sequence[float], radius: float) -> int:
    """Append a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere. Must be positive.

    Returns:
        The index of the added primitive.

    Raises:
        ValueError: If the radius is not a positive finite number or the
            center is not three finite components.
        RuntimeError: If the maximum number of primitives is exceeded.
    """
    if not (math.isfinite(radius) and radius > 0.0):
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    if len(center) != 3 or not all(math.isfinite(c) for c in center):
        raise ValueError(f"Sphere center must be three finite components, got {center}")

    idx = num_primitives[None]
    if idx >= MAX_PRIMITIVES:
        raise RuntimeError(f"Maximum number of primitives ({MAX_PRIMITIVES}) exceeded")
    primitive_kinds[idx] = int(PrimitiveKind.SPHERE)
    primitive_centers[idx] = [float(center[0]), float(center[1]), float(center[2])]
    primitive_radii[idx] = float(radius)
    num_primitives[None] = idx + 1
    return idx


def get_primitive_count() -> int:
    """Get the number of primitives in the scene."""
    return int(num_primitives[None])


@ti.func
def get_primitive(i: ti.i32) -> Primitive:
    """Read primitive i back from the field storage."""
    return Primitive(
        kind=primitive_kinds[i],
        center=primitive_centers[i],
        radius=primitive_radii[i],
    )


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Find the closest intersection of a ray with the scene.

    Tests every primitive in insertion order, shrinking the upper bound to
    the closest hit found so far so later primitives cannot report a farther
    hit.

    Args:
        ray: The ray to test.
        t_min: Lower bound of accepted ray parameters (exclusive).
        t_max: Upper bound of accepted ray parameters (exclusive).

    Returns:
        The nearest HitRecord, or a miss record if nothing was hit.
    """
    closest_t = t_max
    result = make_miss_record()

    n = num_primitives[None]
    for i in range(n):
        rec = hit_primitive(ray, get_primitive(i), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result


# Scratch fields for host-side queries
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _trace_closest(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
):
    ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
    rec = intersect_scene(ray, t_min, t_max)
    _query_hit[None] = rec.hit
    _query_t[None] = rec.t
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal
    _query_front_face[None] = rec.front_face


def query_closest_hit(
    origin: Sequence[float],
    direction: Sequence[float],
    t_min: float = 1e-3,
    t_max: float = 1e10,
) -> dict[str, Any] | None:
    """Run a closest-hit query from Python.

    Useful for inspecting scenes outside Taichi kernels.

    Args:
        origin: Ray origin (x, y, z).
        direction: Ray direction (x, y, z).
        t_min: Lower bound of accepted ray parameters.
        t_max: Upper bound of accepted ray parameters.

    Returns:
        A dictionary with t, point, normal and front_face, or None on a miss.
    """
    _trace_closest(
        origin[0], origin[1], origin[2],
        direction[0], direction[1], direction[2],
        t_min, t_max,
    )
    if _query_hit[None] == 0:
        return None
    point = _query_point[None]
    normal = _query_normal[None]
    return {
        "t": float(_query_t[None]),
        "point": (float(point[0]), float(point[1]), float(point[2])),
        "normal": (float(normal[0]), float(normal[1]), float(normal[2])),
        "front_face": bool(_query_front_face[None]),
    }
