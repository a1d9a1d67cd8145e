"""Rays, 3-vector helpers and the random directions used for diffuse bounces.

Everything here except unit_vector() runs inside Taichi kernels. Points,
directions and colors all share the vec3 type.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.core.ray import Ray, ray_at, vec3
    >>>
    >>> @ti.kernel
    ... def tip() -> vec3:
    ...     ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -2.0))
    ...     return ray_at(ray, 0.5)  # (0, 0, -1)
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Components below this magnitude count as zero
NEAR_ZERO_EPSILON = 1e-8

# Attempts before random_in_unit_sphere gives up and returns +z
_MAX_REJECTION_TRIES = 100


@ti.dataclass
class Ray:
    """Half-line origin + t * direction.

    The direction keeps whatever length it was built with; intersection
    distances are measured in units of that length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Point reached after parameter t (t < 0 lies behind the origin)."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector algebra
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Scale v to unit length. v must not be the zero vector."""
    return v / tm.length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """1 when every component of v is within NEAR_ZERO_EPSILON of zero."""
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random directions
# =============================================================================


@ti.func
def random_in_unit_sphere() -> vec3:
    """Uniform point strictly inside the unit ball, excluding a tiny core.

    Draws from the [-1, 1]^3 cube until a sample lands inside the ball.
    Excluding points next to the center keeps the result normalizable.
    """
    p = vec3(0.0, 0.0, 1.0)
    accepted = False
    for _ in range(_MAX_REJECTION_TRIES):
        if not accepted:
            q = 2.0 * vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32)) - 1.0
            if NEAR_ZERO_EPSILON < length_squared(q) < 1.0:
                p = q
                accepted = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Uniform direction on the unit sphere."""
    return normalize(random_in_unit_sphere())


def unit_vector(v: Sequence[float]) -> npt.NDArray[np.float64]:
    """Host-side normalization for camera and scene construction.

    Raises:
        ValueError: If v does not have exactly three components, or its
            length is zero or not finite.
    """
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {arr.shape}")
    norm = float(np.linalg.norm(arr))
    if norm == 0.0 or not np.isfinite(norm):
        raise ValueError(f"Cannot normalize degenerate vector {tuple(arr)}")
    return arr / norm
