"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector algebra and random sampling
    config: Render configuration and Taichi initialization
    integrator: Diffuse shading and the per-pixel sampling kernels
    progressive: Progressive rendering wrapper around the integrator

All compute-intensive operations use Taichi kernels.
"""

from .config import RenderConfig, init_taichi
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    unit_vector,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from src.raytracer.core.integrator or src.raytracer.core.progressive.

__all__ = [
    "RenderConfig",
    "init_taichi",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "unit_vector",
]
