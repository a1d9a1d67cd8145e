"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with ray-sphere intersection
    primitive: Tagged primitive variant dispatching intersection by kind

Intersection routines are Taichi functions (@ti.func) that return a
HitRecord; check its hit field before reading the rest.
"""

from .primitive import Primitive, PrimitiveKind, hit_primitive, make_sphere_primitive
from .sphere import HitRecord, Sphere, hit_sphere, make_miss_record, make_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "Primitive",
    "PrimitiveKind",
    "hit_primitive",
    "make_sphere_primitive",
]
