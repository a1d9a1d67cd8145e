"""Tagged primitive variant with a single dispatching intersection routine.

Primitives are stored as a closed set of kinds rather than a class
hierarchy: each Primitive carries a PrimitiveKind tag plus the parameters
of every kind, and hit_primitive dispatches on the tag. Adding a new shape
means adding an enum member, its parameters and one branch here.
"""

from enum import IntEnum

import taichi as ti

from src.raytracer.core.ray import Ray, vec3
from src.raytracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record


class PrimitiveKind(IntEnum):
    """Enumeration of supported primitive kinds."""

    SPHERE = 0


@ti.dataclass
class Primitive:
    """A geometric primitive tagged with its kind.

    Attributes:
        kind: The PrimitiveKind of this primitive.
        center: Sphere center (used when kind == SPHERE).
        radius: Sphere radius (used when kind == SPHERE).
    """

    kind: ti.i32
    center: vec3
    radius: ti.f32


@ti.func
def make_sphere_primitive(center: vec3, radius: ti.f32) -> Primitive:
    """Wrap sphere parameters in a tagged Primitive."""
    return Primitive(kind=int(PrimitiveKind.SPHERE), center=center, radius=radius)


@ti.func
def hit_primitive(ray: Ray, prim: Primitive, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Intersect a ray with a primitive, dispatching on its kind.

    Unknown kinds never report a hit.
    """
    result = make_miss_record()
    if prim.kind == int(PrimitiveKind.SPHERE):
        result = hit_sphere(ray, Sphere(center=prim.center, radius=prim.radius), t_min, t_max)
    return result
