"""Sphere primitive with ray-sphere intersection.

This module provides the Sphere and HitRecord dataclasses and the quadratic
root-finding that intersects a ray with a sphere. The quadratic uses the
half-b formulation:

    a = dot(d, d)
    half_b = dot(oc, d)
    c = dot(oc, oc) - r^2
    discriminant = half_b^2 - a*c

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # hit_sphere(ray, sphere, t_min, t_max) is called from kernels
"""

import taichi as ti
import taichi.math as tm

from src.raytracer.core.ray import Ray, ray_at, vec3


@ti.dataclass
class Sphere:
    """Sphere given by its center and a positive radius.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: The ray parameter at the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: The unit surface normal at the intersection, oriented against
            the incoming ray. Only valid if hit == 1.
        front_face: 1 if the ray arrived from outside the surface, 0 if it
            hit the inside. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
    )


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection within (t_min, t_max).

    Substitutes the ray equation into |P - center|^2 = radius^2 and solves
    the resulting quadratic. The nearer root is preferred; if it lies outside
    the interval the farther root is tried. Both bounds are exclusive, so a
    small positive t_min suppresses self-intersection of scattered rays.

    Args:
        ray: The ray to test. Its direction need not be normalized.
        sphere: The sphere to test against.
        t_min: Lower bound of accepted ray parameters.
        t_max: Upper bound of accepted ray parameters.

    Returns:
        A HitRecord. Check the hit field to determine if an intersection
        occurred.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    half_b = tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius**2
    discriminant = half_b * half_b - a * c

    # Taichi requires outer-scope declaration
    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = t_min < root < t_max
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = t_min < root < t_max

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius

            # Orient the normal against the incoming ray
            front_face = 1
            normal = outward_normal
            if tm.dot(ray.direction, outward_normal) > 0.0:
                front_face = 0
                normal = -outward_normal

            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius within a Taichi kernel."""
    return Sphere(center=center, radius=radius)
