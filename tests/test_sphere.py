"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Tangent ray touching the silhouette
- Ray starting inside sphere (back face)
- Interval bounds on t
- Unnormalized ray directions
"""

import math

import taichi as ti


def _run_hit(origin, direction, center, radius, t_min=0.001, t_max=1000.0):
    """Intersect one ray with one sphere and return the record as a dict."""
    from src.raytracer.core.ray import Ray, vec3
    from src.raytracer.geometry.sphere import Sphere, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    normal = ti.field(dtype=ti.math.vec3, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())

    ox, oy, oz = (float(x) for x in origin)
    dx, dy, dz = (float(x) for x in direction)
    cx, cy, cz = (float(x) for x in center)
    r = float(radius)
    lo, hi = float(t_min), float(t_max)

    @ti.kernel
    def test_kernel():
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        sphere = Sphere(center=vec3(cx, cy, cz), radius=r)
        record = hit_sphere(ray, sphere, lo, hi)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal
        front_face[None] = record.front_face

    test_kernel()
    return {
        "hit": hit[None],
        "t": t_val[None],
        "point": point[None],
        "normal": normal[None],
        "front_face": front_face[None],
    }


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from src.raytracer.core.ray import vec3
        from src.raytracer.geometry.sphere import make_sphere

        center_result = ti.field(dtype=ti.math.vec3, shape=())
        radius_result = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        c = center_result[None]
        assert abs(c[0] - 1.0) < 1e-6
        assert abs(c[1] - 2.0) < 1e-6
        assert abs(c[2] - 3.0) < 1e-6
        assert abs(radius_result[None] - 0.5) < 1e-6

    def test_make_miss_record(self):
        from src.raytracer.geometry.sphere import make_miss_record

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            hit[None] = make_miss_record().hit

        test_kernel()
        assert hit[None] == 0


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        """Ray from z=5 toward a unit sphere at the origin hits at z=1."""
        rec = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 4.0) < 1e-5
        p = rec["point"]
        assert abs(p[0]) < 1e-5
        assert abs(p[1]) < 1e-5
        assert abs(p[2] - 1.0) < 1e-5
        n = rec["normal"]
        assert abs(n[2] - 1.0) < 1e-5
        assert rec["front_face"] == 1

    def test_hit_distance_is_distance_minus_radius(self):
        """Aiming at the center gives t = |origin - center| - radius."""
        origin = (1.0, 2.0, 3.0)
        center = (0.0, 0.0, -1.0)
        radius = 0.5
        direction = tuple(c - o for c, o in zip(center, origin))
        distance = math.sqrt(sum(d * d for d in direction))
        unit_dir = tuple(d / distance for d in direction)

        rec = _run_hit(origin, unit_dir, center, radius)

        assert rec["hit"] == 1
        assert abs(rec["t"] - (distance - radius)) < 1e-4
        # Normal is anti-parallel to the ray direction
        n = rec["normal"]
        cos_angle = sum(n[k] * unit_dir[k] for k in range(3))
        assert abs(cos_angle + 1.0) < 1e-4

    def test_miss_when_offset_exceeds_radius(self):
        """A ray passing farther than the radius from the center misses."""
        rec = _run_hit((0.6, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 0.5)
        assert rec["hit"] == 0

    def test_hit_when_offset_within_radius(self):
        rec = _run_hit((0.4, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 0.5)
        assert rec["hit"] == 1
        # Entry point z = sqrt(0.25 - 0.16) = 0.3
        assert abs(rec["t"] - 4.7) < 1e-4

    def test_tangent_ray_grazes_sphere(self):
        """A ray at exactly the radius touches once; both roots coincide."""
        rec = _run_hit((0.5, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-5
        p = rec["point"]
        assert abs(p[0] - 0.5) < 1e-5
        assert abs(p[2] + 1.0) < 1e-5
        n = rec["normal"]
        assert abs(n[0] - 1.0) < 1e-5
        assert abs(n[1]) < 1e-5
        assert abs(n[2]) < 1e-5
        assert rec["front_face"] == 1

    def test_sphere_behind_ray_misses(self):
        rec = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_ray_inside_sphere_hits_back_face(self):
        """A ray starting inside reports the far root with a flipped normal."""
        rec = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)

        assert rec["hit"] == 1
        assert abs(rec["t"] - 1.0) < 1e-5
        assert rec["front_face"] == 0
        n = rec["normal"]
        # Outward normal is (0, 0, -1); oriented against the ray it is (0, 0, 1)
        assert abs(n[2] - 1.0) < 1e-5

    def test_normal_is_unit_length(self):
        rec = _run_hit((0.3, -0.2, 4.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 2.0)
        assert rec["hit"] == 1
        n = rec["normal"]
        assert abs(math.sqrt(n[0] ** 2 + n[1] ** 2 + n[2] ** 2) - 1.0) < 1e-5


class TestSphereInterval:
    """Tests for the (t_min, t_max) acceptance interval."""

    def test_t_max_excludes_far_hit(self):
        rec = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=3.0)
        assert rec["hit"] == 0

    def test_near_root_below_t_min_falls_back_to_far_root(self):
        rec = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.5)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 6.0) < 1e-5
        assert rec["front_face"] == 0

    def test_root_equal_to_t_max_is_rejected(self):
        """Interval bounds are exclusive."""
        rec = _run_hit(
            (0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=0.0, t_max=4.0
        )
        assert rec["hit"] == 0

    def test_unnormalized_direction_scales_t(self):
        """t is measured in units of the direction's length."""
        rec = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert abs(rec["t"] - 2.0) < 1e-5
        assert abs(rec["point"][2] - 1.0) < 1e-5


class TestPrimitiveDispatch:
    """Tests for the tagged primitive variant."""

    def test_sphere_primitive_matches_hit_sphere(self):
        from src.raytracer.core.ray import Ray, vec3
        from src.raytracer.geometry.primitive import hit_primitive, make_sphere_primitive

        hit = ti.field(dtype=ti.i32, shape=())
        t_val = ti.field(dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
            prim = make_sphere_primitive(vec3(0.0, 0.0, -1.0), 0.5)
            rec = hit_primitive(ray, prim, 0.001, 1e10)
            hit[None] = rec.hit
            t_val[None] = rec.t

        test_kernel()
        assert hit[None] == 1
        assert abs(t_val[None] - 0.5) < 1e-5

    def test_unknown_kind_never_hits(self):
        from src.raytracer.core.ray import Ray, vec3
        from src.raytracer.geometry.primitive import Primitive, hit_primitive

        hit = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
            prim = Primitive(kind=99, center=vec3(0.0, 0.0, -1.0), radius=0.5)
            hit[None] = hit_primitive(ray, prim, 0.001, 1e10).hit

        test_kernel()
        assert hit[None] == 0

    def test_primitive_kind_values(self):
        from src.raytracer.geometry.primitive import PrimitiveKind

        assert int(PrimitiveKind.SPHERE) == 0
        assert len(PrimitiveKind) == 1
