"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside
- Oblique hits and hit normals
- Ray starting inside sphere (far root)
- Ray missing sphere, sphere behind the ray
- Tangent rays (treated as misses)
- The t_min cutoff
"""

import math

import taichi as ti


def _hit(origin, direction, center, radius, t_min=None):
    """Intersect one ray with one sphere and return (hit, t, normal)."""
    from pathtracer.core.ray import Ray, vec3
    from pathtracer.geometry.sphere import T_MIN, Sphere, hit_sphere

    cutoff = T_MIN if t_min is None else t_min
    ox, oy, oz = (float(c) for c in origin)
    dx, dy, dz = (float(c) for c in direction)
    cx, cy, cz = (float(c) for c in center)
    r = float(radius)
    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    normal = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel():
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        sphere = Sphere(center=vec3(cx, cy, cz), radius=r)
        record = hit_sphere(ray, sphere, cutoff)
        hit[None] = record.hit
        t_val[None] = record.t
        normal[None] = record.normal

    test_kernel()
    n = normal[None]
    return hit[None], t_val[None], (n[0], n[1], n[2])


class TestSphereBasics:
    """Tests for Sphere dataclass and basic operations."""

    def test_make_sphere(self):
        """Test make_sphere convenience function."""
        from pathtracer.geometry.sphere import make_sphere, vec3

        center_result = ti.Vector.field(3, dtype=ti.f64, shape=())
        radius_result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            sphere = make_sphere(vec3(1.0, 2.0, 3.0), 0.5)
            center_result[None] = sphere.center
            radius_result[None] = sphere.radius

        test_kernel()
        c = center_result[None]
        assert abs(c[0] - 1.0) < 1e-12
        assert abs(c[1] - 2.0) < 1e-12
        assert abs(c[2] - 3.0) < 1e-12
        assert abs(radius_result[None] - 0.5) < 1e-12


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_hit_from_outside(self):
        """Test a head-on hit: t is distance minus radius, normal faces the ray."""
        hit, t, n = _hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -3.0), 1.0)
        assert hit == 1
        assert abs(t - 2.0) < 1e-9
        assert abs(n[0]) < 1e-9
        assert abs(n[1]) < 1e-9
        assert abs(n[2] - 1.0) < 1e-9

    def test_oblique_hit(self):
        """Test a ray hitting a large sphere off-axis."""
        hit, t, n = _hit((0.0, 0.0, 0.0), (-0.6, 0.0, -0.8), (0.0, 0.0, -8.0), 5.0)
        assert hit == 1
        assert abs(t - 5.0) < 1e-9
        assert abs(n[0] + 0.6) < 1e-9
        assert abs(n[1]) < 1e-9
        assert abs(n[2] - 0.8) < 1e-9

    def test_ray_from_center_uses_far_root(self):
        """Test that a ray starting at the center hits the far side."""
        hit, t, n = _hit((0.0, 0.0, -5.0), (0.0, 0.0, -1.0), (0.0, 0.0, -5.0), 5.0)
        assert hit == 1
        assert abs(t - 5.0) < 1e-9
        # Outward normal, not flipped toward the ray
        assert abs(n[2] + 1.0) < 1e-9

    def test_ray_inside_off_center(self):
        """Test a ray starting inside but away from the center."""
        hit, t, _ = _hit((0.0, 0.0, -1.0), (0.0, 0.0, -1.0), (0.0, 0.0, -3.0), 4.0)
        assert hit == 1
        # Far side at z = -7
        assert abs(t - 6.0) < 1e-9

    def test_miss(self):
        """Test a ray passing well beside the sphere."""
        hit, _, _ = _hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, -3.0), 1.0)
        assert hit == 0

    def test_sphere_behind_ray(self):
        """Test that a sphere behind the origin is not hit."""
        hit, _, _ = _hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, -3.0), 1.0)
        assert hit == 0

    def test_tangent_ray_is_a_miss(self):
        """Test that a ray grazing the sphere exactly is not a hit."""
        hit, _, _ = _hit((1.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -3.0), 1.0)
        assert hit == 0

    def test_near_root_below_t_min_uses_far_root(self):
        """Test a ray starting on the surface, pointing inward."""
        hit, t, _ = _hit((0.0, 0.0, -2.0), (0.0, 0.0, -1.0), (0.0, 0.0, -3.0), 1.0)
        assert hit == 1
        assert abs(t - 2.0) < 1e-9

    def test_ray_leaving_surface_misses(self):
        """Test a ray starting on the surface and pointing away."""
        hit, _, _ = _hit((0.0, 0.0, -2.0), (0.0, 0.0, 1.0), (0.0, 0.0, -3.0), 1.0)
        assert hit == 0

    def test_t_min_constant(self):
        """Test the default self-intersection cutoff."""
        from pathtracer.geometry.sphere import T_MIN

        assert math.isclose(T_MIN, 0.01)

    def test_hit_just_beyond_custom_t_min(self):
        """Test that a hit closer than t_min is rejected in favour of the far root."""
        hit, t, _ = _hit((0.0, 0.0, -1.95), (0.0, 0.0, -1.0), (0.0, 0.0, -3.0), 1.0, 0.1)
        assert hit == 1
        assert abs(t - 2.05) < 1e-9
