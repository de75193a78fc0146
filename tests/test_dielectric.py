"""Unit tests for the dielectric material.

Tests cover:
- Index-matched boundary leaves the direction unchanged
- Refraction entering and leaving a denser medium (Snell's law)
- Total internal reflection
- Schlick-driven reflection choice
- Attenuation and scatter origin
- Material registry and validation
"""

import math

import pytest
import taichi as ti

SQRT3 = math.sqrt(3.0)


def _scatter_dielectric(eta, direction, normal, reflect_sample, albedo=(1.0, 1.0, 1.0)):
    """Scatter a ray hitting the origin and return (origin, direction, attenuation)."""
    from pathtracer.core.ray import Ray, vec3
    from pathtracer.materials.dielectric import scatter_dielectric_with

    dx, dy, dz = direction
    nx, ny, nz = normal
    ar, ag, ab = albedo
    origin_out = ti.Vector.field(3, dtype=ti.f64, shape=())
    direction_out = ti.Vector.field(3, dtype=ti.f64, shape=())
    attenuation_out = ti.Vector.field(3, dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel():
        d = vec3(dx, dy, dz)
        # Start one unit behind the origin so the hit is at t = 1
        ray_in = Ray(origin=-d, direction=d)
        record = scatter_dielectric_with(
            eta, vec3(ar, ag, ab), ray_in, 1.0, vec3(nx, ny, nz), reflect_sample
        )
        origin_out[None] = record.ray.origin
        direction_out[None] = record.ray.direction
        attenuation_out[None] = record.attenuation

    test_kernel()
    return origin_out[None], direction_out[None], attenuation_out[None]


class TestDielectricRefraction:
    """Tests for refraction through a dielectric boundary."""

    def test_index_matched_keeps_direction(self):
        """Test that eta = 1 passes the ray straight through."""
        _, d, _ = _scatter_dielectric(1.0, (0.6, -0.8, 0.0), (0.0, 1.0, 0.0), 0.99)
        assert abs(d[0] - 0.6) < 1e-12
        assert abs(d[1] + 0.8) < 1e-12
        assert abs(d[2]) < 1e-12

    def test_entering_denser_medium(self):
        """Test 60 degree incidence into eta = sqrt(3) bends to 30 degrees."""
        incoming = (SQRT3 / 2.0, -0.5, 0.0)
        _, d, _ = _scatter_dielectric(SQRT3, incoming, (0.0, 1.0, 0.0), 0.99)
        assert abs(d[0] - 0.5) < 1e-12
        assert abs(d[1] + SQRT3 / 2.0) < 1e-12
        assert abs(d[2]) < 1e-12

    def test_leaving_denser_medium(self):
        """Test a ray exiting eta = sqrt(3) at 30 degrees bends to 60 degrees."""
        incoming = (0.5, SQRT3 / 2.0, 0.0)
        # Outward normal points along the ray: the ray is inside the object
        _, d, _ = _scatter_dielectric(SQRT3, incoming, (0.0, 1.0, 0.0), 0.99)
        assert abs(d[0] - SQRT3 / 2.0) < 1e-12
        assert abs(d[1] - 0.5) < 1e-12
        assert abs(d[2]) < 1e-12

    def test_refracted_direction_is_unit(self):
        """Test that refracted directions are normalized."""
        incoming = (0.3, -0.9, 0.3)
        norm = math.sqrt(sum(c * c for c in incoming))
        incoming = tuple(c / norm for c in incoming)
        _, d, _ = _scatter_dielectric(1.5, incoming, (0.0, 1.0, 0.0), 0.99)
        assert abs(math.sqrt(d[0] ** 2 + d[1] ** 2 + d[2] ** 2) - 1.0) < 1e-12


class TestDielectricReflection:
    """Tests for reflection at a dielectric boundary."""

    def test_total_internal_reflection(self):
        """Test that a steep ray leaving glass is reflected whatever the draw."""
        incoming = (SQRT3 / 2.0, 0.5, 0.0)
        _, d, _ = _scatter_dielectric(1.5, incoming, (0.0, 1.0, 0.0), 0.99)
        assert abs(d[0] - SQRT3 / 2.0) < 1e-12
        assert abs(d[1] + 0.5) < 1e-12

    def test_cannot_refract_flag(self):
        """Test cannot_refract for a TIR ray and for an entering ray."""
        from pathtracer.core.ray import vec3
        from pathtracer.materials.dielectric import cannot_refract

        tir = ti.field(dtype=ti.i32, shape=())
        entering = ti.field(dtype=ti.i32, shape=())
        half = SQRT3 / 2.0

        @ti.kernel
        def test_kernel():
            normal = vec3(0.0, 1.0, 0.0)
            tir[None] = cannot_refract(1.5, vec3(half, 0.5, 0.0), normal)
            entering[None] = cannot_refract(1.5, vec3(half, -0.5, 0.0), normal)

        test_kernel()
        assert tir[None] == 1
        assert entering[None] == 0

    def test_low_draw_reflects(self):
        """Test that a draw below the Schlick reflectance mirrors the ray."""
        incoming = (SQRT3 / 2.0, -0.5, 0.0)
        _, d, _ = _scatter_dielectric(1.5, incoming, (0.0, 1.0, 0.0), 0.0)
        assert abs(d[0] - SQRT3 / 2.0) < 1e-12
        assert abs(d[1] - 0.5) < 1e-12

    def test_fresnel_reflectance_normal_incidence(self):
        """Test that reflectance at normal incidence equals R0."""
        from pathtracer.core.ray import vec3
        from pathtracer.materials.dielectric import fresnel_reflectance

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = fresnel_reflectance(1.5, vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert abs(result[None] - 0.04) < 1e-12


class TestDielectricRecord:
    """Tests for the scatter record contents."""

    def test_attenuation_is_albedo_and_origin_is_hit_point(self):
        """Test the scatter record of a tinted glass."""
        origin, _, attenuation = _scatter_dielectric(
            1.5, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), 0.99, albedo=(0.9, 0.8, 0.7)
        )
        assert abs(origin[0]) < 1e-12 and abs(origin[1]) < 1e-12 and abs(origin[2]) < 1e-12
        assert abs(attenuation[0] - 0.9) < 1e-12
        assert abs(attenuation[1] - 0.8) < 1e-12
        assert abs(attenuation[2] - 0.7) < 1e-12

    def test_sampled_scatter_stays_unit(self):
        """Test the RNG-driven form produces unit directions."""
        from pathtracer.core.ray import Ray, length, vec3
        from pathtracer.materials.dielectric import scatter_dielectric

        n = 200
        lengths = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                d = vec3(0.6, -0.8, 0.0)
                record = scatter_dielectric(
                    1.5, vec3(1.0, 1.0, 1.0), Ray(origin=-d, direction=d), 1.0, vec3(0.0, 1.0, 0.0)
                )
                lengths[i] = length(record.ray.direction)

        test_kernel()
        assert abs(lengths.to_numpy() - 1.0).max() < 1e-9


class TestDielectricRegistry:
    """Tests for the dielectric material registry."""

    def test_add_and_read_back(self):
        """Test that eta and albedo are stored."""
        from pathtracer.materials.dielectric import (
            add_dielectric_material,
            get_dielectric_albedo,
            get_dielectric_eta,
            get_dielectric_material_count,
        )

        idx = add_dielectric_material(eta=1.33, albedo=(0.9, 1.0, 0.9))
        assert get_dielectric_material_count() == 1

        eta = ti.field(dtype=ti.f64, shape=())
        albedo = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            eta[None] = get_dielectric_eta(i)
            albedo[None] = get_dielectric_albedo(i)

        test_kernel(idx)
        assert abs(eta[None] - 1.33) < 1e-12
        assert abs(albedo[None][0] - 0.9) < 1e-12

    def test_default_is_clear_glass(self):
        """Test the default parameters."""
        from pathtracer.materials.dielectric import add_dielectric_material, dielectric_etas

        idx = add_dielectric_material()
        assert abs(dielectric_etas[idx] - 1.5) < 1e-12

    def test_eta_below_one_rejected(self):
        """Test that eta < 1 raises ValueError."""
        from pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError):
            add_dielectric_material(eta=0.9)

    def test_invalid_albedo_rejected(self):
        """Test that albedo outside [0, 1] raises ValueError."""
        from pathtracer.materials.dielectric import add_dielectric_material

        with pytest.raises(ValueError):
            add_dielectric_material(eta=1.5, albedo=(1.0, 1.0, 1.5))

    def test_scatter_by_id_uses_registry(self):
        """Test that scatter_dielectric_by_id reads eta and albedo of the given slot."""
        import numpy as np

        from pathtracer.core.ray import Ray, vec3
        from pathtracer.materials.dielectric import add_dielectric_material, scatter_dielectric_by_id

        add_dielectric_material(eta=2.4)
        idx = add_dielectric_material(eta=1.0, albedo=(0.5, 0.6, 0.7))

        direction = ti.Vector.field(3, dtype=ti.f64, shape=())
        attenuation = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel(i: ti.i32):
            d = vec3(0.6, -0.8, 0.0)
            record = scatter_dielectric_by_id(i, Ray(origin=-d, direction=d), 1.0, vec3(0.0, 1.0, 0.0))
            direction[None] = record.ray.direction
            attenuation[None] = record.attenuation

        test_kernel(idx)
        # Index-matched slot: straight through whatever the draw
        assert np.allclose(direction[None].to_numpy(), (0.6, -0.8, 0.0))
        assert np.allclose(attenuation[None].to_numpy(), (0.5, 0.6, 0.7))
