"""Unit tests for the path tracing integrator.

Tests cover:
- Sky gradient background
- ray_color depth handling (depth 0, misses, attenuation products)
- Material dispatch through the unified material table
- Render target setup and running-mean accumulation
- Image orientation of the NumPy export
"""

import numpy as np
import pytest
import taichi as ti


class TestBackground:
    """Tests for the sky gradient."""

    def _background(self, direction):
        from pathtracer.core.integrator import background
        from pathtracer.core.ray import vec3

        dx, dy, dz = direction
        result = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = background(vec3(dx, dy, dz))

        test_kernel()
        return result[None].to_numpy()

    def test_straight_up_is_blue(self):
        """Test the zenith color."""
        assert np.allclose(self._background((0.0, 1.0, 0.0)), (0.5, 0.7, 1.0))

    def test_straight_down_is_white(self):
        """Test the nadir color."""
        assert np.allclose(self._background((0.0, -1.0, 0.0)), (1.0, 1.0, 1.0))

    def test_horizon_is_midpoint(self):
        """Test a horizontal direction blends halfway."""
        assert np.allclose(self._background((0.0, 0.0, -1.0)), (0.75, 0.85, 1.0))

    def test_gradient_endpoints_by_name(self):
        """Test that the bottom endpoint is white and the top endpoint is blue."""
        from pathtracer.core.integrator import BOTTOM_COLOR, TOP_COLOR

        assert np.allclose(self._background((0.0, -1.0, 0.0)), BOTTOM_COLOR.to_numpy())
        assert np.allclose(self._background((0.0, 1.0, 0.0)), TOP_COLOR.to_numpy())
        assert np.allclose(BOTTOM_COLOR.to_numpy(), (1.0, 1.0, 1.0))


class TestRayColor:
    """Tests for trace_ray / ray_color."""

    def test_depth_zero_is_black(self):
        """Test that no light is gathered with zero depth."""
        from pathtracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=0) == (0.0, 0.0, 0.0)

    def test_negative_depth_is_black(self):
        """Test that negative depth is treated like zero."""
        from pathtracer.core.integrator import trace_ray

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=-3) == (0.0, 0.0, 0.0)

    def test_miss_returns_background(self):
        """Test that a ray missing everything sees the sky."""
        from pathtracer.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), depth=1)
        assert np.allclose(color, (0.5, 0.7, 1.0))

    def test_direction_is_normalized(self):
        """Test that trace_ray normalizes its input direction."""
        from pathtracer.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 5.0, 0.0), depth=1)
        assert np.allclose(color, (0.5, 0.7, 1.0))

    def test_mirror_bounce_multiplies_albedo(self):
        """Test one bounce off a perfect mirror into the sky."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -2.0), 1.0, albedo=(0.5, 0.25, 1.0), fuzz=0.0)

        # Head-on ray bounces straight back along +z and sees the horizon color
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=5)
        horizon = np.array((0.75, 0.85, 1.0))
        assert np.allclose(color, horizon * (0.5, 0.25, 1.0))

    def test_hit_with_depth_one_is_black(self):
        """Test that a hit consuming the last depth contributes black."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0.0, 0.0, -2.0), 1.0, albedo=(0.9, 0.9, 0.9), fuzz=0.0)

        assert trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=1) == (0.0, 0.0, 0.0)

    def test_index_matched_glass_is_transparent(self):
        """Test that an eta = 1 clear sphere passes the sky color through."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0.0, 0.0, -3.0), 1.0, eta=1.0)

        # Straight through both surfaces and out to the sky behind
        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), depth=10)
        assert np.allclose(color, (0.75, 0.85, 1.0))

    def test_diffuse_color_is_bounded(self):
        """Test that diffuse paths stay within [0, 1]."""
        from pathtracer.core.integrator import trace_ray
        from pathtracer.scene.presets import create_diffuse_spheres_scene

        create_diffuse_spheres_scene()
        for _ in range(20):
            color = trace_ray((0.0, 0.0, 0.0), (0.0, -0.2, -1.0), depth=50)
            for c in color:
                assert 0.0 <= c <= 1.0


class TestRenderTarget:
    """Tests for render target management and accumulation."""

    def test_setup_sets_dimensions(self):
        """Test that setup_render_target records the active size."""
        from pathtracer.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(16, 9)
        assert get_image_dimensions() == (16, 9)

    @pytest.mark.parametrize("size", [(1, 10), (10, 1), (0, 0), (4096, 10)])
    def test_invalid_dimensions_rejected(self, size):
        """Test that sizes below 2 or above the maximum raise ValueError."""
        from pathtracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(*size)

    def test_average_of_identical_colors(self):
        """Test that averaging N identical samples returns that color."""
        from pathtracer.core.integrator import (
            accumulate_color,
            get_normalized_image_numpy,
            get_total_samples,
            setup_render_target,
        )

        setup_render_target(4, 3)
        accumulate_color((0.2, 0.4, 0.6), num_samples=7)

        assert get_total_samples() == 7
        image = get_normalized_image_numpy()
        assert image.shape == (3, 4, 3)
        assert np.allclose(image, (0.2, 0.4, 0.6), atol=1e-12)

    def test_running_mean_of_two_colors(self):
        """Test the mean of two different samples."""
        from pathtracer.core.integrator import (
            accumulate_color,
            get_normalized_image_numpy,
            setup_render_target,
        )

        setup_render_target(2, 2)
        accumulate_color((0.0, 0.0, 0.0))
        accumulate_color((1.0, 0.5, 0.25))
        assert np.allclose(get_normalized_image_numpy(), (0.5, 0.25, 0.125))

    def test_clear_resets_samples(self):
        """Test that clear_render_target zeroes the accumulator."""
        from pathtracer.core.integrator import (
            accumulate_color,
            clear_render_target,
            get_normalized_image_numpy,
            get_total_samples,
            setup_render_target,
        )

        setup_render_target(2, 2)
        accumulate_color((1.0, 1.0, 1.0), num_samples=3)
        clear_render_target()
        assert get_total_samples() == 0
        assert np.allclose(get_normalized_image_numpy(), 0.0)

    def test_empty_scene_render_is_sky(self):
        """Test that an empty scene renders the vertical sky gradient, top row first."""
        from pathtracer.camera.pinhole import PinholeCamera, setup_camera
        from pathtracer.core.integrator import (
            get_normalized_image_numpy,
            render_image,
            setup_render_target,
        )

        setup_camera(PinholeCamera(aspect_ratio=1.0))
        setup_render_target(8, 8)
        render_image(num_samples=2, max_depth=5)

        image = get_normalized_image_numpy()
        # Blue channel is 1 everywhere; red decreases toward the top of the image
        assert np.allclose(image[:, :, 2], 1.0)
        assert image[0, 4, 0] < image[-1, 4, 0]

    def test_render_sample_single_pixel(self):
        """Test render_sample returns a color without accumulating it."""
        from pathtracer.camera.pinhole import PinholeCamera, setup_camera
        from pathtracer.core.integrator import get_total_samples, render_sample, setup_render_target

        setup_camera(PinholeCamera(aspect_ratio=1.0))
        setup_render_target(8, 8)
        color = render_sample(4, 7, max_depth=5)
        assert abs(color[2] - 1.0) < 1e-12
        assert get_total_samples() == 0

    def test_per_pixel_sample_counts(self):
        """Test that every active pixel counts the samples it received."""
        from pathtracer.core.integrator import accumulate_color, get_sample_count, setup_render_target

        setup_render_target(3, 2)
        accumulate_color((0.5, 0.5, 0.5), num_samples=4)
        counts = get_sample_count().to_numpy()[:3, :2]
        assert (counts == 4).all()
