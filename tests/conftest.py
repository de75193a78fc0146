"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session. Modules that
declare Taichi fields are imported inside tests, after initialization.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate fields allocated by modules imported earlier.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene, material and render target state around each test."""
    from pathtracer.materials.dielectric import clear_dielectric_materials
    from pathtracer.materials.lambertian import clear_lambertian_materials
    from pathtracer.materials.metal import clear_metal_materials
    from pathtracer.scene.intersection import clear_scene
    from pathtracer.scene.manager import _clear_material_tracking

    def _clear_all():
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()

        from pathtracer.core.integrator import clear_render_target

        clear_render_target()

    _clear_all()

    yield

    _clear_all()
