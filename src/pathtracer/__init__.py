"""Monte Carlo sphere path tracer built on Taichi.

This package renders scenes of spheres with:
- Lambertian, metal and dielectric materials
- A sky gradient background
- Jittered multi-sampling with progressive accumulation
- PPM and PNG output with gamma 2

Subpackages:
    core: Ray algebra, integrator and progressive renderer
    geometry: Sphere primitive and intersection
    materials: Material scatter models and registries
    scene: Sphere arena, scene manager and presets
    camera: Pinhole camera with ray generation
    preview: Gamma encoding and image export

Call ``pathtracer.config.init_taichi()`` before importing the subpackages;
they allocate Taichi fields at import time.
"""

__version__ = "0.1.0"
