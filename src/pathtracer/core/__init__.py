"""Core rendering module.

Components:
    ray: Ray data structure, vector algebra and random sampling helpers
    integrator: Path-traced ray color, render target and render kernels
    progressive: ProgressiveRenderer wrapper for batched accumulation

The integrator follows each camera ray through at most ``max_depth`` scatter
events, multiplying material attenuations and finishing on the sky gradient.
Samples are averaged per pixel with a running mean.
"""

from .ray import (
    Ray,
    ScatterRecord,
    cross_product,
    divide,
    inner_product,
    length,
    length_squared,
    make_ray,
    random_offset,
    random_uniform,
    random_unit_vector,
    ray_at,
    reflect,
    scale,
    schlick_reflectance,
    unit_vector,
    vec3,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from pathtracer.core.integrator or pathtracer.core.progressive when needed.

__all__ = [
    "Ray",
    "ScatterRecord",
    "ray_at",
    "make_ray",
    "vec3",
    "scale",
    "divide",
    "length",
    "length_squared",
    "inner_product",
    "cross_product",
    "unit_vector",
    "reflect",
    "schlick_reflectance",
    "random_uniform",
    "random_offset",
    "random_unit_vector",
]
