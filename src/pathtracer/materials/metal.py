"""Metal (specular reflective) material implementation.

Metals mirror the incoming ray about the surface normal:

    R = D - 2(D . N)N

and blur the reflection by adding a random unit vector scaled by ``fuzz``
before renormalizing. ``fuzz = 0`` is a perfect mirror, ``fuzz = 1`` the
blurriest allowed surface. The attenuation is the albedo.

A fuzzed direction can dip below the surface for grazing reflections. Such
rays are still emitted; the following intersection test decides where they
go.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.metal import scatter_metal
    >>> # Use within a Taichi kernel:
    >>> # record = scatter_metal(albedo, fuzz, ray_in, hit_t, normal)
"""

import taichi as ti

from pathtracer.core.ray import (
    Ray,
    ScatterRecord,
    random_unit_vector,
    ray_at,
    reflect,
    unit_vector,
    vec3,
)


@ti.func
def scatter_metal_with(
    albedo: vec3,
    fuzz: ti.f64,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
    random_direction: vec3,
) -> ScatterRecord:
    """Reflect a ray off a metal surface using a given random direction.

    Args:
        albedo: The reflective color.
        fuzz: Reflection blur in [0, 1].
        ray_in: The incoming ray.
        hit_t: Distance along ray_in to the hit point.
        normal: Outward unit normal at the hit point.
        random_direction: A unit vector drawn by the caller.

    Returns:
        A ScatterRecord with attenuation equal to the albedo and a ray from
        the hit point toward ``unit(reflect(d, n) + fuzz * random_direction)``.
    """
    reflected = reflect(ray_in.direction, normal)
    direction = unit_vector(reflected + fuzz * random_direction)
    origin = ray_at(ray_in, hit_t)
    return ScatterRecord(attenuation=albedo, ray=Ray(origin=origin, direction=direction))


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f64,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
) -> ScatterRecord:
    """Reflect a ray off a metal surface, drawing the fuzz from the Taichi RNG."""
    return scatter_metal_with(albedo, fuzz, ray_in, hit_t, normal, random_unit_vector())


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of metal materials in the scene
MAX_METAL_MATERIALS = 256

# Storage for metal material properties
metal_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_METAL_MATERIALS)
metal_fuzz = ti.field(dtype=ti.f64, shape=MAX_METAL_MATERIALS)
num_metal_materials = ti.field(dtype=ti.i32, shape=())


def clear_metal_materials() -> None:
    """Clear all metal materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_metal_materials[None] = 0


def add_metal_material(
    albedo: tuple[float, float, float],
    fuzz: float = 0.0,
) -> int:
    """Add a metal material to the material registry.

    Args:
        albedo: The reflective color as (R, G, B) tuple, components in [0, 1].
        fuzz: Reflection blur in [0, 1]. Default is 0 (perfect mirror).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
        ValueError: If fuzz is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    if fuzz < 0.0 or fuzz > 1.0:
        raise ValueError(f"Fuzz = {fuzz} is outside [0, 1].")

    idx = num_metal_materials[None]
    if idx >= MAX_METAL_MATERIALS:
        raise RuntimeError(f"Maximum number of metal materials ({MAX_METAL_MATERIALS}) exceeded")

    metal_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    metal_fuzz[idx] = fuzz
    num_metal_materials[None] = idx + 1
    return idx


def get_metal_material_count() -> int:
    """Get the number of metal materials in the registry."""
    return int(num_metal_materials[None])


@ti.func
def get_metal_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a metal material by index."""
    return metal_albedos[material_idx]


@ti.func
def get_metal_fuzz(material_idx: ti.i32) -> ti.f64:
    """Get the fuzz for a metal material by index."""
    return metal_fuzz[material_idx]


@ti.func
def scatter_metal_by_id(
    material_idx: ti.i32,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
) -> ScatterRecord:
    """Scatter off a registered metal material.

    Args:
        material_idx: The index of the material in the registry.
        ray_in: The incoming ray.
        hit_t: Distance along ray_in to the hit point.
        normal: Outward unit normal at the hit point.

    Returns:
        The ScatterRecord for this bounce.
    """
    albedo = get_metal_albedo(material_idx)
    fuzz = get_metal_fuzz(material_idx)
    return scatter_metal(albedo, fuzz, ray_in, hit_t, normal)
