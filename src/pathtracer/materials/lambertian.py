"""Lambertian (ideal diffuse) material implementation.

A Lambertian surface scatters light around the surface normal: the outgoing
direction is the normal plus a random unit vector, normalized. This gives a
distribution that favours directions close to the normal, approximately
cosine-weighted over the hemisphere. The attenuation is the albedo.

Known degeneracy: if the random unit vector nearly cancels the normal, the
sum is close to the zero vector and normalizing it yields non-finite
components. This is accepted as-is rather than resampled, so the scatter
distribution is exactly ``unit(normal + random_unit_vector())``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.lambertian import scatter_lambertian
    >>> # Use within a Taichi kernel:
    >>> # record = scatter_lambertian(albedo, ray_in, hit_t, normal)
"""

import taichi as ti

from pathtracer.core.ray import (
    Ray,
    ScatterRecord,
    random_unit_vector,
    ray_at,
    unit_vector,
    vec3,
)


@ti.func
def scatter_lambertian_with(
    albedo: vec3,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
    random_direction: vec3,
) -> ScatterRecord:
    """Scatter a ray off a Lambertian surface using a given random direction.

    This is the deterministic form of scatter_lambertian(); the caller
    supplies the random unit vector.

    Args:
        albedo: The diffuse reflectance color.
        ray_in: The incoming ray.
        hit_t: Distance along ray_in to the hit point.
        normal: Outward unit normal at the hit point.
        random_direction: A unit vector drawn by the caller.

    Returns:
        A ScatterRecord with attenuation equal to the albedo and a ray from
        the hit point toward ``unit(normal + random_direction)``.
    """
    origin = ray_at(ray_in, hit_t)
    direction = unit_vector(normal + random_direction)
    return ScatterRecord(attenuation=albedo, ray=Ray(origin=origin, direction=direction))


@ti.func
def scatter_lambertian(albedo: vec3, ray_in: Ray, hit_t: ti.f64, normal: vec3) -> ScatterRecord:
    """Scatter a ray off a Lambertian surface, drawing from the Taichi RNG."""
    return scatter_lambertian_with(albedo, ray_in, hit_t, normal, random_unit_vector())


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of Lambertian materials in the scene
MAX_LAMBERTIAN_MATERIALS = 256

# Storage for Lambertian material properties
lambertian_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LAMBERTIAN_MATERIALS)
num_lambertian_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambertian_materials() -> None:
    """Clear all Lambertian materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_lambertian_materials[None] = 0


def add_lambertian_material(albedo: tuple[float, float, float]) -> int:
    """Add a Lambertian material to the material registry.

    Args:
        albedo: The diffuse reflectance color as (R, G, B) tuple.
            Each component must be in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any albedo component is outside [0, 1].
    """
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_lambertian_materials[None]
    if idx >= MAX_LAMBERTIAN_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambertian materials ({MAX_LAMBERTIAN_MATERIALS}) exceeded"
        )

    lambertian_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_lambertian_materials[None] = idx + 1
    return idx


def get_lambertian_material_count() -> int:
    """Get the number of Lambertian materials in the registry."""
    return int(num_lambertian_materials[None])


@ti.func
def get_lambertian_albedo(material_idx: ti.i32) -> vec3:
    """Get the albedo for a Lambertian material by index."""
    return lambertian_albedos[material_idx]


@ti.func
def scatter_lambertian_by_id(
    material_idx: ti.i32,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
) -> ScatterRecord:
    """Scatter off a registered Lambertian material.

    Convenience function that looks up the albedo from the material registry
    and calls scatter_lambertian.

    Args:
        material_idx: The index of the material in the registry.
        ray_in: The incoming ray.
        hit_t: Distance along ray_in to the hit point.
        normal: Outward unit normal at the hit point.

    Returns:
        The ScatterRecord for this bounce.
    """
    return scatter_lambertian(get_lambertian_albedo(material_idx), ray_in, hit_t, normal)
