"""Dielectric (glass/water) material implementation.

This module implements transparent materials with refraction and Fresnel
reflectance. The surrounding medium has a refractive index of 1.

Key physics:
    - Snell's law, expressed on the tangential component of the direction:
      ``v' = (eta_in / eta_out) (d - (n . d) n)``
    - Total internal reflection when ``1 - |v'|^2 < 0``
    - Schlick's approximation for the reflect/refract probability

Sphere normals always point outward, so the material itself decides whether
the ray is entering (``n . d < 0``) or leaving the object, flipping the normal
and swapping the indices in the latter case.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.materials.dielectric import scatter_dielectric
    >>> # Use within a Taichi kernel:
    >>> # record = scatter_dielectric(eta, albedo, ray_in, hit_t, normal)
"""

import taichi as ti

from pathtracer.core.ray import (
    Ray,
    ScatterRecord,
    inner_product,
    length_squared,
    random_uniform,
    ray_at,
    reflect,
    schlick_reflectance,
    unit_vector,
    vec3,
)

# Refractive index of the medium surrounding every object
EXTERNAL_ETA = 1.0


@ti.func
def _orient(eta: ti.f64, direction: vec3, normal: vec3):
    """Orient the normal against the ray and pick the index ratio.

    Returns:
        A tuple of (normal, inprod, eta_ratio) where ``normal`` faces the
        incoming ray, ``inprod = normal . direction`` (<= 0) and
        ``eta_ratio = eta_in / eta_out``.
    """
    inprod = inner_product(normal, direction)
    facing = normal
    eta_ratio = EXTERNAL_ETA / eta
    if inprod >= 0.0:
        # Leaving the object from the inside
        facing = -normal
        inprod = -inprod
        eta_ratio = eta / EXTERNAL_ETA
    return facing, inprod, eta_ratio


@ti.func
def refract_direction(
    eta: ti.f64,
    direction: vec3,
    normal: vec3,
    reflect_sample: ti.f64,
) -> vec3:
    """Choose the outgoing direction at a dielectric boundary.

    Args:
        eta: Index of refraction of the material.
        direction: The incoming unit direction.
        normal: The outward unit normal of the surface.
        reflect_sample: Uniform value in [0, 1). The ray reflects when the
            Schlick reflectance exceeds it.

    Returns:
        The reflected or refracted unit direction.
    """
    facing, inprod, eta_ratio = _orient(eta, direction, normal)

    # Tangential component scaled by the index ratio
    v_out = eta_ratio * (direction - inprod * facing)
    c = 1.0 - length_squared(v_out)

    result = vec3(0.0, 0.0, 0.0)
    if c < 0.0:
        # Total internal reflection
        result = reflect(direction, facing)
    elif schlick_reflectance(-inprod, eta_ratio) > reflect_sample:
        result = reflect(direction, facing)
    else:
        result = unit_vector(v_out - ti.sqrt(c) * facing)
    return result


@ti.func
def scatter_dielectric_with(
    eta: ti.f64,
    albedo: vec3,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
    reflect_sample: ti.f64,
) -> ScatterRecord:
    """Scatter a ray at a dielectric boundary using a given random draw.

    Args:
        eta: Index of refraction of the material.
        albedo: Constant attenuation of the material.
        ray_in: The incoming ray.
        hit_t: Distance along ray_in to the hit point.
        normal: Outward unit normal at the hit point.
        reflect_sample: Uniform value in [0, 1) deciding reflection vs
            refraction.

    Returns:
        A ScatterRecord with attenuation equal to the albedo.
    """
    direction = refract_direction(eta, ray_in.direction, normal, reflect_sample)
    origin = ray_at(ray_in, hit_t)
    return ScatterRecord(attenuation=albedo, ray=Ray(origin=origin, direction=direction))


@ti.func
def scatter_dielectric(
    eta: ti.f64,
    albedo: vec3,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
) -> ScatterRecord:
    """Scatter a ray at a dielectric boundary, drawing from the Taichi RNG."""
    return scatter_dielectric_with(eta, albedo, ray_in, hit_t, normal, random_uniform())


@ti.func
def cannot_refract(eta: ti.f64, direction: vec3, normal: vec3) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        eta: Index of refraction of the material.
        direction: The incoming unit direction.
        normal: The outward unit normal of the surface.

    Returns:
        1 if refraction is geometrically impossible, 0 otherwise.
    """
    facing, inprod, eta_ratio = _orient(eta, direction, normal)
    v_out = eta_ratio * (direction - inprod * facing)
    result = 0
    if 1.0 - length_squared(v_out) < 0.0:
        result = 1
    return result


@ti.func
def fresnel_reflectance(eta: ti.f64, direction: vec3, normal: vec3) -> ti.f64:
    """Compute the Schlick reflectance for a ray meeting the boundary."""
    _, inprod, eta_ratio = _orient(eta, direction, normal)
    return schlick_reflectance(-inprod, eta_ratio)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of dielectric materials in the scene
MAX_DIELECTRIC_MATERIALS = 256

# Storage for dielectric material properties
dielectric_etas = ti.field(dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
dielectric_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_DIELECTRIC_MATERIALS)
num_dielectric_materials = ti.field(dtype=ti.i32, shape=())


def clear_dielectric_materials() -> None:
    """Clear all dielectric materials.

    Resets the material count to zero. Existing data in the field will be
    overwritten when new materials are added.
    """
    num_dielectric_materials[None] = 0


def add_dielectric_material(
    eta: float = 1.5,
    albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
) -> int:
    """Add a dielectric material to the material registry.

    Args:
        eta: Index of refraction. Default is 1.5 (typical glass).
            Must be >= 1.0.
        albedo: Constant attenuation as (R, G, B), components in [0, 1].
            Default is white (clear glass).

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If eta is less than 1.0.
        ValueError: If any albedo component is outside [0, 1].
    """
    if eta < 1.0:
        raise ValueError(
            f"Index of refraction = {eta} is less than 1.0. "
            "IOR must be >= 1.0 for physically meaningful materials."
        )

    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )

    idx = num_dielectric_materials[None]
    if idx >= MAX_DIELECTRIC_MATERIALS:
        raise RuntimeError(
            f"Maximum number of dielectric materials ({MAX_DIELECTRIC_MATERIALS}) exceeded"
        )

    dielectric_etas[idx] = eta
    dielectric_albedos[idx] = [albedo[0], albedo[1], albedo[2]]
    num_dielectric_materials[None] = idx + 1
    return idx


def get_dielectric_material_count() -> int:
    """Get the number of dielectric materials in the registry."""
    return int(num_dielectric_materials[None])


@ti.func
def get_dielectric_eta(material_idx: ti.i32) -> ti.f64:
    """Get the index of refraction for a dielectric material by index."""
    return dielectric_etas[material_idx]


@ti.func
def get_dielectric_albedo(material_idx: ti.i32) -> vec3:
    """Get the attenuation for a dielectric material by index."""
    return dielectric_albedos[material_idx]


@ti.func
def scatter_dielectric_by_id(
    material_idx: ti.i32,
    ray_in: Ray,
    hit_t: ti.f64,
    normal: vec3,
) -> ScatterRecord:
    """Scatter off a registered dielectric material.

    Args:
        material_idx: The index of the material in the registry.
        ray_in: The incoming ray.
        hit_t: Distance along ray_in to the hit point.
        normal: Outward unit normal at the hit point.

    Returns:
        The ScatterRecord for this bounce.
    """
    eta = get_dielectric_eta(material_idx)
    albedo = get_dielectric_albedo(material_idx)
    return scatter_dielectric(eta, albedo, ray_in, hit_t, normal)
