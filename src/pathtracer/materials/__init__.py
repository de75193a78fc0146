"""Materials module for light-scattering models.

Components:
    lambertian: Ideal diffuse reflection around the surface normal
    metal: Mirror reflection blurred by a fuzz factor
    dielectric: Glass-like refraction with Schlick reflectance

Each material provides:
    - scatter_*_with(): deterministic scatter taking the random draw as input
    - scatter_*(): scatter drawing from the Taichi RNG
    - scatter_*_by_id(): scatter using parameters from the material registry
    - add_*_material() / clear_*_materials(): registry management

Every scatter returns a ScatterRecord ``(attenuation, ray)`` whose ray starts
at the hit point. The set of materials is closed; the scene manager maps
unified material ids onto these per-variant registries.
"""

from .dielectric import (
    EXTERNAL_ETA,
    add_dielectric_material,
    cannot_refract,
    clear_dielectric_materials,
    fresnel_reflectance,
    get_dielectric_albedo,
    get_dielectric_eta,
    get_dielectric_material_count,
    refract_direction,
    scatter_dielectric,
    scatter_dielectric_by_id,
    scatter_dielectric_with,
)
from .lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
    scatter_lambertian_with,
)
from .metal import (
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
    scatter_metal_with,
)

__all__ = [
    # Lambertian
    "scatter_lambertian",
    "scatter_lambertian_with",
    "scatter_lambertian_by_id",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_material_count",
    "get_lambertian_albedo",
    # Metal
    "scatter_metal",
    "scatter_metal_with",
    "scatter_metal_by_id",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_material_count",
    "get_metal_albedo",
    "get_metal_fuzz",
    # Dielectric
    "EXTERNAL_ETA",
    "scatter_dielectric",
    "scatter_dielectric_with",
    "scatter_dielectric_by_id",
    "refract_direction",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_material_count",
    "get_dielectric_eta",
    "get_dielectric_albedo",
    "cannot_refract",
    "fresnel_reflectance",
]
