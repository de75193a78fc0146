"""Scene module for scene management and hit records.

Components:
    intersection: Sphere arena and nearest-hit scene queries
    manager: Scene manager coordinating spheres and materials
    presets: Ready-made sphere scenes with a matching camera

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for sphere data
    - Per-sphere material ids into a unified material table
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .presets import (
    SCENE_PRESETS,
    create_diffuse_spheres_scene,
    create_material_spheres_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Presets
    "create_diffuse_spheres_scene",
    "create_material_spheres_scene",
    "SCENE_PRESETS",
]
