"""Unified scene manager for coordinating spheres and materials.

This module provides the high-level scene construction API. Materials form a
closed tagged union: every material gets a unified ``material_id`` that maps
to a ``(MaterialType, type_index)`` pair, where ``type_index`` addresses the
per-variant parameter registry (Lambertian, Metal, Dielectric). The path
tracer dispatches on the type when a ray hits a sphere.

Besides the Taichi arenas, a SceneManager keeps:
- One material id sequence shared by every variant
- The (variant, registry slot) pair behind each id
- Shortcuts that create a material and its sphere together
- Export to and import from plain dicts

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
"""

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import taichi as ti

from pathtracer.materials.dielectric import (
    add_dielectric_material,
    clear_dielectric_materials,
)
from pathtracer.materials.lambertian import (
    add_lambertian_material,
    clear_lambertian_materials,
)
from pathtracer.materials.metal import (
    add_metal_material,
    clear_metal_materials,
)
from pathtracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

logger = logging.getLogger(__name__)


class MaterialType(IntEnum):
    """Variant tag of a material.

    The integrator switches on this tag to pick the scatter function of
    the surface a ray hit.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Capacity of the shared id space
MAX_MATERIALS = 768  # 256 per type * 3 types

# Variant tag per material id
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# Registry slot per material id, e.g. the second metal registered gets slot 1
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Forget every material id."""
    num_materials[None] = 0


def _register_material(material_type: MaterialType, type_index: int) -> int:
    """Assign the next unified material id to a type-local material."""
    material_id = num_materials[None]
    if material_id >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_types[material_id] = int(material_type)
    material_type_indices[material_id] = type_index
    num_materials[None] = material_id + 1
    return material_id


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Look up the variant tag of a material inside a kernel.

    Args:
        material_id: Id in the shared material sequence.

    Returns:
        The MaterialType value as an int, or -1 when the id
        is not registered.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Look up the variant registry slot of a material inside a kernel.

    Returns:
        The index into the type-specific material arrays, or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass
class MaterialInfo:
    """Python-side record of one registered material.

    Attributes:
        material_id: Id in the shared material sequence.
        material_type: Variant tag.
        type_index: Slot in the registry of that variant.
        params: Constructor arguments, kept for export.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene."""

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Plain-data form of a scene.

    Attributes:
        materials: One dict per material, in id order.
        spheres: One dict per sphere.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any) -> tuple[float, float, float]:
    """Convert a 3-element sequence (e.g. a JSON list) to a float tuple."""
    if len(values) != 3:
        raise ValueError(f"Expected 3 components, got {len(values)}: {values!r}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Scene manager coordinating spheres and materials.

    The SceneManager owns the scene for the duration of a render. It writes
    spheres and materials into the Taichi arenas and keeps a Python-side
    record of what was added, for queries and serialization. Only one scene
    is live at a time: creating a SceneManager clears the arenas.

    Attributes:
        materials: MaterialInfo records in id order.
        spheres: SphereInfo records in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
        >>> gold = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(eta=1.5)
        >>> scene.add_sphere((0, -100.5, -1), 100.0, ground)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Start from empty arenas."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._clear_all()

    def _clear_all(self) -> None:
        """Empty the Taichi arenas and the Python-side records."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()

    def clear(self) -> None:
        """Clear the entire scene (spheres and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _track_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        material_id = _register_material(material_type, type_index)
        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Added %s material %d: %s", material_type.name, material_id, params)
        return material_id

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Register a diffuse material.

        Args:
            albedo: The diffuse reflectance color as (R, G, B), each in [0, 1].

        Returns:
            The new material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        type_index = add_lambertian_material(albedo)
        return self._track_material(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Register a mirror-like metal material.

        Args:
            albedo: The reflective color as (R, G, B), each in [0, 1].
            fuzz: Reflection blur in [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The new material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component or fuzz is outside [0, 1].
        """
        type_index = add_metal_material(albedo, fuzz)
        return self._track_material(
            MaterialType.METAL, type_index, {"albedo": albedo, "fuzz": fuzz}
        )

    def add_dielectric_material(
        self,
        eta: float = 1.5,
        albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ) -> int:
        """Register a clear refracting material such as glass.

        Args:
            eta: Index of refraction (>= 1). Default is 1.5 (typical glass).
            albedo: Constant attenuation as (R, G, B). Default is white.

        Returns:
            The new material id.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If eta is less than 1.0 or albedo is out of range.
        """
        type_index = add_dielectric_material(eta, albedo)
        return self._track_material(
            MaterialType.DIELECTRIC, type_index, {"eta": eta, "albedo": albedo}
        )

    def get_material_count(self) -> int:
        """Number of registered materials."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Variant tag of a material, read from the Python-side records.

        For kernel-side lookup, use the get_material_type() Taichi function.

        Returns:
            The MaterialType, or None for invalid material IDs.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    # =========================================================================
    # Sphere Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Place a sphere that uses an already registered material.

        Args:
            center: Sphere center (x, y, z).
            radius: The radius of the sphere (positive).
            material_id: Id of the registered material owned by the sphere.

        Returns:
            The sphere index.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Register a diffuse material and place one sphere using it.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Register a metal material and place one sphere using it.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        eta: float = 1.5,
        albedo: tuple[float, float, float] = (1.0, 1.0, 1.0),
    ) -> tuple[int, int]:
        """Register a dielectric material and place one sphere using it.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(eta, albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Number of spheres placed so far."""
        return get_sphere_count()

    @staticmethod
    def get_max_spheres() -> int:
        """Sphere arena capacity."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Material id capacity."""
        return MAX_MATERIALS

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Replace the current scene with the contents of a SceneConfig.

        Clears the current scene and loads the configuration. Materials are
        added first, in order, so the material ids referenced by the spheres
        are reproduced exactly.

        Raises:
            ValueError: For unknown material types or invalid values.
        """
        self.clear()

        for mat_config in config.materials:
            mat_type = mat_config.get("type", "").lower()
            if mat_type == "lambertian":
                self.add_lambertian_material(_as_triple(mat_config.get("albedo", [0.5, 0.5, 0.5])))
            elif mat_type == "metal":
                self.add_metal_material(
                    _as_triple(mat_config.get("albedo", [0.8, 0.8, 0.8])),
                    float(mat_config.get("fuzz", 0.0)),
                )
            elif mat_type == "dielectric":
                self.add_dielectric_material(
                    float(mat_config.get("eta", 1.5)),
                    _as_triple(mat_config.get("albedo", [1.0, 1.0, 1.0])),
                )
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_triple(sphere_config.get("center", [0, 0, 0])),
                float(sphere_config.get("radius", 1.0)),
                int(sphere_config.get("material_id", 0)),
            )

        logger.debug(
            "Loaded scene with %d materials and %d spheres",
            len(self.materials),
            len(self.spheres),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)
