"""Scene-level intersection over the sphere arena.

Spheres are stored in index-addressed Taichi fields (structure of arrays).
Each sphere carries the id of the material it owns. A scene query tests the
ray against every sphere and keeps the nearest hit; there is no acceleration
structure, which is fine for the small scenes this renderer targets.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene
    >>> clear_scene()
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti

from pathtracer.core.ray import Ray, vec3
from pathtracer.geometry.sphere import T_MIN, Sphere, hit_sphere


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any sphere, 0 otherwise.
        t: Distance along the ray to the nearest intersection.
        normal: Outward unit normal of the hit sphere at the intersection.
        material_id: Unified material id of the hit sphere, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    normal: vec3
    material_id: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The actual field data is not cleared
    but will be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere as (x, y, z).
        radius: The radius of the sphere. Must be positive.
        material_id: The unified material id owned by this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = [center[0], center[1], center[2]]
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(hit=0, t=0.0, normal=vec3(0.0, 0.0, 0.0), material_id=-1)


@ti.func
def intersect_scene(ray: Ray) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Every sphere is tested. A later hit replaces the current one only when
    its distance is strictly smaller, so ties keep the first sphere found.

    Args:
        ray: The ray to test (unit direction).

    Returns:
        A SceneHitRecord for the nearest hit, or a miss record (hit == 0)
        when no sphere is hit.
    """
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray, sphere, T_MIN)
        if rec.hit == 1:
            if result.hit == 0 or rec.t < result.t:
                result = SceneHitRecord(
                    hit=1,
                    t=rec.t,
                    normal=rec.normal,
                    material_id=sphere_material_ids[i],
                )

    return result
