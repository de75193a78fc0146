"""Ready-made sphere scenes.

Each factory clears the scene arenas, fills them, and returns the
SceneManager together with a PinholeCamera framing the scene. The camera
sits at the origin looking down -z with a 90 degree vertical field of view,
which gives a viewport two units tall at unit distance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.scene.presets import create_material_spheres_scene
    >>> from pathtracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_material_spheres_scene()
    >>> setup_camera(camera)
"""

import math

from pathtracer.camera.pinhole import PinholeCamera
from pathtracer.scene.manager import SceneManager

# Ground sphere large enough to read as a plane
GROUND_CENTER = (0.0, -100.5, -1.0)
GROUND_RADIUS = 100.0

# Spheres resting on the ground
CENTER_SPHERE = (0.0, 0.0, -1.0)
LEFT_SPHERE = (-1.0, 0.0, -1.0)
RIGHT_SPHERE = (1.0, 0.0, -1.0)
SMALL_RADIUS = 0.5

DIFFUSE_GREY = (0.5, 0.5, 0.5)
GROUND_ALBEDO = (0.8, 0.8, 0.0)
CENTER_ALBEDO = (0.7, 0.3, 0.3)
METAL_ALBEDO = (0.8, 0.6, 0.2)
METAL_FUZZ = 0.3
GLASS_ETA = 1.5


def _default_camera(aspect_ratio: float) -> PinholeCamera:
    return PinholeCamera(
        origin=(0.0, 0.0, 0.0),
        look_direction=(0.0, 0.0, -1.0),
        view_up=(0.0, 1.0, 0.0),
        vfov=math.pi / 2.0,
        aspect_ratio=aspect_ratio,
    )


def create_diffuse_spheres_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, PinholeCamera]:
    """Create a grey diffuse sphere resting on a large grey ground sphere.

    Args:
        aspect_ratio: Aspect ratio for the returned camera.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()
    grey = scene.add_lambertian_material(albedo=DIFFUSE_GREY)
    scene.add_sphere(CENTER_SPHERE, SMALL_RADIUS, grey)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, grey)
    return scene, _default_camera(aspect_ratio)


def create_material_spheres_scene(
    aspect_ratio: float = 16.0 / 9.0,
) -> tuple[SceneManager, PinholeCamera]:
    """Create three spheres showing each material on a diffuse ground.

    The scene contains:
    - Ground: yellowish Lambertian
    - Center: reddish Lambertian
    - Left: clear glass (eta 1.5)
    - Right: fuzzy gold metal

    Args:
        aspect_ratio: Aspect ratio for the returned camera.

    Returns:
        A tuple of (SceneManager, PinholeCamera).
    """
    scene = SceneManager()

    ground = scene.add_lambertian_material(albedo=GROUND_ALBEDO)
    center = scene.add_lambertian_material(albedo=CENTER_ALBEDO)
    glass = scene.add_dielectric_material(eta=GLASS_ETA)
    gold = scene.add_metal_material(albedo=METAL_ALBEDO, fuzz=METAL_FUZZ)

    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, ground)
    scene.add_sphere(CENTER_SPHERE, SMALL_RADIUS, center)
    scene.add_sphere(LEFT_SPHERE, SMALL_RADIUS, glass)
    scene.add_sphere(RIGHT_SPHERE, SMALL_RADIUS, gold)

    return scene, _default_camera(aspect_ratio)


SCENE_PRESETS = {
    "diffuse": create_diffuse_spheres_scene,
    "materials": create_material_spheres_scene,
}
