"""Pinhole camera model for perspective projection ray generation.

This module implements a pinhole camera that generates primary rays for rendering.
The camera supports:
- Explicit positioning (origin, look direction, view-up)
- Look-at positioning through ``PinholeCamera.look_at``
- Vertical field of view in radians
- Arbitrary aspect ratios
- Jittered sampling for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: opposite the look direction
- u: points right in the image plane
- v: points up in the image plane

The viewport sits at unit distance along the look direction and is
``2 tan(vfov / 2)`` tall.

Example:
    >>> import math
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pathtracer.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>>
    >>> camera = PinholeCamera(
    ...     origin=(0.0, 0.0, 0.0),
    ...     look_direction=(0.0, 0.0, -1.0),
    ...     view_up=(0.0, 1.0, 0.0),
    ...     vfov=math.pi / 2.0,
    ...     aspect_ratio=16.0 / 9.0,
    ... )
    >>> setup_camera(camera)
    >>>
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import logging
import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pathtracer.core.ray import Ray, make_ray, random_offset, unit_vector, vec3

logger = logging.getLogger(__name__)

# Below this length a basis vector is considered degenerate
_DEGENERATE_EPSILON = 1e-12


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        origin: Camera position in world space (x, y, z).
        look_direction: Direction the camera looks in. Normalized at setup.
        view_up: Up direction for camera orientation (typically (0, 1, 0)).
            Must not be parallel to the look direction.
        vfov: Vertical field of view in radians.
        aspect_ratio: Width divided by height of the output image.
    """

    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    look_direction: tuple[float, float, float] = (0.0, 0.0, -1.0)
    view_up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = math.pi / 2.0
    aspect_ratio: float = 16.0 / 9.0

    @classmethod
    def look_at(
        cls,
        lookfrom: tuple[float, float, float],
        lookat: tuple[float, float, float],
        vup: tuple[float, float, float] = (0.0, 1.0, 0.0),
        vfov: float = math.pi / 2.0,
        aspect_ratio: float = 16.0 / 9.0,
    ) -> "PinholeCamera":
        """Create a camera at ``lookfrom`` aimed at the point ``lookat``."""
        direction = tuple(float(b - a) for a, b in zip(lookfrom, lookat))
        return cls(
            origin=lookfrom,
            look_direction=direction,
            view_up=vup,
            vfov=vfov,
            aspect_ratio=aspect_ratio,
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f64, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f64, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f64, shape=())  # Backward (opposite view)

# Viewport vectors for ray computation
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f64, shape=())  # Lower-left of viewport


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def _normalized(vector: np.ndarray, what: str) -> np.ndarray:
    norm = np.linalg.norm(vector)
    if not norm > _DEGENERATE_EPSILON:
        raise ValueError(f"Degenerate camera basis: {what} has zero length")
    return vector / norm


def setup_camera(camera: PinholeCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis (u, v, w) and viewport geometry
    from the provided camera parameters. This must be called before rendering.

    Args:
        camera: Camera configuration with position, orientation, and FOV.

    Raises:
        ValueError: If the look direction is zero, is parallel to view_up,
            or the field of view or aspect ratio is not positive.
    """
    if not 0.0 < camera.vfov < math.pi:
        raise ValueError(f"Vertical field of view must be in (0, pi) radians, got {camera.vfov}")
    if not camera.aspect_ratio > 0.0:
        raise ValueError(f"Aspect ratio must be positive, got {camera.aspect_ratio}")

    # Viewport dimensions at unit distance
    viewport_height = 2.0 * math.tan(camera.vfov / 2.0)
    viewport_width = viewport_height * camera.aspect_ratio

    origin = np.array(camera.origin, dtype=np.float64)
    look = _normalized(np.array(camera.look_direction, dtype=np.float64), "look direction")
    vup = np.array(camera.view_up, dtype=np.float64)

    w = -look
    u = _normalized(np.cross(vup, w), "view_up x w (view_up parallel to look direction?)")
    v = _normalized(np.cross(w, u), "w x u")

    horizontal = viewport_width * u
    vertical = viewport_height * v
    lower_left = origin - horizontal / 2.0 - vertical / 2.0 + look

    _camera_origin[None] = origin.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()
    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()

    logger.debug(
        "Camera at %s looking along %s, viewport %.4f x %.4f",
        camera.origin,
        tuple(look.tolist()),
        viewport_width,
        viewport_height,
    )


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(s: ti.f64, t: ti.f64) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    The coordinates are normalized:
    - s = 0: left edge of image, s = 1: right edge
    - t = 0: bottom edge of image, t = 1: top edge

    Args:
        s: Horizontal coordinate (left to right).
        t: Vertical coordinate (bottom to top).

    Returns:
        A Ray from the camera origin with a unit direction toward the
        specified point on the viewport.
    """
    point_on_viewport = (
        _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]
    )
    origin = _camera_origin[None]
    return make_ray(origin, unit_vector(point_on_viewport - origin))


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a jittered ray for anti-aliasing.

    Each coordinate is offset by a uniform draw in [-0.5, 0.5) and divided by
    ``size - 1``, so pixel centers of the first and last column/row land on
    the viewport edges.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels (>= 2).
        height: Image height in pixels (>= 2).

    Returns:
        A Ray with random sub-pixel offset.
    """
    s = (ti.cast(pixel_i, ti.f64) + random_offset()) / ti.cast(width - 1, ti.f64)
    t = (ti.cast(pixel_j, ti.f64) + random_offset()) / ti.cast(height - 1, ti.f64)
    return get_ray(s, t)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera origin (position) in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, vector_field in fields.items():
        value = vector_field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
