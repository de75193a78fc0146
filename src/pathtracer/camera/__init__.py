"""Camera module for view and ray generation.

Components:
    pinhole: Pinhole (perspective) camera model

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image

The camera state lives in Taichi fields written once by ``setup_camera`` and
read by every primary ray in the render kernel.
"""

from .pinhole import (
    PinholeCamera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_jittered,
    setup_camera,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "get_ray",
    "get_ray_jittered",
    "get_camera_origin",
    "get_camera_info",
]
