"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera with one ray through each pixel centre
"""

from .pinhole import (
    CameraFrame,
    PinholeCamera,
    compute_frame,
    default_camera,
    generate_rays,
    get_pixel_ray,
    get_ray,
)

__all__ = [
    "PinholeCamera",
    "CameraFrame",
    "default_camera",
    "compute_frame",
    "generate_rays",
    "get_ray",
    "get_pixel_ray",
]
