"""Pinhole camera model for perspective projection ray generation.

This module implements a pinhole camera that generates one primary ray
through the centre of every pixel. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The basis and viewport are computed once in Python (CameraFrame) and passed
into kernels by value, so several cameras can coexist.

Example:
    >>> from raycaster.camera.pinhole import default_camera, generate_rays
    >>> camera = default_camera(aspect_ratio=640 / 480)
    >>> origins, directions = generate_rays(camera, 64, 48)
    >>> origins.shape
    (3072, 3)
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raycaster.core.ray import Ray, make_ray, vec3

# Demo scene camera: 200 units in front of the back wall,
# looking down -z with a 90 degree vertical field of view.
DEFAULT_LOOKFROM = (0.0, 0.0, 200.0)
DEFAULT_LOOKAT = (0.0, 0.0, 0.0)
DEFAULT_VUP = (0.0, 1.0, 0.0)
DEFAULT_VFOV = 90.0


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class PinholeCamera:
    """Configuration for a pinhole (perspective) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.

    Raises:
        ValueError: If the field of view or aspect ratio is out of range, or
            the view direction is zero or parallel to vup.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        w = np.asarray(self.lookfrom, dtype=np.float64) - np.asarray(self.lookat, dtype=np.float64)
        if np.linalg.norm(w) == 0.0:
            raise ValueError("lookfrom and lookat must differ")
        if np.linalg.norm(np.cross(np.asarray(self.vup, dtype=np.float64), w)) == 0.0:
            raise ValueError("vup must not be parallel to the view direction")


@dataclass
class CameraFrame:
    """Precomputed viewport geometry of a camera.

    The viewport is a virtual image plane at unit distance from the camera.

    Attributes:
        origin: Camera position.
        lower_left: Lower-left corner of the viewport.
        horizontal: Vector spanning the full viewport width.
        vertical: Vector spanning the full viewport height.
    """

    origin: npt.NDArray[np.float32]
    lower_left: npt.NDArray[np.float32]
    horizontal: npt.NDArray[np.float32]
    vertical: npt.NDArray[np.float32]


def default_camera(aspect_ratio: float = 640.0 / 480.0) -> PinholeCamera:
    """Create the camera used by the demo scenes."""
    return PinholeCamera(
        lookfrom=DEFAULT_LOOKFROM,
        lookat=DEFAULT_LOOKAT,
        vup=DEFAULT_VUP,
        vfov=DEFAULT_VFOV,
        aspect_ratio=aspect_ratio,
    )


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def compute_frame(camera: PinholeCamera) -> CameraFrame:
    """Compute the camera's viewport geometry.

    Args:
        camera: Camera configuration with position, orientation, and FOV.

    Returns:
        The CameraFrame used for ray generation.
    """
    # Convert FOV from degrees to radians
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    # Viewport dimensions at unit distance
    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float32)
    lookat = np.array(camera.lookat, dtype=np.float32)
    vup = np.array(camera.vup, dtype=np.float32)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    # v points up in the camera's frame
    v = np.cross(w, u)

    horizontal = viewport_width * u
    vertical = viewport_height * v

    # Origin - w (move forward) - horizontal/2 (left) - vertical/2 (down)
    lower_left = lookfrom - w - horizontal / 2.0 - vertical / 2.0

    return CameraFrame(
        origin=lookfrom,
        lower_left=lower_left.astype(np.float32),
        horizontal=horizontal.astype(np.float32),
        vertical=vertical.astype(np.float32),
    )


def generate_rays(
    camera: PinholeCamera, width: int, height: int
) -> tuple[npt.NDArray[np.float32], npt.NDArray[np.float32]]:
    """Generate one ray through the centre of each pixel.

    Rays are ordered row by row from the top row of the image to the bottom,
    left to right within a row, matching the (height, width) image layout.

    Args:
        camera: The camera to generate rays from.
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        Tuple (origins, directions), each of shape (width * height, 3), with
        unit-length directions.

    Raises:
        ValueError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")

    frame = compute_frame(camera)
    s = (np.arange(width, dtype=np.float32) + 0.5) / width
    # Top row first
    t = (np.arange(height - 1, -1, -1, dtype=np.float32) + 0.5) / height
    ss, tt = np.meshgrid(s, t)

    points = (
        frame.lower_left[None, :]
        + ss.reshape(-1, 1) * frame.horizontal[None, :]
        + tt.reshape(-1, 1) * frame.vertical[None, :]
    )
    directions = points - frame.origin[None, :]
    directions /= np.linalg.norm(directions, axis=1, keepdims=True)
    origins = np.broadcast_to(frame.origin, directions.shape).copy()
    return origins.astype(np.float32), directions.astype(np.float32)


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(origin: vec3, lower_left: vec3, horizontal: vec3, vertical: vec3, s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    Returns:
        A Ray from the camera origin with unit direction.
    """
    point_on_viewport = lower_left + s * horizontal + t * vertical
    direction = tm.normalize(point_on_viewport - origin)
    return make_ray(origin, direction)


@ti.func
def get_pixel_ray(
    origin: vec3,
    lower_left: vec3,
    horizontal: vec3,
    vertical: vec3,
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
) -> Ray:
    """Generate the ray through the centre of pixel (i, j).

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
    """
    s = (ti.cast(pixel_i, ti.f32) + 0.5) / ti.cast(width, ti.f32)
    t = (ti.cast(pixel_j, ti.f32) + 0.5) / ti.cast(height, ti.f32)
    return get_ray(origin, lower_left, horizontal, vertical, s, t)
