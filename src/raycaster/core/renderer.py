"""Whole-image renderer.

This module provides a convenient wrapper around the ray caster that:
- Casts one ray through the centre of every pixel of a pinhole camera
- Substitutes the background colour where the camera ray hits nothing
- Clamps every pixel to [0, 1]
- Exposes the result as a NumPy array or writes it to disk

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from raycaster.camera.pinhole import default_camera
    >>> from raycaster.core.renderer import Renderer
    >>> from raycaster.scene.demo_scenes import build_demo_scene
    >>>
    >>> manager = build_demo_scene(1)
    >>> renderer = Renderer(manager.scene, default_camera(320 / 240), 320, 240)
    >>> elapsed = renderer.render()
    >>> image = renderer.get_image_numpy()
"""

import logging
import time
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from raycaster.camera.pinhole import PinholeCamera, compute_frame, get_pixel_ray
from raycaster.core.integrator import cast_ray
from raycaster.scene.intersection import Scene

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum supported image dimensions
MAX_IMAGE_WIDTH = 4096
MAX_IMAGE_HEIGHT = 4096


@ti.kernel
def _render_kernel(
    scene: ti.template(),
    image: ti.template(),
    times: ti.template(),
    origin: vec3,
    lower_left: vec3,
    horizontal: vec3,
    vertical: vec3,
    background: vec3,
):
    """Cast one ray per pixel and store the clamped colour.

    Pixel (i, j) has i = 0 at the left edge and j = 0 at the bottom edge.
    """
    width = image.shape[0]
    height = image.shape[1]
    for i, j in image:
        ray = get_pixel_ray(origin, lower_left, horizontal, vertical, i, j, width, height)
        hit_time, payload = cast_ray(scene, ray.origin, ray.direction, 0)

        color = background
        if hit_time > 0.0:
            color = payload.color

        image[i, j] = tm.clamp(color, 0.0, 1.0)
        times[i, j] = hit_time


class Renderer:
    """Renders a scene through a pinhole camera into an RGB image.

    The renderer owns its image buffer (a Taichi field of shape
    (width, height)). The scene's settings at the time render() is called
    decide shadows, shading mode, reflection limit and background colour.

    Attributes:
        scene: The Scene to render.
        camera: The camera rays are cast from.
        width: Image width in pixels.
        height: Image height in pixels.
    """

    def __init__(self, scene: Scene, camera: PinholeCamera, width: int, height: int) -> None:
        """Initialize the renderer and allocate the image buffer.

        Args:
            scene: The Scene to render.
            camera: The camera rays are cast from.
            width: Image width in pixels (max MAX_IMAGE_WIDTH).
            height: Image height in pixels (max MAX_IMAGE_HEIGHT).

        Raises:
            ValueError: If dimensions are not positive or exceed the maximum.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
        if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image dimensions ({width}x{height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        self.scene = scene
        self.camera = camera
        self._width = width
        self._height = height
        self._image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        self._times = ti.field(dtype=ti.f32, shape=(width, height))
        self._rendered = False

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self._width

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self._height

    @property
    def rendered(self) -> bool:
        """Whether render() has completed at least once."""
        return self._rendered

    def render(self) -> float:
        """Render the full image.

        Returns:
            Wall-clock render time in seconds, including kernel compilation
            on the first call.
        """
        frame = compute_frame(self.camera)
        settings = self.scene.settings

        start = time.perf_counter()
        _render_kernel(
            self.scene,
            self._image,
            self._times,
            vec3(*frame.origin.tolist()),
            vec3(*frame.lower_left.tolist()),
            vec3(*frame.horizontal.tolist()),
            vec3(*frame.vertical.tolist()),
            vec3(*settings.background_color),
        )
        ti.sync()
        elapsed = time.perf_counter() - start

        self._rendered = True
        logger.info(
            "Rendered %dx%d image of %d primitives in %.3fs (max reflections %d)",
            self._width,
            self._height,
            self.scene.count(),
            elapsed,
            settings.max_reflections if settings.reflections else 0,
        )
        return elapsed

    def _check_rendered(self) -> None:
        if not self._rendered:
            raise RuntimeError("Nothing rendered yet. Call render() first.")

    def get_image(self) -> Any:
        """Get the raw Taichi color buffer field of shape (width, height)."""
        return self._image

    def _to_image_layout(self, data: npt.NDArray[Any]) -> npt.NDArray[Any]:
        # Transpose from (width, height, ...) to (height, width, ...)
        data = np.swapaxes(data, 0, 1)
        # Flip vertically (Taichi uses bottom-left origin, images use top-left)
        return np.ascontiguousarray(np.flipud(data))

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).

        Returns:
            NumPy array of shape (height, width, 3) with dtype float32 and
            values in [0, 1], top row first.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        self._check_rendered()
        image = self._to_image_layout(self._image.to_numpy())
        image = np.clip(image, 0.0, 1.0)

        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)

        return image.astype(np.float32)

    def get_hit_times(self) -> npt.NDArray[np.float32]:
        """Get the camera ray hit time of every pixel, 0.0 for background.

        Returns:
            NumPy array of shape (height, width), top row first.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        self._check_rendered()
        return self._to_image_layout(self._times.to_numpy()).astype(np.float32)

    def get_image_uint8(self, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit NumPy array of shape (height, width, 3)."""
        from raycaster.preview.export import image_to_uint8

        return image_to_uint8(self.get_image_numpy(), gamma=gamma)

    def save_image(self, filepath: str, gamma: float = 1.0) -> None:
        """Save the rendered image to a file.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            gamma: Gamma correction value. Default 1.0 (linear).
        """
        from raycaster.preview.export import save_png

        save_png(self, filepath, gamma=gamma)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return f"Renderer(width={self.width}, height={self.height}, rendered={self.rendered})"
