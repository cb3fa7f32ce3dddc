"""Image export utilities for rendered images.

Supported formats:
    - PNG (8-bit via Pillow)

Example:
    >>> from raycaster.preview.export import save_png
    >>> renderer.render()
    >>> save_png(renderer, "output.png")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from raycaster.preview.display import process_image_for_display

if TYPE_CHECKING:
    from raycaster.core.renderer import Renderer


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    gamma: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a float32 image in [0, 1] to uint8 for display/export.

    Args:
        image: Image array of shape (H, W, 3).
        gamma: Gamma correction value.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(image, gamma=gamma)
    return np.round(processed * 255).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Save a NumPy array as a PNG file.

    Args:
        image: Image array of shape (H, W, 3) with values in [0, 1].
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value.
    """
    pil_image = PILImage.fromarray(image_to_uint8(image, gamma=gamma))
    pil_image.save(filepath)


def save_png(
    renderer: Renderer,
    filepath: str,
    *,
    gamma: float = 1.0,
) -> None:
    """Save the rendered image as a PNG file.

    Args:
        renderer: The Renderer instance to save.
        filepath: Output file path (should end in .png).
        gamma: Gamma correction value.

    Raises:
        RuntimeError: If the renderer has not rendered yet.
    """
    save_png_from_array(renderer.get_image_numpy(), filepath, gamma=gamma)
