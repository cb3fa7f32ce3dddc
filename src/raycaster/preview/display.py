"""Matplotlib-based preview display for rendered images.

The ray caster produces colours already clamped to [0, 1], so the display
pipeline is only optional gamma correction followed by a final clamp.

Example:
    >>> from raycaster.preview.display import show_preview
    >>> renderer.render()
    >>> show_preview(renderer, title="Scene 1")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from raycaster.core.renderer import Renderer


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply gamma correction for display.

    Args:
        image: Linear image array of shape (H, W, 3) in [0, 1] range.
        gamma: Gamma value. 1.0 leaves the image untouched, 2.2 encodes
            for sRGB display.

    Returns:
        Gamma corrected image.

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    if gamma == 1.0:
        return image

    # Clamp to [0, 1] before gamma to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)

    # Apply gamma encoding: out = in^(1/gamma)
    result = np.power(image, 1.0 / gamma)

    return result.astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    gamma: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Gamma correct and clamp an image for display or export.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma correction value.

    Returns:
        Processed image in [0, 1] range.

    Raises:
        ValueError: If the image is not (H, W, 3) or gamma is not positive.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Image must have shape (H, W, 3), got {image.shape}")

    result = apply_gamma(image.copy(), gamma)

    # Final clamp
    result = np.clip(result, 0.0, 1.0)

    return result.astype(np.float32)


def show_preview(
    renderer: Renderer,
    *,
    gamma: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display the current render as a Matplotlib figure.

    Args:
        renderer: The Renderer whose image to display.
        gamma: Gamma correction value.
        title: Custom title (default shows the image size).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(renderer.get_image_numpy(), gamma=gamma)

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {renderer.width}x{renderer.height}"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
