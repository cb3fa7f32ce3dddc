"""Preview and export module for rendered images.

Components:
    display: Gamma correction and Matplotlib preview window
    export: PNG output via Pillow
"""

from .display import apply_gamma, process_image_for_display, show_preview
from .export import image_to_uint8, save_png, save_png_from_array

__all__ = [
    "apply_gamma",
    "process_image_for_display",
    "show_preview",
    "image_to_uint8",
    "save_png",
    "save_png_from_array",
]
