"""Preview module for output and visualization.

Components:
    display: Gamma encoding and Matplotlib-based preview
    export: 8-bit conversion and Pillow-based image export

Example:
    >>> from src.raytracer.preview import show_preview, save_image
    >>> from src.raytracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 200)
    >>> renderer.render(100)
    >>> show_preview(renderer)
    >>> save_image(renderer, "result.ppm")
"""

from src.raytracer.preview.display import DEFAULT_GAMMA, apply_gamma, show_preview
from src.raytracer.preview.export import (
    compute_rmse,
    image_to_uint8,
    save_image,
    save_image_from_array,
)

__all__ = [
    "show_preview",
    "apply_gamma",
    "DEFAULT_GAMMA",
    "save_image",
    "save_image_from_array",
    "image_to_uint8",
    "compute_rmse",
]
