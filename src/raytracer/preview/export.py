"""Turning encoded float images into 8-bit files.

Images are written with Pillow; the format follows the file extension.
``.ppm`` produces a binary pixel dump with a width/height/max-value header,
``.png`` a compressed 8-bit image.

Float channels map to 8-bit values as int(255.99 * c), clamped to
[0, 255], so 1.0 becomes 255 and every bucket has equal width.

Example:
    >>> from src.raytracer.preview.export import save_image
    >>> from src.raytracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 200)
    >>> renderer.render(100)
    >>> save_image(renderer, "result.ppm")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.raytracer.preview.display import DEFAULT_GAMMA, apply_gamma

if TYPE_CHECKING:
    from src.raytracer.core.progressive import ProgressiveRenderer

# Scale from [0, 1] floats to 8-bit channel values
CHANNEL_SCALE = 255.99
MAX_CHANNEL_VALUE = 255


def image_to_uint8(image: npt.NDArray[np.float32]) -> npt.NDArray[np.uint8]:
    """Convert an encoded float image to 8-bit channel values.

    Args:
        image: Image array of shape (H, W, 3), already gamma encoded.

    Returns:
        8-bit image array of the same shape.
    """
    scaled = np.floor(np.clip(image, 0.0, 1.0) * CHANNEL_SCALE)
    return np.clip(scaled, 0, MAX_CHANNEL_VALUE).astype(np.uint8)


def save_image_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Gamma encode a linear image and save it.

    Args:
        image: Linear image array of shape (H, W, 3).
        filepath: Output file path; the extension selects the format.
        gamma: Gamma encoding value (default 2.0).
    """
    image_uint8 = image_to_uint8(apply_gamma(image, gamma))
    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)


def save_image(
    renderer: ProgressiveRenderer,
    filepath: str,
    *,
    gamma: float = DEFAULT_GAMMA,
) -> None:
    """Save the renderer's current image.

    Args:
        renderer: Renderer whose current estimate is written.
        filepath: Output file path (e.g. "result.ppm" or "result.png").
        gamma: Gamma encoding value (default 2.0).
    """
    save_image_from_array(renderer.get_image_numpy(gamma=1.0), filepath, gamma=gamma)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Root mean squared difference of two same-shaped images.

    Raises:
        ValueError: If the shapes differ.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(
            f"Image shapes must match, got {image_a.shape} and {image_b.shape}"
        )

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
