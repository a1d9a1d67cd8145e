"""Gamma encoding and Matplotlib-based preview of rendered images.

Gamma encoding is a one-way transform: applying it twice does not give the
same image as applying it once. It is monotonic, so brighter linear values
stay brighter after encoding.

Example:
    >>> from src.raytracer.preview.display import show_preview
    >>> from src.raytracer.core.progressive import ProgressiveRenderer
    >>>
    >>> renderer = ProgressiveRenderer(400, 200)
    >>> renderer.render(100)
    >>> show_preview(renderer)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.raytracer.core.progressive import ProgressiveRenderer

# Gamma 2 encoding: every channel becomes sqrt(channel)
DEFAULT_GAMMA = 2.0


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = DEFAULT_GAMMA,
) -> npt.NDArray[np.float32]:
    """Apply gamma encoding for display.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value. 2.0 takes the square root of each channel,
            1.0 leaves the image linear.

    Returns:
        Gamma encoded image, clamped to [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")

    # Clamp before encoding to avoid NaN from negative values
    image = np.clip(image, 0.0, 1.0)

    if gamma == 1.0:
        return image.astype(np.float32)
    if gamma == 2.0:
        return np.sqrt(image).astype(np.float32)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def show_preview(
    renderer: ProgressiveRenderer,
    *,
    gamma: float = DEFAULT_GAMMA,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 4),
    block: bool = True,
) -> None:
    """Open a Matplotlib window showing the renderer's current estimate.

    Args:
        renderer: Renderer to read the image from.
        gamma: Encoding applied before display.
        title: Window title; defaults to the sample count.
        figsize: Size in inches as (width, height).
        block: Wait for the window to close before returning.
    """
    import matplotlib.pyplot as plt

    display_image = renderer.get_image_numpy(gamma=gamma)

    _, ax = plt.subplots(figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {renderer.sample_count} SPP"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
