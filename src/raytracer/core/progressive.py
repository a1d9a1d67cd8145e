"""Sample-by-sample rendering on top of the integrator's accumulation buffer.

ProgressiveRenderer owns the image size and bounce budget of a render and
keeps adding jittered samples to the shared running average. Samples can be
requested in batches, with a callback or through a generator, so a caller
can report progress or stop early and still hold a usable image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.core.progressive import ProgressiveRenderer
    >>> from src.raytracer.scene.default_scene import create_default_scene
    >>> from src.raytracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = ProgressiveRenderer(400, 200, max_depth=50)
    >>> renderer.render(100, batch_size=10)
    >>> pixels = renderer.get_image_uint8()
"""

from collections.abc import Callable, Iterator

import numpy as np
import numpy.typing as npt

from src.raytracer.core.config import RenderConfig
from src.raytracer.core.integrator import (
    MAX_DEPTH,
    clear_render_target,
    get_normalized_image_numpy,
    get_total_samples,
    render_image,
    setup_render_target,
)
from src.raytracer.preview.display import DEFAULT_GAMMA, apply_gamma
from src.raytracer.preview.export import image_to_uint8, save_image_from_array

# Called as callback(samples_so_far, samples_when_done)
ProgressCallback = Callable[[int, int], None]


class ProgressiveRenderer:
    """Accumulates jittered samples per pixel into a running average.

    There is one render target per process, so constructing a renderer
    (or resizing one) discards whatever was accumulated before.
    """

    def __init__(self, width: int, height: int, max_depth: int = MAX_DEPTH) -> None:
        """Claim the render target for a width x height image.

        Args:
            width: Columns of the output image.
            height: Rows of the output image.
            max_depth: Bounces allowed per path before it contributes black.

        Raises:
            ValueError: If the size is non-positive or above the buffer
                limit, or max_depth is negative.
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self._max_depth = max_depth

    @classmethod
    def from_config(cls, config: RenderConfig) -> "ProgressiveRenderer":
        """Build a renderer with the size and bounce budget of a RenderConfig."""
        return cls(config.width, config.height, max_depth=config.max_depth)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def sample_count(self) -> int:
        """Samples averaged into every pixel so far."""
        return get_total_samples()

    def reset(self) -> None:
        """Throw away accumulated samples, keeping the current size."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Switch to a new image size, starting again from zero samples.

        A rejected size keeps the current size and samples.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def render(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Add num_samples more samples to every pixel.

        Work is split into kernel batches of at most batch_size samples; the
        callback, if any, runs after each batch with the running total and
        the total expected once this call finishes.
        """
        for done, target in self.render_progressive(num_samples, batch_size):
            if callback is not None:
                callback(done, target)

    def render_progressive(
        self,
        num_samples: int = 1,
        batch_size: int = 1,
    ) -> Iterator[tuple[int, int]]:
        """Generator form of render().

        Yields (samples_so_far, samples_when_done) after every batch. Closing
        the generator early leaves the samples rendered so far in place.

        Raises:
            ValueError: If batch_size is not positive.
        """
        if num_samples <= 0:
            return
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")

        target = self.sample_count + num_samples
        left = num_samples
        while left > 0:
            step = min(batch_size, left)
            render_image(step, max_depth=self._max_depth)
            left -= step
            yield self.sample_count, target

    def get_image_numpy(self, gamma: float = DEFAULT_GAMMA) -> npt.NDArray[np.float32]:
        """Current estimate as a (height, width, 3) float array, top row first.

        gamma=2.0 (the default) takes the square root of each channel;
        gamma=1.0 returns the linear average. Values lie in [0, 1].
        """
        return apply_gamma(get_normalized_image_numpy(), gamma)

    def get_image_uint8(self, gamma: float = DEFAULT_GAMMA) -> npt.NDArray[np.uint8]:
        return image_to_uint8(self.get_image_numpy(gamma=gamma))

    def save_image(self, filepath: str, gamma: float = DEFAULT_GAMMA) -> None:
        """Write the current estimate to filepath; the suffix picks the format."""
        save_image_from_array(self.get_image_numpy(gamma=1.0), filepath, gamma=gamma)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer({self.width}x{self.height}, "
            f"max_depth={self.max_depth}, samples={self.sample_count})"
        )
