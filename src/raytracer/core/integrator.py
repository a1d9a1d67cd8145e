"""Diffuse shading and the per-pixel sampling kernels.

Shading model:

- A ray that hits nothing sees the sky, a vertical blend from white (looking
  down) to sky blue (looking up) keyed on the y component of its unit
  direction.
- A ray that hits a surface continues from the hit point toward
  normal + random_unit_vector() (Lambertian) and brings back half of what
  that ray sees.
- Once the bounce budget is spent the path contributes black.

Taichi functions cannot recurse, so ray_color() walks the path in a loop and
carries the product of the 0.5 factors along. A path that escapes after k
bounces therefore yields 0.5^k times the sky color, exactly as the recursive
definition would.

Every pixel holds the running mean of its samples, so render_image() can be
called repeatedly to refine one image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.core.integrator import render_image, setup_render_target
    >>> from src.raytracer.scene.default_scene import create_default_scene
    >>> from src.raytracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
    >>> setup_render_target(400, 200)
    >>> render_image(num_samples=100, max_depth=50)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.raytracer.camera.pinhole import get_ray_jittered
from src.raytracer.core.ray import Ray, make_ray, near_zero, random_unit_vector, vec3
from src.raytracer.scene.intersection import intersect_scene

# Bounce budget used when callers do not pass one
MAX_DEPTH = 50

# Accepted hit distances; T_MIN keeps bounced rays off their own surface
T_MIN = 1e-3
T_MAX = 1e10

# Fraction of incoming light a diffuse bounce passes on
DIFFUSE_ALBEDO = 0.5

SKY_BOTTOM_COLOR = vec3(1.0, 1.0, 1.0)
SKY_TOP_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Accumulation buffer
# =============================================================================

# Fixed capacity so kernels compile once for every image size
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_active_size = ti.Vector.field(2, dtype=ti.i32, shape=())
_is_configured = ti.field(dtype=ti.i32, shape=())

# Running mean and sample count per pixel, indexed [column, row from bottom]
_pixel_mean = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_pixel_samples = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))


def setup_render_target(width: int, height: int) -> None:
    """Select the active image size and zero the accumulation buffer.

    Raises:
        ValueError: If either side is not positive or exceeds
            MAX_IMAGE_WIDTH / MAX_IMAGE_HEIGHT.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"{width}x{height} image does not fit the "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT} render buffer"
        )

    _active_size[None] = [width, height]
    _is_configured[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Zero every pixel mean and sample count."""
    _pixel_mean.fill(0.0)
    _pixel_samples.fill(0)


def get_image_dimensions() -> tuple[int, int]:
    """(width, height) of the active image."""
    size = _active_size[None]
    return int(size[0]), int(size[1])


def _require_render_target() -> tuple[int, int]:
    if _is_configured[None] == 0:
        raise RuntimeError("No render target: call setup_render_target() first")
    return get_image_dimensions()


# =============================================================================
# Shading
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky seen along direction, which need not be unit length."""
    t = 0.5 * (tm.normalize(direction).y + 1.0)
    return (1.0 - t) * SKY_BOTTOM_COLOR + t * SKY_TOP_COLOR


@ti.func
def scatter_diffuse(normal: vec3) -> vec3:
    """Lambertian bounce direction about a unit normal.

    Falls back to the normal itself when the random vector nearly cancels it.
    """
    direction = normal + random_unit_vector()
    if near_zero(direction):
        direction = normal
    return direction


@ti.func
def ray_color(ray: Ray, depth: ti.i32) -> vec3:
    """Color carried back along ray with at most depth surface hits.

    depth <= 0 gives black without touching the scene.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = 1.0
    origin = ray.origin
    direction = ray.direction

    # No break inside ti.func loops; `alive` drops to 0 once the path escapes
    alive = 1
    for _ in range(depth):
        if alive == 1:
            rec = intersect_scene(make_ray(origin, direction), T_MIN, T_MAX)
            if rec.hit == 0:
                color = throughput * background_color(direction)
                alive = 0
            else:
                origin = rec.point
                direction = scatter_diffuse(rec.normal)
                throughput *= DIFFUSE_ALBEDO

    return color


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _accumulate_sample(width: ti.i32, height: ti.i32, max_depth: ti.i32):
    for i, j in ti.ndrange(width, height):
        color = ray_color(get_ray_jittered(i, j, width, height), max_depth)

        # A non-finite sample would poison the mean for good
        for c in ti.static(range(3)):
            if tm.isnan(color[c]) or tm.isinf(color[c]):
                color[c] = 0.0

        n = _pixel_samples[i, j] + 1
        _pixel_samples[i, j] = n
        _pixel_mean[i, j] += (color - _pixel_mean[i, j]) / ti.cast(n, ti.f32)


@ti.kernel
def _sample_pixel(
    pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32, max_depth: ti.i32
) -> vec3:
    return ray_color(get_ray_jittered(pixel_i, pixel_j, width, height), max_depth)


@ti.kernel
def _shade_ray(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
) -> vec3:
    return ray_color(make_ray(vec3(ox, oy, oz), vec3(dx, dy, dz)), depth)


def _to_tuple(color) -> tuple[float, float, float]:
    return (float(color[0]), float(color[1]), float(color[2]))


# =============================================================================
# Host API
# =============================================================================


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Shade one ray against the current scene and return its linear RGB."""
    return _to_tuple(_shade_ray(*origin, *direction, depth))


def render_sample(pixel_i: int, pixel_j: int, max_depth: int = MAX_DEPTH) -> tuple[float, float, float]:
    """One jittered sample of pixel (pixel_i, pixel_j), not accumulated.

    pixel_i counts columns from the left and pixel_j rows from the bottom.

    Raises:
        RuntimeError: If setup_render_target() has not been called.
    """
    width, height = _require_render_target()
    return _to_tuple(_sample_pixel(pixel_i, pixel_j, width, height, max_depth))


def render_image(num_samples: int = 1, max_depth: int = MAX_DEPTH) -> None:
    """Fold num_samples more jittered samples into every pixel's mean.

    Raises:
        RuntimeError: If setup_render_target() has not been called.
        ValueError: If max_depth is negative.
    """
    width, height = _require_render_target()
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")

    for _ in range(num_samples):
        _accumulate_sample(width, height, max_depth)


def get_total_samples() -> int:
    """Samples accumulated per pixel (all pixels advance together)."""
    _require_render_target()
    return int(_pixel_samples[0, 0])


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Per-pixel means as a (height, width, 3) array, top row first.

    Channels are clamped to [0, 1]; no gamma is applied.

    Raises:
        RuntimeError: If setup_render_target() has not been called.
    """
    width, height = _require_render_target()

    means = _pixel_mean.to_numpy()[:width, :height]
    # [column, row from bottom] -> [row from top, column]
    image = np.flipud(np.swapaxes(means, 0, 1))
    return np.ascontiguousarray(np.clip(image, 0.0, 1.0), dtype=np.float32)
