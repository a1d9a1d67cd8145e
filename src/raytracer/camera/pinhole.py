"""Pinhole camera: image coordinates to primary rays.

A camera is described on the host by a frozen PinholeCamera. setup_camera()
turns it into an origin plus a viewport (lower-left corner, full horizontal
edge, full vertical edge) stored in Taichi fields, and kernels call get_ray()
or get_ray_jittered() against that state.

The view frame follows the look-at convention. w is the unit vector from
lookat back to lookfrom, u = unit(vup x w) is screen right and v = w x u is
screen up. Image coordinates run u: 0 left to 1 right and v: 0 bottom to
1 top. Primary ray directions are left unnormalized.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.camera.pinhole import viewport_camera, setup_camera
    >>>
    >>> setup_camera(viewport_camera(aspect_ratio=2.0))
    >>> # lower-left (-2, -1, -1), horizontal (4, 0, 0), vertical (0, 2, 0)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from src.raytracer.core.ray import Ray, make_ray, unit_vector


@dataclass(frozen=True)
class PinholeCamera:
    """Look-at description of a perspective camera.

    Attributes:
        lookfrom: Eye position.
        lookat: Any point on the line of sight.
        vup: World up hint; only its component perpendicular to the line of
            sight matters.
        vfov: Vertical opening angle in degrees, strictly between 0 and 180.
        aspect_ratio: Image width over image height.
        focal_length: Eye to viewport distance.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float]
    vfov: float
    aspect_ratio: float
    focal_length: float = 1.0

    def __post_init__(self) -> None:
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if not self.focal_length > 0.0:
            raise ValueError(f"focal_length must be positive, got {self.focal_length}")


def viewport_camera(
    aspect_ratio: float,
    viewport_height: float = 2.0,
    focal_length: float = 1.0,
) -> PinholeCamera:
    """Camera at the origin looking down -z, given by its viewport size.

    The field of view is chosen so the viewport at focal_length is
    viewport_height tall. Defaults with aspect_ratio=2 give the classic
    lower-left (-2, -1, -1), horizontal (4, 0, 0), vertical (0, 2, 0).

    Raises:
        ValueError: If viewport_height or focal_length is not positive, or
            the aspect ratio is rejected by PinholeCamera.
    """
    if not viewport_height > 0.0:
        raise ValueError(f"viewport_height must be positive, got {viewport_height}")
    if not focal_length > 0.0:
        raise ValueError(f"focal_length must be positive, got {focal_length}")

    vfov = math.degrees(2.0 * math.atan((viewport_height / 2.0) / focal_length))
    return PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -focal_length),
        vup=(0.0, 1.0, 0.0),
        vfov=vfov,
        aspect_ratio=aspect_ratio,
        focal_length=focal_length,
    )


# =============================================================================
# Device-side camera state
# =============================================================================

_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_frame_u = ti.Vector.field(3, dtype=ti.f32, shape=())
_frame_v = ti.Vector.field(3, dtype=ti.f32, shape=())
_frame_w = ti.Vector.field(3, dtype=ti.f32, shape=())
_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Upload a camera's frame and viewport for the render kernels.

    Call again whenever the camera changes; the last call wins.

    Raises:
        ValueError: If lookfrom equals lookat, or vup is parallel to the
            line of sight.
    """
    half_height = math.tan(math.radians(camera.vfov) / 2.0)
    viewport_height = 2.0 * half_height * camera.focal_length
    viewport_width = camera.aspect_ratio * viewport_height

    eye = np.asarray(camera.lookfrom, dtype=np.float64)
    target = np.asarray(camera.lookat, dtype=np.float64)

    try:
        w = unit_vector(eye - target)
    except ValueError as e:
        raise ValueError("Camera lookfrom and lookat must differ") from e
    try:
        u = unit_vector(np.cross(np.asarray(camera.vup, dtype=np.float64), w))
    except ValueError as e:
        raise ValueError("Camera vup must not be parallel to the view direction") from e
    v = np.cross(w, u)

    horizontal = viewport_width * u
    vertical = viewport_height * v
    lower_left = eye - camera.focal_length * w - horizontal / 2.0 - vertical / 2.0

    for f, value in (
        (_eye, eye),
        (_frame_u, u),
        (_frame_v, v),
        (_frame_w, w),
        (_horizontal, horizontal),
        (_vertical, vertical),
        (_lower_left, lower_left),
    ):
        f[None] = value.tolist()


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Primary ray from the eye through viewport point (u, v).

    The direction reaches the viewport plane at t = 1, so it is longer
    toward the corners.
    """
    eye = _eye[None]
    target = _lower_left[None] + u * _horizontal[None] + v * _vertical[None]
    return make_ray(eye, target - eye)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Primary ray through a uniformly random point of pixel (pixel_i, pixel_j).

    pixel_i counts columns from the left and pixel_j rows from the bottom.
    """
    u = (ti.cast(pixel_i, ti.f32) + ti.random(ti.f32)) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + ti.random(ti.f32)) / ti.cast(height, ti.f32)
    return get_ray(u, v)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Read back the uploaded camera state.

    Keys: origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _eye,
        "u": _frame_u,
        "v": _frame_v,
        "w": _frame_w,
        "horizontal": _horizontal,
        "vertical": _vertical,
        "lower_left": _lower_left,
    }
    info = {}
    for name, f in fields.items():
        vec = f[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    return info
