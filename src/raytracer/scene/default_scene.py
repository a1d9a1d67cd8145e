"""Default two-sphere scene.

The classic first diffuse render: a small sphere resting on a very large
"ground" sphere, seen by a camera at the origin looking down -z through a
2:1 viewport.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raytracer.scene.default_scene import create_default_scene
    >>> from src.raytracer.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_default_scene()
    >>> setup_camera(camera)
"""

from src.raytracer.camera.pinhole import PinholeCamera, viewport_camera
from src.raytracer.scene.manager import SceneManager

# Small sphere in front of the camera
CENTER_SPHERE = ((0.0, 0.0, -1.0), 0.5)

# Ground sphere; its top touches the bottom of the center sphere
GROUND_SPHERE = ((0.0, -100.5, -1.0), 100.0)

DEFAULT_ASPECT_RATIO = 2.0


def create_default_scene(
    aspect_ratio: float = DEFAULT_ASPECT_RATIO,
) -> tuple[SceneManager, PinholeCamera]:
    """Create the default two-sphere scene and its camera.

    Args:
        aspect_ratio: Width divided by height of the output image.

    Returns:
        Tuple of (scene, camera). The camera still has to be passed to
        setup_camera() before rendering.
    """
    scene = SceneManager()
    for center, radius in (CENTER_SPHERE, GROUND_SPHERE):
        scene.add_sphere(center, radius)

    camera = viewport_camera(aspect_ratio=aspect_ratio, viewport_height=2.0, focal_length=1.0)
    return scene, camera
