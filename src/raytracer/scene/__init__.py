"""Scene module for primitive storage and scene management.

Components:
    intersection: Field-backed primitive storage and closest-hit queries
    manager: Host-side scene manager with serialization
    default_scene: The default two-sphere scene and its camera

Scene data is stored as Structure-of-Arrays Taichi fields, written once on
the host before rendering and only read by kernels.
"""

from .default_scene import create_default_scene
from .intersection import (
    MAX_PRIMITIVES,
    add_sphere,
    clear_scene,
    get_primitive_count,
    intersect_scene,
    query_closest_hit,
)
from .manager import SceneConfig, SceneManager, SphereInfo

__all__ = [
    "add_sphere",
    "clear_scene",
    "get_primitive_count",
    "intersect_scene",
    "query_closest_hit",
    "MAX_PRIMITIVES",
    "SceneManager",
    "SceneConfig",
    "SphereInfo",
    "create_default_scene",
]
