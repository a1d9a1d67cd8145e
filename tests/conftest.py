"""Shared fixtures: one Taichi runtime per session and a clean scene per test."""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Start the CPU backend once; re-initializing Taichi mid-run invalidates fields.

    The fixed seed makes every random draw in the suite reproducible.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data and the render target around each test."""
    # Import here so Taichi is initialized before fields are declared
    from src.raytracer.core.integrator import clear_render_target
    from src.raytracer.scene.intersection import clear_scene

    clear_scene()
    clear_render_target()

    yield

    clear_scene()
    clear_render_target()


@pytest.fixture
def down_z_camera():
    """Set up the classic 2:1 camera at the origin looking down -z."""
    from src.raytracer.camera.pinhole import setup_camera, viewport_camera

    camera = viewport_camera(aspect_ratio=2.0)
    setup_camera(camera)
    return camera
