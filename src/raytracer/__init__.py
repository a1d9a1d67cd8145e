"""Diffuse sphere ray tracer built on Taichi.

This package renders scenes of spheres by casting jittered rays per pixel,
bouncing them diffusely off surfaces, and averaging what they see:
- Tagged geometric primitives (spheres) with closest-hit scene queries
- Pinhole camera with look-at or viewport construction
- Depth-limited Lambertian shading under a sky gradient
- Progressive sample accumulation with gamma-2 output

Subpackages:
    core: Vector/ray utilities, render configuration, integrator and render loop
    geometry: Primitive kinds and intersection algorithms
    scene: Primitive storage, scene management and the default scene
    camera: Camera model with ray generation
    preview: Gamma encoding, preview display and image export
"""

__version__ = "0.1.0"
