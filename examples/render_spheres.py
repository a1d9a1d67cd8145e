#!/usr/bin/env python3
"""Render the default two-sphere scene.

This script renders a small diffuse sphere resting on a large ground sphere
under a sky gradient, then writes the result to an image file.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH       Image width in pixels (default: 400)
    --height HEIGHT     Image height in pixels (default: 200)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --max-depth DEPTH   Maximum number of bounces per path (default: 50)
    --seed SEED         Random seed (default: 0)
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --output OUTPUT     Output file path (default: result.ppm)
    --batch-size SIZE   Samples per progress update (default: 10)
    --preview           Show the finished render in a Matplotlib window
    --quiet             Suppress progress output

Example:
    python -m examples.render_spheres --width 200 --height 100 --samples 16 --output spheres.png
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from src.raytracer.core.config import (  # noqa: E402
    DEFAULT_HEIGHT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_SAMPLES_PER_PIXEL,
    DEFAULT_SEED,
    DEFAULT_WIDTH,
    RenderConfig,
    init_taichi,
)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the default two-sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=DEFAULT_WIDTH,
        help=f"Image width in pixels (default: {DEFAULT_WIDTH})",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=DEFAULT_HEIGHT,
        help=f"Image height in pixels (default: {DEFAULT_HEIGHT})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=DEFAULT_SAMPLES_PER_PIXEL,
        help=f"Number of samples per pixel (default: {DEFAULT_SAMPLES_PER_PIXEL})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=DEFAULT_MAX_DEPTH,
        help=f"Maximum number of bounces per path (default: {DEFAULT_MAX_DEPTH})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=DEFAULT_SEED,
        help=f"Random seed (default: {DEFAULT_SEED})",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="result.ppm",
        help="Output file path (default: result.ppm)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the finished render in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_spheres(
    config: RenderConfig,
    output_path: str = "result.ppm",
    batch_size: int = 10,
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render the default scene and save to file.

    Taichi must already be initialized.

    Args:
        config: Image size, sample count and bounce budget.
        output_path: Output file path; the extension selects the format.
        batch_size: Number of samples to render between progress updates.
        preview: If True, show the finished render in a window.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so Taichi is initialized before fields are declared
    from src.raytracer.camera.pinhole import setup_camera
    from src.raytracer.core.progressive import ProgressiveRenderer
    from src.raytracer.preview.display import show_preview
    from src.raytracer.preview.export import save_image
    from src.raytracer.scene.default_scene import create_default_scene

    if not quiet:
        print(f"Creating default scene ({config.width}x{config.height})...")

    scene, camera = create_default_scene(aspect_ratio=config.aspect_ratio)
    setup_camera(camera)

    renderer = ProgressiveRenderer.from_config(config)

    if not quiet:
        print(
            f"Rendering {config.samples_per_pixel} samples per pixel "
            f"(max depth {config.max_depth}, {scene.get_sphere_count()} spheres)..."
        )

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(
        num_samples=config.samples_per_pixel,
        batch_size=batch_size,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress

    output_file = Path(output_path)
    save_image(renderer, str(output_file))

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if preview:
        show_preview(renderer)

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = RenderConfig(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            arch=args.arch,
        )
        backend = init_taichi(config)
        if not args.quiet:
            print(f"Using {backend.upper()} backend")

        render_spheres(
            config,
            output_path=args.output,
            batch_size=args.batch_size,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
