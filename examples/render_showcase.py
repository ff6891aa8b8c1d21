#!/usr/bin/env python3
"""Render the showcase scene to a PNG.

This script renders the six-sphere showcase scene once and saves the frame,
printing progress at most once per second while it works.

Usage:
    python -m examples.render_showcase [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --height HEIGHT         Image height in pixels (default: 300)
    --camera X Y Z          Camera position (default: -2 0 1)
    --target X Y Z          Look-at point (default: 3 0 1)
    --scale SCALE           Integer upscale factor for the PNG (default: 2)
    --output OUTPUT         Output file path (default: showcase.png)
    --quiet                 Suppress progress output

Example:
    python -m examples.render_showcase --camera -3 1 1.5 --scale 1
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=300,
        help="Image height in pixels (default: 300)",
    )
    parser.add_argument(
        "--camera",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=(-2.0, 0.0, 1.0),
        help="Camera position (default: -2 0 1)",
    )
    parser.add_argument(
        "--target",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=(3.0, 0.0, 1.0),
        help="Look-at point (default: 3 0 1)",
    )
    parser.add_argument(
        "--scale",
        type=int,
        default=2,
        help="Integer upscale factor for the saved PNG (default: 2)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="showcase.png",
        help="Output file path (default: showcase.png)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_showcase(
    width: int = 400,
    height: int = 300,
    camera_position: tuple[float, float, float] = (-2.0, 0.0, 1.0),
    camera_target: tuple[float, float, float] = (3.0, 0.0, 1.0),
    scale: int = 2,
    output_path: str = "showcase.png",
    quiet: bool = False,
) -> Path:
    """Render the showcase scene and save to file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        camera_position: Camera position.
        camera_target: Look-at point.
        scale: Integer upscale factor for the saved PNG.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.raycaster.core.renderer import render
    from src.raycaster.preview.export import save_png
    from src.raycaster.scene.showcase import ShowcaseParams, create_showcase_scene

    params = ShowcaseParams(
        camera_position=camera_position,
        camera_target=camera_target,
        width=width,
        height=height,
        display_scale=scale,
    )

    if not quiet:
        print(f"Creating showcase scene ({width}x{height})...")

    scene, camera = create_showcase_scene(params)

    def progress_callback(fraction: float, elapsed: float) -> None:
        if fraction < 1.0:
            print(f"Rendered {fraction * 100:.0f}% ({elapsed:.1f}s)", flush=True)

    start_time = time.time()
    image = render(
        camera,
        scene,
        params.width,
        params.height,
        callback=None if quiet else progress_callback,
    )
    render_ms = (time.time() - start_time) * 1000.0

    if not quiet:
        print(f"Rendered in {render_ms:.0f}ms")

    output_file = Path(output_path)
    save_png(image, str(output_file), scale=params.display_scale)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_showcase(
            width=args.width,
            height=args.height,
            camera_position=tuple(args.camera),
            camera_target=tuple(args.target),
            scale=args.scale,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
