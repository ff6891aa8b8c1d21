#!/usr/bin/env python3
"""Interactive showcase renderer with keyboard camera movement.

This script opens a window on the showcase scene. Each key press moves the
camera and re-renders the whole frame.

Usage:
    python -m examples.interactive_showcase

Controls:
    - W / S: move forward / back along x
    - A / D: move left / right along y
    - Q / E: move up / down along z
    - P: export the current frame to a timestamped PNG
    - Esc or close the window to exit
"""

from __future__ import annotations

import platform
import sys
from pathlib import Path

# Ensure the project root is in the Python path for direct execution
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import taichi as ti  # noqa: E402


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    system = platform.system()

    if system == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    # Try generic GPU (CUDA on Linux/Windows, Vulkan as fallback)
    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point for the interactive showcase renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    # Initialize Taichi first (before importing modules that declare fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from src.raycaster.core.renderer import Renderer
    from src.raycaster.preview.interactive import InteractivePreview
    from src.raycaster.scene.showcase import ShowcaseParams, create_showcase_scene

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    params = ShowcaseParams()
    scene, camera = create_showcase_scene(params)

    def progress_callback(fraction: float, elapsed: float) -> None:
        if fraction < 1.0:
            print(f"Rendered {fraction * 100:.0f}%", flush=True)
        else:
            print(f"Rendered in {elapsed * 1000.0:.0f}ms")

    renderer = Renderer(
        params.width,
        params.height,
        scene,
        camera,
        callback=progress_callback,
    )

    print(
        f"Creating interactive preview window "
        f"({params.width * params.display_scale}x{params.height * params.display_scale})..."
    )
    preview = InteractivePreview(renderer, scale=params.display_scale)

    print("Starting interactive rendering...")
    print("  - W/S, A/D, Q/E move the camera along x, y, z")
    print("  - P exports the current frame")
    print("  - Close window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
