"""Preview module for output and visualization.

Components:
    display: Matplotlib-based still preview
    export: PNG export with integer upscaling
    interactive: Taichi GGUI window that moves the camera from the keyboard

Example:
    >>> from src.raycaster.preview import save_png, show_preview
    >>> from src.raycaster.core.renderer import render
    >>>
    >>> image = render(camera, scene, 400, 300)
    >>> show_preview(image, scale=2)
    >>> save_png(image, "output.png", scale=2)
"""

from src.raycaster.preview.display import show_preview
from src.raycaster.preview.export import load_png, save_png, upscale_nearest
from src.raycaster.preview.interactive import InteractivePreview

__all__ = [
    "InteractivePreview",
    "show_preview",
    "save_png",
    "load_png",
    "upscale_nearest",
]
