"""Matplotlib-based preview display for rendered frames.

Example:
    >>> from src.raycaster.preview.display import show_preview
    >>> from src.raycaster.core.renderer import render
    >>>
    >>> image = render(camera, scene, 400, 300)
    >>> show_preview(image, scale=2)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt

from src.raycaster.preview.export import upscale_nearest

# Smallest side of a default-sized preview figure, in inches
MIN_FIGURE_INCHES = 4.0


def show_preview(
    image: npt.NDArray[np.uint8],
    *,
    scale: int = 1,
    title: str | None = None,
    figsize: tuple[float, float] | None = None,
    block: bool = True,
) -> None:
    """Display a rendered frame as a Matplotlib figure.

    The frame is upscaled by pixel replication before display, and shown
    without interpolation so each rendered pixel stays a sharp square.

    Args:
        image: Frame of shape (H, W, 3), dtype uint8.
        scale: Integer upscale factor.
        title: Custom title (default shows the render resolution).
        figsize: Figure size in inches. Defaults to roughly 100 dpi of the
            upscaled frame, enlarged so the short side is at least
            MIN_FIGURE_INCHES.
        block: Whether to block execution until figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = upscale_nearest(image, scale)
    height, width = image.shape[:2]

    if figsize is None:
        # Roughly 100 dpi, but never so small that the title cannot fit
        fig_width = display_image.shape[1] / 100.0
        fig_height = display_image.shape[0] / 100.0
        grow = max(1.0, MIN_FIGURE_INCHES / min(fig_width, fig_height))
        figsize = (fig_width * grow, fig_height * grow)

    fig, ax = plt.subplots(1, 1, figsize=figsize)

    ax.imshow(display_image, interpolation="nearest")
    ax.axis("off")

    if title is None:
        title = f"Render Preview - {width}x{height}"
        if scale != 1:
            title += f" (x{scale})"
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
