"""Image export utilities for rendered frames.

Rendered frames are already 8-bit RGB, so exporting is a matter of
optional integer upscaling followed by a PNG write.

Supported formats:
    - PNG (8-bit RGB via Pillow)

Example:
    >>> from src.raycaster.preview.export import save_png
    >>> from src.raycaster.core.renderer import render
    >>>
    >>> image = render(camera, scene, 400, 300)
    >>> save_png(image, "output.png", scale=2)
"""

from __future__ import annotations

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage


def upscale_nearest(
    image: npt.NDArray[np.uint8],
    factor: int,
) -> npt.NDArray[np.uint8]:
    """Enlarge an image by pixel replication.

    Each source pixel becomes a factor x factor block, which keeps the
    hard checkerboard edges crisp.

    Args:
        image: Image array of shape (H, W, 3).
        factor: Integer scale factor (>= 1).

    Returns:
        Array of shape (H * factor, W * factor, 3).

    Raises:
        ValueError: If factor is less than 1.
    """
    if factor < 1:
        raise ValueError(f"Scale factor must be >= 1, got {factor}")
    if factor == 1:
        return image
    return np.repeat(np.repeat(image, factor, axis=0), factor, axis=1)


def save_png(
    image: npt.NDArray[np.uint8],
    filepath: str,
    *,
    scale: int = 1,
) -> None:
    """Save a rendered frame as a PNG file.

    Args:
        image: Frame of shape (H, W, 3), dtype uint8, row 0 at the top.
        filepath: Output file path (should end in .png).
        scale: Integer upscale factor applied before saving.

    Raises:
        ValueError: If the image is not (H, W, 3) uint8 or scale < 1.

    Example:
        >>> save_png(image, "showcase.png", scale=2)
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got {image.dtype}")

    upscaled = upscale_nearest(image, scale)

    pil_image = PILImage.fromarray(np.ascontiguousarray(upscaled), mode="RGB")
    pil_image.save(filepath)


def load_png(filepath: str) -> npt.NDArray[np.uint8]:
    """Load a PNG file as an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8).copy()
