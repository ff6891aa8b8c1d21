"""Full-frame renderer with progress reporting and camera movement.

This module wraps the shading kernels into the two entry points the rest
of the project uses:

- render(): a pure function of (camera, scene, width, height) returning a
  freshly allocated pixel buffer. Every call re-renders every pixel.
- Renderer: keeps the camera and the last completed image for interactive
  use. move_camera() shifts the camera and re-renders the whole frame.

The frame is rendered in horizontal bands so that a progress callback can
be invoked between bands. The callback receives
(fraction_complete, elapsed_seconds), fires at most once per
progress_interval seconds, and always fires once at the end with 1.0.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycaster.core.renderer import Renderer
    >>> from src.raycaster.scene.showcase import create_showcase_scene
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> renderer = Renderer(400, 300, scene, camera)
    >>> image = renderer.render()
    >>> image.shape
    (300, 400, 3)
    >>> image = renderer.move_camera(0.0, 0.5, 0.0)
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from src.raycaster.camera.projector import Camera, setup_camera
from src.raycaster.core.shader import (
    get_color_image_numpy,
    render_rows,
    setup_render_target,
)

if TYPE_CHECKING:
    from src.raycaster.scene.manager import SceneManager

# Type alias for progress callback
# Callback receives (fraction_complete, elapsed_seconds)
ProgressCallback = Callable[[float, float], None]

# Pixel buffer: (height, width, 3) uint8, row 0 at the top
PixelBuffer = npt.NDArray[np.uint8]

# Rows rendered per kernel launch between progress checks
DEFAULT_BAND_HEIGHT = 16

# Minimum seconds between progress callbacks
DEFAULT_PROGRESS_INTERVAL = 1.0


def to_pixel_buffer(image: npt.NDArray[np.float32]) -> PixelBuffer:
    """Convert 0-255 float colors to 8-bit pixels.

    Channels are clamped to [0, 255] and rounded half up.

    Args:
        image: Float image of shape (H, W, 3) on the 0-255 scale.

    Returns:
        Array of the same shape with dtype uint8.
    """
    clamped = np.clip(image, 0.0, 255.0)
    return np.floor(clamped + 0.5).astype(np.uint8)


def render(
    camera: Camera,
    scene: SceneManager,
    width: int,
    height: int,
    *,
    callback: ProgressCallback | None = None,
    progress_interval: float = DEFAULT_PROGRESS_INTERVAL,
    band_height: int = DEFAULT_BAND_HEIGHT,
) -> PixelBuffer:
    """Render a full frame.

    The scene and camera are uploaded to the device first, so the result
    depends only on the arguments and never on a previous render.

    Args:
        camera: Camera to render from.
        scene: Scene to render.
        width: Image width in pixels.
        height: Image height in pixels.
        callback: Optional progress callback, see module docstring.
        progress_interval: Minimum seconds between progress callbacks.
        band_height: Rows rendered per kernel launch.

    Returns:
        A new (height, width, 3) uint8 array.

    Raises:
        ValueError: If width, height or band_height is invalid.
    """
    if band_height <= 0:
        raise ValueError(f"band_height must be positive, got {band_height}")

    setup_render_target(width, height)
    scene.upload()
    setup_camera(camera)

    start_time = time.monotonic()
    last_report = start_time

    for row_start in range(0, height, band_height):
        row_end = min(row_start + band_height, height)
        render_rows(row_start, row_end)

        if callback is not None and row_end < height:
            now = time.monotonic()
            if now - last_report >= progress_interval:
                callback(row_end / height, now - start_time)
                last_report = now

    image = to_pixel_buffer(get_color_image_numpy())

    if callback is not None:
        callback(1.0, time.monotonic() - start_time)

    return image


class Renderer:
    """Stateful renderer for interactive use.

    Holds the scene, the camera and the most recent completed frame. The
    visible frame is replaced only once a render has finished, so readers
    of `image` never see a partially written buffer.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        scene: The scene being rendered.
        camera: The current camera. Mutated by move_camera().
    """

    def __init__(
        self,
        width: int,
        height: int,
        scene: SceneManager,
        camera: Camera,
        *,
        callback: ProgressCallback | None = None,
        progress_interval: float = DEFAULT_PROGRESS_INTERVAL,
    ) -> None:
        """Initialize the renderer.

        Args:
            width: Image width in pixels.
            height: Image height in pixels.
            scene: Scene to render.
            camera: Initial camera.
            callback: Optional progress callback used by every render.
            progress_interval: Minimum seconds between progress callbacks.

        Raises:
            ValueError: If the dimensions are not positive or too large.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height
        self.scene = scene
        self.camera = camera
        self._callback = callback
        self._progress_interval = progress_interval
        self._image: PixelBuffer | None = None
        self._render_count = 0
        self._last_render_seconds = 0.0

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def image(self) -> PixelBuffer | None:
        """The last completed frame, or None before the first render."""
        return self._image

    @property
    def render_count(self) -> int:
        """Number of completed renders."""
        return self._render_count

    @property
    def last_render_seconds(self) -> float:
        """Wall-clock duration of the last completed render."""
        return self._last_render_seconds

    def render(self) -> PixelBuffer:
        """Render the current camera view and make it the visible frame."""
        start_time = time.monotonic()
        image = render(
            self.camera,
            self.scene,
            self._width,
            self._height,
            callback=self._callback,
            progress_interval=self._progress_interval,
        )
        self._last_render_seconds = time.monotonic() - start_time
        self._image = image
        self._render_count += 1
        return image

    def move_camera(self, dx: float, dy: float, dz: float) -> PixelBuffer:
        """Translate the camera by (dx, dy, dz) and re-render the frame.

        The look-at target stays fixed. No bounds are enforced.

        Returns:
            The newly rendered frame.
        """
        self.camera = self.camera.moved(dx, dy, dz)
        return self.render()

    def save_image(self, filepath: str, scale: int = 1) -> None:
        """Save the last completed frame as a PNG.

        Renders first if nothing has been rendered yet.

        Args:
            filepath: Path to save the image (e.g., "output.png").
            scale: Integer upscale factor (pixel replication).
        """
        from src.raycaster.preview.export import save_png

        image = self._image if self._image is not None else self.render()
        save_png(image, filepath, scale=scale)

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"camera={self.camera.position}, renders={self.render_count})"
        )
