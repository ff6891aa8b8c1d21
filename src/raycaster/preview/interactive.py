"""Interactive preview window using Taichi GGUI.

This module shows the renderer's current frame in a ti.ui.Window and lets
the keyboard move the camera. Every move triggers a full re-render; the
window keeps showing the previous frame until the new one is complete.

Controls:
    W / S: move the camera along +x / -x
    A / D: move the camera along +y / -y
    Q / E: move the camera along +z / -z
    P: export the current frame to a timestamped PNG

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.raycaster.core.renderer import Renderer
    >>> from src.raycaster.preview.interactive import InteractivePreview
    >>> from src.raycaster.scene.showcase import create_showcase_scene
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> preview = InteractivePreview(Renderer(400, 300, scene, camera), scale=2)
    >>> preview.run()  # Blocks until the window is closed
"""

from __future__ import annotations

import os
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from src.raycaster.preview.export import upscale_nearest

if TYPE_CHECKING:
    import numpy.typing as npt

    from src.raycaster.core.renderer import Renderer

# Camera translation per key press, in world units
DEFAULT_MOVE_STEP = 0.5

# key -> unit movement direction (dx, dy, dz)
KEY_DIRECTIONS: dict[str, tuple[float, float, float]] = {
    "w": (1.0, 0.0, 0.0),
    "s": (-1.0, 0.0, 0.0),
    "a": (0.0, 1.0, 0.0),
    "d": (0.0, -1.0, 0.0),
    "q": (0.0, 0.0, 1.0),
    "e": (0.0, 0.0, -1.0),
}

EXPORT_KEY = "p"


class InteractivePreview:
    """Interactive preview window using Taichi GGUI.

    Wraps ti.ui.Window around a Renderer. The window is created lazily so
    the key handling and image conversion can be used without a display.

    Attributes:
        renderer: The renderer whose frames are displayed.
        scale: Integer upscale factor from render to window pixels.
        step: Camera translation per key press.
        display_image: Taichi field holding the upscaled frame (RGB float).
    """

    def __init__(
        self,
        renderer: Renderer,
        *,
        scale: int = 2,
        step: float = DEFAULT_MOVE_STEP,
        title: str = "Ray Caster - Interactive Preview",
    ) -> None:
        """Initialize the interactive preview.

        Args:
            renderer: Renderer to display and drive.
            scale: Integer upscale factor (>= 1).
            step: Camera translation per key press.
            title: Window title.

        Raises:
            ValueError: If scale is less than 1.
        """
        if scale < 1:
            raise ValueError(f"Scale factor must be >= 1, got {scale}")

        self.renderer = renderer
        self.scale = scale
        self.step = step
        self.width = renderer.width * scale
        self.height = renderer.height * scale
        self._title = title
        self._is_initialized = False

        # Defer window creation until run() to support headless checks
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        # Shape is (width, height) for Taichi field, RGB values stored as vec3
        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )

    def _initialize_window(self) -> None:
        """Initialize the Taichi GGUI window and canvas."""
        if self._is_initialized:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()
        self._is_initialized = True

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, image: npt.NDArray[np.uint8]) -> None:
        """Update the display image from a rendered frame.

        Args:
            image: Frame of shape (render height, render width, 3), uint8.

        Raises:
            ValueError: If image shape doesn't match the renderer.
        """
        expected_shape = (self.renderer.height, self.renderer.width, 3)
        if image.shape != expected_shape:
            raise ValueError(
                f"Image shape {image.shape} doesn't match expected {expected_shape}"
            )

        upscaled = upscale_nearest(image, self.scale).astype(np.float32) / 255.0

        # NumPy images are (height, width, channels) with row 0 at the top;
        # the canvas field is (x, y) with y = 0 at the bottom
        image_transposed = np.ascontiguousarray(
            np.transpose(np.flipud(upscaled), (1, 0, 2))
        )
        self.display_image.from_numpy(image_transposed)

    def handle_key(self, key: str) -> bool:
        """Apply a key press.

        Movement keys shift the camera by `step` and re-render; the export
        key saves the current frame.

        Args:
            key: Key name as reported by GGUI (case-insensitive).

        Returns:
            True if the displayed frame changed.
        """
        key = key.lower()

        if key == EXPORT_KEY:
            self._export_png()
            return False

        direction = KEY_DIRECTIONS.get(key)
        if direction is None:
            return False

        dx, dy, dz = (component * self.step for component in direction)
        image = self.renderer.move_camera(dx, dy, dz)
        self.update_image(image)
        return True

    def is_running(self) -> bool:
        """Check if the window is still open."""
        return self.window.running

    def show_frame(self) -> None:
        """Present the current display image."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self) -> None:
        """Run the main window event loop.

        Renders the first frame if needed, then blocks until the window is
        closed, handling one key press at a time.
        """
        self._initialize_window()

        image = self.renderer.image
        if image is None:
            image = self.renderer.render()
        self.update_image(image)

        while self.is_running():
            for event in self.window.get_events(ti.ui.PRESS):
                if event.key == ti.ui.ESCAPE:
                    self.close()
                else:
                    self.handle_key(event.key)
            self.show_frame()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    def _export_png(self) -> None:
        """Export the current frame to a timestamped PNG file."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"raycaster_{timestamp}.png"

        self.renderer.save_image(filename, scale=self.scale)
        print(f"Exported: {filename} (camera at {self.renderer.camera.position})")

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        # On macOS, display is always available if not in SSH
        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            return not (ssh_connection and not display)

        if display or wayland:
            return True

        return os.name == "nt"
