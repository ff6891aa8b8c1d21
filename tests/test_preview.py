"""Tests for the preview module.

This module tests the preview/display, preview/export and
preview/interactive functionality including:
- Nearest-neighbour upscaling
- PNG export and loading
- Keyboard camera movement in the interactive preview
- Display image conversion

Note: Tests avoid displaying actual windows. show_preview runs against the
non-interactive Agg backend and the GGUI window is never created.
"""

import numpy as np
import pytest
from PIL import Image as PILImage


def _pattern(height=3, width=4):
    """A small uint8 image with a distinct value per pixel and channel."""
    return np.arange(height * width * 3, dtype=np.uint8).reshape(height, width, 3)


def _small_renderer(width=8, height=6):
    from src.raycaster.core.renderer import Renderer
    from src.raycaster.scene.showcase import create_showcase_scene

    scene, camera = create_showcase_scene()
    return Renderer(width, height, scene, camera)


class TestUpscaleNearest:
    """Test pixel-replication upscaling."""

    def test_factor_one_is_identity(self):
        """Test that a factor of 1 returns the image unchanged."""
        from src.raycaster.preview.export import upscale_nearest

        image = _pattern()
        np.testing.assert_array_equal(upscale_nearest(image, 1), image)

    def test_factor_two_replicates_blocks(self):
        """Test that each pixel becomes a 2x2 block."""
        from src.raycaster.preview.export import upscale_nearest

        image = _pattern()
        result = upscale_nearest(image, 2)

        assert result.shape == (6, 8, 3)
        for dy in range(2):
            for dx in range(2):
                np.testing.assert_array_equal(result[dy::2, dx::2], image)

    def test_rejects_factor_below_one(self):
        """Test that factors below 1 raise ValueError."""
        from src.raycaster.preview.export import upscale_nearest

        with pytest.raises(ValueError, match="Scale factor"):
            upscale_nearest(_pattern(), 0)


class TestSavePng:
    """Test PNG export functionality."""

    def test_save_png_creates_file(self, tmp_path):
        """Test that save_png creates a valid RGB PNG."""
        from src.raycaster.preview.export import save_png

        path = tmp_path / "frame.png"
        save_png(_pattern(), str(path))

        img = PILImage.open(path)
        assert img.size == (4, 3)
        assert img.mode == "RGB"

    def test_save_png_upscales(self, tmp_path):
        """Test that the scale factor enlarges the saved image."""
        from src.raycaster.preview.export import save_png

        path = tmp_path / "frame.png"
        save_png(_pattern(), str(path), scale=2)

        assert PILImage.open(path).size == (8, 6)

    def test_round_trip_is_lossless(self, tmp_path):
        """Test that load_png returns exactly what save_png wrote."""
        from src.raycaster.preview.export import load_png, save_png

        image = _pattern()
        path = tmp_path / "frame.png"
        save_png(image, str(path))

        loaded = load_png(str(path))
        assert loaded.dtype == np.uint8
        np.testing.assert_array_equal(loaded, image)

    def test_save_png_rejects_float_images(self, tmp_path):
        """Test that unconverted float buffers are rejected."""
        from src.raycaster.preview.export import save_png

        with pytest.raises(ValueError, match="uint8"):
            save_png(np.zeros((3, 4, 3), dtype=np.float32), str(tmp_path / "x.png"))

    def test_save_png_rejects_bad_shape(self, tmp_path):
        """Test that non-RGB arrays are rejected."""
        from src.raycaster.preview.export import save_png

        with pytest.raises(ValueError, match="Expected an"):
            save_png(np.zeros((3, 4), dtype=np.uint8), str(tmp_path / "x.png"))


class TestShowPreview:
    """Test the Matplotlib preview without opening a window."""

    def test_show_preview_draws_upscaled_image(self, monkeypatch):
        """Test that show_preview hands the upscaled frame to imshow."""
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from src.raycaster.preview.display import show_preview

        monkeypatch.setattr(plt, "show", lambda block=True: None)

        show_preview(_pattern(), scale=2)

        ax = plt.gcf().axes[0]
        shown = ax.images[0].get_array()
        assert shown.shape == (6, 8, 3)
        assert ax.get_title() == "Render Preview - 4x3 (x2)"
        plt.close("all")

    def test_small_frame_gets_readable_figure(self, monkeypatch):
        """Test that tiny frames lay out without warnings at scale 1."""
        import warnings

        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt

        from src.raycaster.preview.display import MIN_FIGURE_INCHES, show_preview

        monkeypatch.setattr(plt, "show", lambda block=True: None)

        with warnings.catch_warnings():
            warnings.simplefilter("error", UserWarning)
            show_preview(_pattern(), scale=1)

        width, height = plt.gcf().get_size_inches()
        assert min(width, height) == pytest.approx(MIN_FIGURE_INCHES)
        assert width / height == pytest.approx(4 / 3)
        plt.close("all")


class TestModuleExports:
    """Test that the package exposes its public API."""

    def test_preview_exports(self):
        """Test the names exported by the preview package."""
        from src.raycaster import preview

        for name in ["InteractivePreview", "show_preview", "save_png", "load_png", "upscale_nearest"]:
            assert name in preview.__all__
            assert hasattr(preview, name)


class TestInteractivePreview:
    """Tests for the InteractivePreview class.

    Note: These tests avoid creating actual GUI windows by testing
    the initialization, key handling and data handling logic only.
    """

    def test_init_creates_display_field(self):
        """Test that the display field matches the upscaled render size."""
        from src.raycaster.preview.interactive import InteractivePreview

        preview = InteractivePreview(_small_renderer(8, 6), scale=2)

        assert preview.width == 16
        assert preview.height == 12
        assert preview.display_image.shape == (16, 12)

    def test_init_defers_window_creation(self):
        """Test that window creation is deferred until run/show."""
        from src.raycaster.preview.interactive import InteractivePreview

        preview = InteractivePreview(_small_renderer())

        assert preview._window is None
        assert preview._canvas is None
        assert preview._is_initialized is False

    def test_init_rejects_bad_scale(self):
        """Test that the scale factor must be at least 1."""
        from src.raycaster.preview.interactive import InteractivePreview

        with pytest.raises(ValueError, match="Scale factor"):
            InteractivePreview(_small_renderer(), scale=0)

    def test_update_image_validates_shape(self):
        """Test that update_image validates the input shape."""
        from src.raycaster.preview.interactive import InteractivePreview

        preview = InteractivePreview(_small_renderer(8, 6))

        with pytest.raises(ValueError, match="doesn't match expected"):
            preview.update_image(np.zeros((10, 10, 3), dtype=np.uint8))

    def test_update_image_orientation(self):
        """Test that the top-left pixel lands at the canvas top-left."""
        from src.raycaster.preview.interactive import InteractivePreview

        preview = InteractivePreview(_small_renderer(8, 6), scale=1)

        image = np.zeros((6, 8, 3), dtype=np.uint8)
        image[0, 0] = (255, 0, 0)
        preview.update_image(image)

        result = preview.display_image.to_numpy()
        # Canvas field is (x, y) with y = 0 at the bottom
        assert result[0, 5].tolist() == pytest.approx([1.0, 0.0, 0.0])
        assert result[0, 0].tolist() == pytest.approx([0.0, 0.0, 0.0])

    @pytest.mark.parametrize(
        "key, expected",
        [
            ("w", (-1.5, 0.0, 1.0)),
            ("s", (-2.5, 0.0, 1.0)),
            ("a", (-2.0, 0.5, 1.0)),
            ("d", (-2.0, -0.5, 1.0)),
            ("q", (-2.0, 0.0, 1.5)),
            ("E", (-2.0, 0.0, 0.5)),
        ],
    )
    def test_movement_keys(self, key, expected):
        """Test that each movement key shifts the camera by one step."""
        from src.raycaster.preview.interactive import InteractivePreview

        renderer = _small_renderer()
        preview = InteractivePreview(renderer, step=0.5)

        assert preview.handle_key(key) is True
        assert renderer.camera.position == pytest.approx(expected)
        assert renderer.render_count == 1
        assert renderer.image is not None

    def test_unknown_key_is_ignored(self):
        """Test that unmapped keys neither move nor re-render."""
        from src.raycaster.preview.interactive import InteractivePreview

        renderer = _small_renderer()
        preview = InteractivePreview(renderer)

        assert preview.handle_key("x") is False
        assert renderer.camera.position == (-2.0, 0.0, 1.0)
        assert renderer.render_count == 0

    def test_export_key_saves_png(self, tmp_path, monkeypatch):
        """Test that the export key writes a PNG into the working directory."""
        from src.raycaster.preview.interactive import InteractivePreview

        monkeypatch.chdir(tmp_path)
        preview = InteractivePreview(_small_renderer(8, 6), scale=2)

        assert preview.handle_key("p") is False

        files = list(tmp_path.glob("raycaster_*.png"))
        assert len(files) == 1
        assert PILImage.open(files[0]).size == (16, 12)

    def test_is_display_available_returns_bool(self):
        """Test that is_display_available returns a boolean."""
        from src.raycaster.preview.interactive import InteractivePreview

        assert isinstance(InteractivePreview.is_display_available(), bool)
