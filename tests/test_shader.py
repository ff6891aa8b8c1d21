"""Tests for the shading pipeline.

Tests cover:
- Sun lighting factor
- Checkerboard parity and rounding of the ground plane
- Black sky for level and upward rays
- Matte shading
- Mirror reflection and the blend law
- Recursion depth cap
- Reflectivity pass-through (extrapolation)
- Render target validation
"""

import math

import pytest
import taichi as ti

SQRT6 = math.sqrt(6.0)


def _lit(color, facing):
    """Expected base color for a surface whose normal . sun is `facing`."""
    light = 0.2 + 0.8 * min(max(facing, 0.0), 1.0)
    return tuple(c * light for c in color)


def _build_scene(materials, spheres):
    """Upload a scene made of (color, reflectivity) and (center, radius, material_id)."""
    from src.raycaster.scene.manager import SceneManager

    scene = SceneManager()
    for color, reflectivity in materials:
        scene.add_material(color, reflectivity)
    for center, radius, material_id in spheres:
        scene.add_sphere(center, radius, material_id)
    scene.upload()
    return scene


class TestLighting:
    """Tests for the sun lighting factor."""

    def test_lighting_range(self):
        """Test facing, grazing and away-facing normals."""
        from src.raycaster.core.shader import SUN_DIRECTION, lighting_factor, vec3

        results = ti.field(dtype=ti.f32, shape=3)

        @ti.kernel
        def test_kernel():
            results[0] = lighting_factor(SUN_DIRECTION)
            results[1] = lighting_factor(vec3(0.0, 0.0, -1.0))
            results[2] = lighting_factor(vec3(0.0, 0.0, 1.0))

        test_kernel()
        assert results[0] == pytest.approx(1.0, abs=1e-6)
        assert results[1] == pytest.approx(0.2, abs=1e-6)
        assert results[2] == pytest.approx(0.2 + 0.8 / SQRT6, abs=1e-6)


class TestBackground:
    """Tests for the ground plane and sky."""

    @pytest.mark.parametrize(
        "x, y, expected_blue",
        [
            (0.3, 0.3, 255.0),
            (1.3, 0.3, 127.0),
            (2.3, 0.3, 255.0),
            (-1.3, 0.3, 127.0),
            (-1.3, -1.3, 255.0),
            (0.3, 5.2, 127.0),
        ],
    )
    def test_checkerboard_parity(self, x, y, expected_blue):
        """Test that cells alternate between the two blues."""
        from src.raycaster.core.shader import cast_ray

        color = cast_ray((x, y, 1.0), (0.0, 0.0, -1.0))
        assert color == (0.0, 0.0, expected_blue)

    def test_rounds_half_up(self):
        """Test that cell boundaries round toward +infinity."""
        from src.raycaster.core.shader import cast_ray

        # 0.5 rounds to 1 (odd), -0.5 rounds to 0 (even)
        assert cast_ray((0.5, 0.0, 1.0), (0.0, 0.0, -1.0)) == (0.0, 0.0, 127.0)
        assert cast_ray((-0.5, 0.0, 1.0), (0.0, 0.0, -1.0)) == (0.0, 0.0, 255.0)

    def test_oblique_ground_hit(self):
        """Test a slanted ray landing two cells ahead."""
        from src.raycaster.core.shader import cast_ray

        d = 1.0 / math.sqrt(2.0)
        # Lands at (2, 0, 0): even cell
        assert cast_ray((1.0, 0.0, 1.0), (d, 0.0, -d)) == (0.0, 0.0, 255.0)

    @pytest.mark.parametrize("direction", [(1.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.6, 0.0, 0.8)])
    def test_sky_is_black(self, direction):
        """Test that level and upward rays see black."""
        from src.raycaster.core.shader import cast_ray

        assert cast_ray((0.0, 0.0, 1.0), direction) == (0.0, 0.0, 0.0)


class TestMatteShading:
    """Tests for non-reflective surfaces."""

    def test_matte_sphere_base_color(self):
        """Test a red sphere hit where the normal faces -x."""
        from src.raycaster.core.shader import cast_ray

        _build_scene([((255.0, 0.0, 0.0), 0.0)], [((3.0, 0.0, 1.0), 1.0, 0)])

        color = cast_ray((-2.0, 0.0, 1.0), (1.0, 0.0, 0.0))
        expected = _lit((255.0, 0.0, 0.0), 1.0 / SQRT6)
        assert color == pytest.approx(expected, abs=1e-3)

    def test_out_of_range_color_shades_as_clamped(self):
        """Test that a 510 red channel shades like 255."""
        from src.raycaster.core.shader import cast_ray

        _build_scene([((510.0, 0.0, 0.0), 0.0)], [((3.0, 0.0, 1.0), 1.0, 0)])

        color = cast_ray((-2.0, 0.0, 1.0), (1.0, 0.0, 0.0))
        expected = _lit((255.0, 0.0, 0.0), 1.0 / SQRT6)
        assert color == pytest.approx(expected, abs=1e-3)

    def test_sphere_occludes_ground(self):
        """Test that a sphere in front of the ground is what the ray sees."""
        from src.raycaster.core.shader import cast_ray

        _build_scene([((0.0, 255.0, 0.0), 0.0)], [((0.0, 0.0, 1.0), 0.5, 0)])

        color = cast_ray((0.0, 0.0, 3.0), (0.0, 0.0, -1.0))
        # Top of the sphere: normal (0, 0, 1)
        expected = _lit((0.0, 255.0, 0.0), 1.0 / SQRT6)
        assert color == pytest.approx(expected, abs=1e-3)


class TestReflection:
    """Tests for mirror reflection and the recursion cap."""

    def _two_mirror_scene(self, reflectivity):
        # A at y = -2, B at y = +2; a ray from the middle along +y bounces
        # B, A, B, A and is cut off after depth 3
        _build_scene(
            [((255.0, 255.0, 255.0), reflectivity)],
            [((0.0, -2.0, 1.0), 1.0, 0), ((0.0, 2.0, 1.0), 1.0, 0)],
        )

    def test_perfect_mirrors_cut_off_to_black(self):
        """Test that facing perfect mirrors contribute nothing of their own."""
        from src.raycaster.core.shader import cast_ray

        self._two_mirror_scene(1.0)
        assert cast_ray((0.0, 0.0, 1.0), (0.0, 1.0, 0.0)) == (0.0, 0.0, 0.0)

    def test_half_mirrors_blend_with_depth_cap(self):
        """Test the nested 50/50 blend over exactly four surface hits."""
        from src.raycaster.core.shader import cast_ray

        self._two_mirror_scene(0.5)

        base_b = 255.0 * 0.2  # normal (0, -1, 0) faces away from the sun
        base_a = 255.0 * (0.2 + 0.8 * 2.0 / SQRT6)  # normal (0, 1, 0)
        expected = 0.5 * base_b + 0.25 * base_a + 0.125 * base_b + 0.0625 * base_a

        color = cast_ray((0.0, 0.0, 1.0), (0.0, 1.0, 0.0))
        assert color == pytest.approx((expected, expected, expected), rel=1e-4)

    def test_depth_above_cap_is_black(self):
        """Test that a ray starting past the depth cap sees black."""
        from src.raycaster.core.shader import MAX_REFLECTION_DEPTH, cast_ray

        _build_scene([((255.0, 0.0, 0.0), 0.0)], [((3.0, 0.0, 1.0), 1.0, 0)])

        assert cast_ray((-2.0, 0.0, 1.0), (1.0, 0.0, 0.0), MAX_REFLECTION_DEPTH + 1) == (
            0.0,
            0.0,
            0.0,
        )
        # The last traced level still shades normally
        color = cast_ray((-2.0, 0.0, 1.0), (1.0, 0.0, 0.0), MAX_REFLECTION_DEPTH)
        assert color[0] > 0.0

    def test_mirror_reflects_ground(self):
        """Test that a perfect mirror shows exactly what its reflection sees."""
        from src.raycaster.core.shader import cast_ray

        _build_scene([((255.0, 255.0, 255.0), 1.0)], [((0.0, 0.0, 1.5), 1.0, 0)])

        # Hits the lower half at (-0.866, 0, 1); the reflection heads down
        # and back to land near (-1.44, 0, 0): an odd cell
        color = cast_ray((-3.0, 0.0, 1.0), (1.0, 0.0, 0.0))
        assert color == pytest.approx((0.0, 0.0, 127.0), abs=1e-4)

    def test_zero_reflectivity_is_matte(self):
        """Test that r = 0 gives exactly the base color."""
        from src.raycaster.core.shader import cast_ray

        _build_scene([((255.0, 255.0, 255.0), 0.0)], [((3.0, 0.0, 1.0), 1.0, 0)])

        color = cast_ray((-2.0, 0.0, 1.0), (1.0, 0.0, 0.0))
        expected = _lit((255.0, 255.0, 255.0), 1.0 / SQRT6)
        assert color == pytest.approx(expected, abs=1e-3)

    def test_reflectivity_above_one_extrapolates(self):
        """Test that reflectivity is not clamped: r = 2 against sky gives -base."""
        from src.raycaster.core.shader import cast_ray

        _build_scene([((255.0, 255.0, 255.0), 2.0)], [((3.0, 0.0, 1.0), 1.0, 0)])

        color = cast_ray((-2.0, 0.0, 1.0), (1.0, 0.0, 0.0))
        base = _lit((255.0, 255.0, 255.0), 1.0 / SQRT6)
        assert color == pytest.approx(tuple(-c for c in base), abs=1e-3)


class TestRenderTarget:
    """Tests for render target setup and readback."""

    @pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-1, 10)])
    def test_rejects_non_positive_dimensions(self, width, height):
        """Test that dimensions must be positive."""
        from src.raycaster.core.shader import setup_render_target

        with pytest.raises(ValueError, match="must be positive"):
            setup_render_target(width, height)

    def test_rejects_oversized_dimensions(self):
        """Test that dimensions above the maximum are rejected."""
        from src.raycaster.core.shader import MAX_IMAGE_WIDTH, setup_render_target

        with pytest.raises(ValueError, match="exceed maximum"):
            setup_render_target(MAX_IMAGE_WIDTH + 1, 10)

    def test_readback_requires_setup(self):
        """Test that reading an unset render target raises."""
        from src.raycaster.core.shader import get_color_image_numpy, render_rows

        with pytest.raises(RuntimeError, match="not set up"):
            get_color_image_numpy()
        with pytest.raises(RuntimeError, match="not set up"):
            render_rows(0, 1)

    def test_readback_shape_and_row_order(self):
        """Test that row 0 of the readback is the top of the image."""
        from src.raycaster.camera.projector import Camera, setup_camera
        from src.raycaster.core.shader import (
            get_color_image_numpy,
            get_image_dimensions,
            render_rows,
            setup_render_target,
        )

        _build_scene([], [])
        setup_camera(Camera(position=(0.0, 0.0, 1.0), target=(1.0, 0.0, 1.0)))
        setup_render_target(8, 6)
        render_rows(0, 6)

        assert get_image_dimensions() == (8, 6)
        image = get_color_image_numpy()
        assert image.shape == (6, 8, 3)
        # Top rows look up at the sky, bottom rows down at the ground
        assert image[0].max() == 0.0
        assert image[-1, :, 2].min() > 0.0
