"""Ray caster: direct sun shading, mirror reflection and the ground plane.

This module implements the shading pipeline and the render-target kernels.
For each ray it finds the nearest primitive, shades it with a single
directional sun, and follows mirror reflections up to a fixed depth. Rays
that escape the geometry fall through to an infinite checkerboard ground
plane at z = 0, or to a black sky when they point level or upward.

Shading rules:
    light = AMBIENT + (1 - AMBIENT) * clamp(normal . SUN, 0, 1)
    base  = material.color * light
    color = base                                     (matte)
    color = base * (1 - r) + trace(reflected) * r    (reflectivity r > 0)

Taichi functions cannot recurse, so the reflection chain is evaluated as a
loop that carries the product of reflectivities seen so far. This expands
the nested blend exactly: a matte surface contributes its base color at
full weight, a perfect mirror contributes nothing of its own and passes
its whole weight on. A ray still bouncing past MAX_REFLECTION_DEPTH sees
black.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycaster.core.shader import cast_ray
    >>> cast_ray((0.3, 0.3, 1.0), (0.0, 0.0, -1.0))  # straight down
    (0.0, 0.0, 255.0)
"""

import math

import taichi as ti
import taichi.math as tm

from src.raycaster.camera.projector import get_ray
from src.raycaster.core.vector import reflect
from src.raycaster.materials.material import (
    get_material_color,
    get_material_reflectivity,
    material_should_reflect,
)
from src.raycaster.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Shading Constants
# =============================================================================

# Deepest recursion level still traced; the initial cast is depth 0
MAX_REFLECTION_DEPTH = 3

# Light floor so faces turned away from the sun are not pure black
AMBIENT_LIGHT = 0.2

# Unit direction toward the sun, normalize(-1, 2, 1)
_SUN_NORM = math.sqrt(6.0)
SUN_DIRECTION = vec3(-1.0 / _SUN_NORM, 2.0 / _SUN_NORM, 1.0 / _SUN_NORM)

# Ground checkerboard and sky colors (0-255 per channel)
GROUND_EVEN_COLOR = vec3(0.0, 0.0, 255.0)
GROUND_ODD_COLOR = vec3(0.0, 0.0, 127.0)
SKY_COLOR = vec3(0.0, 0.0, 0.0)


# =============================================================================
# Shading Helpers
# =============================================================================


@ti.func
def lighting_factor(normal: vec3) -> ti.f32:
    """Sun light reaching a surface, remapped to [AMBIENT_LIGHT, 1]."""
    facing = tm.clamp(tm.dot(normal, SUN_DIRECTION), 0.0, 1.0)
    return AMBIENT_LIGHT + (1.0 - AMBIENT_LIGHT) * facing


@ti.func
def _round_half_up(x: ti.f32) -> ti.f32:
    return ti.floor(x + 0.5)


@ti.func
def _true_mod(n: ti.f32, m: ti.f32) -> ti.f32:
    """Modulo whose result takes the sign of m, so -1 mod 2 == 1."""
    return n - m * ti.floor(n / m)


@ti.func
def checker_parity(point: vec3) -> ti.i32:
    """Checkerboard cell parity at a ground point: 0 (even) or 1 (odd).

    Cells are unit squares centered on integer (x, y) coordinates.
    """
    cell = _round_half_up(point.x) + _round_half_up(point.y)
    return ti.cast(_true_mod(cell, 2.0), ti.i32)


@ti.func
def shade_background(ray_origin: vec3, ray_direction: vec3) -> vec3:
    """Color seen by a ray that hits no geometry.

    Downward rays meet the z = 0 plane and pick up the checkerboard; level
    and upward rays see the black sky.
    """
    color = SKY_COLOR
    if ray_direction.z < 0.0:
        t = -ray_origin.z / ray_direction.z
        point = ray_origin + ray_direction * t
        if checker_parity(point) == 0:
            color = GROUND_EVEN_COLOR
        else:
            color = GROUND_ODD_COLOR
    return color


# =============================================================================
# Ray Casting Core
# =============================================================================


@ti.func
def trace_ray(ray_origin: vec3, ray_direction: vec3, start_depth: ti.i32) -> vec3:
    """Color seen along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        start_depth: Reflection depth of this ray (0 for camera rays).

    Returns:
        The RGB color on the 0-255 scale. Not clamped: reflectivities
        outside [0, 1] extrapolate.
    """
    origin = ray_origin
    direction = ray_direction
    depth = start_depth

    color = vec3(0.0, 0.0, 0.0)
    weight = 1.0
    active = 1

    while active == 1:
        if depth > MAX_REFLECTION_DEPTH:
            # Remaining weight sees black
            active = 0
        else:
            hit_record = intersect_scene(origin, direction)

            if hit_record.hit == 0:
                color += weight * shade_background(origin, direction)
                active = 0
            else:
                material_id = hit_record.material_id
                base = get_material_color(material_id) * lighting_factor(hit_record.normal)

                if material_should_reflect(material_id) == 1:
                    reflectivity = get_material_reflectivity(material_id)
                    color += weight * (1.0 - reflectivity) * base
                    weight *= reflectivity
                    origin = hit_record.point
                    direction = reflect(direction, hit_record.normal)
                    depth += 1
                else:
                    color += weight * base
                    active = 0

    return color


# =============================================================================
# Render Target (Pixel Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Working color buffer, indexed [x, y] with y = 0 at the top row
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target.

    Sets the active image dimensions and clears the buffer.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to black."""
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Raise if the render target has not been set up."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


def reset_render_target() -> None:
    """Forget the render target dimensions (used between tests)."""
    _render_target_initialized[None] = 0
    clear_render_target()


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(row_start: ti.i32, row_end: ti.i32, width: ti.i32, height: ti.i32):
    """Shade every pixel in rows [row_start, row_end).

    Pixels are independent; the outer loop runs in parallel.
    """
    for i, j in ti.ndrange((0, width), (row_start, row_end)):
        ray = get_ray(i, j, width, height)
        _color_buffer[i, j] = trace_ray(ray.origin, ray.direction, 0)


@ti.kernel
def _cast_ray_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
) -> vec3:
    return trace_ray(vec3(ox, oy, oz), vec3(dx, dy, dz), depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def cast_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = 0,
) -> tuple[float, float, float]:
    """Cast a single ray against the uploaded scene from Python.

    Args:
        origin: Ray origin (x, y, z).
        direction: Unit ray direction (x, y, z).
        depth: Reflection depth to start from. Anything above
            MAX_REFLECTION_DEPTH returns black immediately.

    Returns:
        Tuple of (R, G, B) on the 0-255 scale, unclamped.
    """
    color = _cast_ray_kernel(
        origin[0], origin[1], origin[2],
        direction[0], direction[1], direction[2],
        depth,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def render_rows(row_start: int, row_end: int) -> None:
    """Render a band of rows into the render target.

    Args:
        row_start: First row to render (0 = top).
        row_end: One past the last row to render.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    row_start = max(0, row_start)
    row_end = min(height, row_end)
    if row_end > row_start:
        _render_rows(row_start, row_end, width, height)


def get_color_image_numpy():
    """Get the rendered colors as a float NumPy array.

    Returns:
        Array of shape (height, width, 3), dtype float32, row 0 at the top,
        values on the 0-255 scale and not yet clamped.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    import numpy as np

    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()

    # (width, height, 3) -> (height, width, 3); row 0 is already the top
    image = np.transpose(full_image[:width, :height, :], (1, 0, 2))

    return np.ascontiguousarray(image, dtype=np.float32)
