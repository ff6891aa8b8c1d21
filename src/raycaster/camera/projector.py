"""Yaw-only perspective projector that turns pixels into world-space rays.

The camera sits at `position` and is turned about the vertical axis to
face `target`. It never pitches or rolls: a target above or below the
camera only changes the yaw, not the horizon.

A virtual screen is placed `lens_length` units in front of the camera
(along camera-local +x). Horizontally it spans [-aspect, +aspect]
left to right, vertically [+1, -1] top to bottom, with pixel (0, 0) at
the top-left corner. The pre-rotation vector

    (lens_length, screen_h, screen_v)

is rotated by the yaw angle about z and normalized to give the ray
direction. The same inputs always produce the same direction, so renders
are reproducible bit for bit on a given backend.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycaster.camera.projector import Camera, setup_camera
    >>> camera = Camera(position=(-2.0, 0.0, 1.0), target=(3.0, 0.0, 1.0))
    >>> setup_camera(camera)
    >>> # get_ray(x, y, width, height) inside a Taichi kernel
"""

import math
from dataclasses import dataclass

import taichi as ti

from src.raycaster.core.vector import Ray, lerp, make_ray, normalize, rotate_z, vec3

# Distance from the camera to the virtual screen
DEFAULT_LENS_LENGTH = 1.0

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class Camera:
    """Camera configuration.

    The position is the only state expected to change between renders.
    Mutate it through Renderer.move_camera() (or build a new camera with
    moved()) and never while a render is in flight.

    Attributes:
        position: Camera position in world space (x, y, z).
        target: Look-at point in world space. Only its horizontal
            direction from the camera is used.
        lens_length: Distance from the camera to the virtual screen.
    """

    position: tuple[float, float, float]
    target: tuple[float, float, float]
    lens_length: float = DEFAULT_LENS_LENGTH

    @property
    def yaw(self) -> float:
        """Rotation about z that turns camera-local +x toward the target."""
        return math.atan2(
            self.target[1] - self.position[1],
            self.target[0] - self.position[0],
        )

    def moved(self, dx: float, dy: float, dz: float) -> "Camera":
        """Return a copy of this camera translated by (dx, dy, dz).

        The target stays fixed. Positions are not bounds-checked.
        """
        x, y, z = self.position
        return Camera(
            position=(x + dx, y + dy, z + dz),
            target=self.target,
            lens_length=self.lens_length,
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_yaw = ti.field(dtype=ti.f32, shape=())
_lens_length = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload camera state to the device.

    Must be called before rendering and again after every camera change.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the lens length is not positive.
    """
    if not camera.lens_length > 0.0:
        raise ValueError(f"Lens length must be positive, got {camera.lens_length}")

    x, y, z = camera.position
    _camera_origin[None] = [x, y, z]
    _camera_yaw[None] = camera.yaw
    _lens_length[None] = camera.lens_length


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray_direction(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    """World-space unit direction of the ray through pixel (x, y).

    Args:
        x: Pixel column (0 = left).
        y: Pixel row (0 = top).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The normalized ray direction.
    """
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    aspect_ratio = w / h

    screen_h = lerp(-aspect_ratio, aspect_ratio, ti.cast(x, ti.f32) / w)
    screen_v = lerp(1.0, -1.0, ti.cast(y, ti.f32) / h)

    screen = vec3(_lens_length[None], screen_h, screen_v)
    return normalize(rotate_z(screen, _camera_yaw[None]))


@ti.func
def get_ray(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Primary ray for pixel (x, y), starting at the camera position."""
    return make_ray(get_camera_origin(), get_ray_direction(x, y, width, height))


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera position in world space."""
    return _camera_origin[None]


@ti.kernel
def _ray_direction_kernel(x: ti.i32, y: ti.i32, width: ti.i32, height: ti.i32) -> vec3:
    return get_ray_direction(x, y, width, height)


# =============================================================================
# Utility Functions
# =============================================================================


def compute_ray_direction(
    camera: Camera,
    x: int,
    y: int,
    width: int,
    height: int,
) -> tuple[float, float, float]:
    """Compute the ray direction for one pixel from Python.

    Uploads the camera, then evaluates the same device function the render
    kernel uses. Intended for tests and debugging.

    Returns:
        The unit ray direction as (x, y, z).
    """
    setup_camera(camera)
    d = _ray_direction_kernel(x, y, width, height)
    return (float(d[0]), float(d[1]), float(d[2]))


def get_camera_info() -> dict[str, float | tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with origin, yaw and lens_length.
    """
    origin_vec = _camera_origin[None]
    return {
        "origin": (float(origin_vec[0]), float(origin_vec[1]), float(origin_vec[2])),
        "yaw": float(_camera_yaw[None]),
        "lens_length": float(_lens_length[None]),
    }
