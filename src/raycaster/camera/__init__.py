"""Camera module for view and ray generation.

Components:
    projector: Yaw-only perspective camera with look-at targeting

Ray generation uses pixel coordinates directly:
    x in [0, width): left to right across the image
    y in [0, height): top to bottom across the image
"""

from .projector import (
    DEFAULT_LENS_LENGTH,
    Camera,
    compute_ray_direction,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_direction,
    setup_camera,
)

__all__ = [
    "Camera",
    "DEFAULT_LENS_LENGTH",
    "setup_camera",
    "get_ray",
    "get_ray_direction",
    "get_camera_origin",
    "get_camera_info",
    "compute_ray_direction",
]
