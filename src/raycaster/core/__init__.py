"""Core rendering module.

Components:
    vector: Ray data structure and vector utilities
    shader: Sun shading, mirror reflection, ground plane and pixel buffer
    renderer: Full-frame render loop with progress reporting

All per-ray work runs inside Taichi functions; the Python side only sets
up fields, launches kernels and converts the result.
"""

from .vector import (
    Ray,
    distance,
    dot,
    length,
    lerp,
    make_ray,
    normalize,
    ray_at,
    reflect,
    rotate_z,
    vec3,
)

# Note: shader and renderer are NOT imported here to avoid circular imports
# (the shader depends on camera, which depends on core.vector).
#
# For rendering, use:
#   from src.raycaster.core.renderer import Renderer, render

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "length",
    "normalize",
    "distance",
    "lerp",
    "reflect",
    "rotate_z",
]
