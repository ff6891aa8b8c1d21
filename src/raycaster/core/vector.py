"""Ray data structure and vector utilities for the ray caster.

This module provides the Ray dataclass and the small set of vector
operations the shading pipeline needs. Addition, subtraction and scaling
come for free from Taichi's vector operators; everything else is wrapped
here so kernels read the same way the math is written.

The world is z-up: the ground plane is z = 0 and camera yaw is a
rotation about the z axis.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(-2.0, 0.0, 1.0)
    >>> direction = ti.math.vec3(1.0, 0.0, 0.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> # point = ray_at(ray, 5.0) inside a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3). Camera and reflected
            rays are unit length; the sphere test relies on it.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product of two vectors."""
    return tm.dot(a, b)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The result is undefined for a zero-length input. Callers guarantee
    non-degenerate vectors (positive radii, a lens length > 0).
    """
    return tm.normalize(v)


@ti.func
def distance(a: vec3, b: vec3) -> ti.f32:
    """Euclidean distance between two points."""
    return tm.length(b - a)


@ti.func
def lerp(a, b, t: ti.f32):
    """Linear interpolation a + (b - a) * t.

    Works for scalars and vectors alike. t outside [0, 1] extrapolates.
    """
    return a + (b - a) * t


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Mirror an incident direction about a surface normal.

    Computes R = I - N * 2(I . N). The normal must be unit length.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The unit surface normal.

    Returns:
        The reflected direction. Unit length if the incident one is.
    """
    return incident - normal * (2.0 * tm.dot(incident, normal))


@ti.func
def rotate_z(v: vec3, angle: ti.f32) -> vec3:
    """Rotate a vector about the vertical (z) axis through the origin.

    Standard 2D rotation of the (x, y) components by `angle` radians,
    counter-clockwise when seen from +z. The z component is unchanged.
    """
    c = ti.cos(angle)
    s = ti.sin(angle)
    return vec3(v.x * c - v.y * s, v.x * s + v.y * c, v.z)
