"""Sphere primitive with geometric ray-sphere intersection.

The intersection uses the geometric (projection) formulation rather than
the algebraic quadratic:

    to_center = center - origin
    tca = to_center . direction          # projection onto the ray
    d2  = |to_center|^2 - tca^2          # squared closest-approach distance
    thc = sqrt(radius^2 - d2)            # half chord length
    t0  = tca - thc                      # near root

A hit is reported only for the near root of a sphere whose center lies in
front of the origin. A ray starting inside a sphere therefore never hits
it, including the far wall. Rays leaving a mirror surface rely on this to
avoid re-hitting the sphere they just bounced off.

The direction must be unit length: tca is used as a distance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycaster.geometry.sphere import Sphere, intersect_sphere
    >>> sphere = Sphere(center=ti.math.vec3(4, -2, 1), radius=1.0)
    >>> # Use intersect_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (strictly positive).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class SphereHit:
    """Result of a ray-sphere intersection test.

    Attributes:
        hit: 1 if the ray hit the sphere, 0 otherwise.
        point: The nearest front-face hit point. Only valid if hit == 1.
    """

    hit: ti.i32
    point: vec3


@ti.func
def intersect_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
) -> SphereHit:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test against.

    Returns:
        A SphereHit with the nearest front-face point, or hit == 0 when
        the sphere is behind the origin, missed, or contains the origin.
    """
    to_center = sphere.center - ray_origin
    radius2 = sphere.radius * sphere.radius

    did_hit = 0
    hit_point = vec3(0.0, 0.0, 0.0)

    tca = tm.dot(to_center, ray_direction)
    if tca >= 0.0:
        d2 = tm.dot(to_center, to_center) - tca * tca
        if d2 <= radius2:
            thc = ti.sqrt(radius2 - d2)
            t0 = tca - thc
            if t0 >= 0.0:
                did_hit = 1
                hit_point = ray_origin + ray_direction * t0

    return SphereHit(hit=did_hit, point=hit_point)


@ti.func
def sphere_normal(sphere: Sphere, point: vec3) -> vec3:
    """Outward unit normal at a point on the sphere surface.

    Undefined for points that are not on the surface (in particular the
    center itself).
    """
    return tm.normalize(point - sphere.center)


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
