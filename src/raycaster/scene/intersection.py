"""Scene-level primitive intersection testing.

This module stores the scene primitives in Taichi fields and answers the
one query the shader needs: which primitive does a ray meet first, and
where. The answer is a SceneHitRecord carrying the hit point, its
distance from the ray origin, the surface normal and the material ID, so
the shader never needs to know which primitive type it hit.

The query is a brute-force linear scan in insertion order. The nearest hit
is chosen by Euclidean distance from the origin; on an exact tie the
primitive added first wins.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycaster.scene.intersection import (
    ...     add_sphere, clear_scene, intersect_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(ti.math.vec3(3, 0, 1), 1.0, material_id=0)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.raycaster.geometry.sphere import Sphere, intersect_sphere, sphere_normal

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance reported for misses
NO_HIT_DISTANCE = 1e30


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: 1 if the ray intersected any primitive, 0 on a miss.
        point: The nearest intersection point. Only valid if hit == 1.
        distance: Euclidean distance from the ray origin to the point.
        normal: Outward unit surface normal at the point.
        material_id: Material ID of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    point: vec3
    distance: ti.f32
    normal: vec3
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive count to zero. The field data is overwritten when
    new primitives are added.
    """
    num_spheres[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere. Must be positive.
        material_id: The material ID to associate with this sphere.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If radius is not positive.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    if not radius > 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")

    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        point=vec3(0.0, 0.0, 0.0),
        distance=NO_HIT_DISTANCE,
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def intersect_scene(ray_origin: vec3, ray_direction: vec3) -> SceneHitRecord:
    """Find the nearest primitive along a ray.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    result = _make_miss_record()
    closest = NO_HIT_DISTANCE

    # A while loop is never parallelized, so the scan stays ordered even
    # when this is inlined at kernel top level.
    n_spheres = num_spheres[None]
    i = 0
    while i < n_spheres:
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = intersect_sphere(ray_origin, ray_direction, sphere)
        if rec.hit == 1:
            dist = tm.length(rec.point - ray_origin)
            if dist < closest:
                closest = dist
                result = SceneHitRecord(
                    hit=1,
                    point=rec.point,
                    distance=dist,
                    normal=sphere_normal(sphere, rec.point),
                    material_id=sphere_material_ids[i],
                )
        i += 1

    return result
