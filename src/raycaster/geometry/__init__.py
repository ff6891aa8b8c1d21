"""Geometry module for primitives and intersection algorithms.

Components:
    sphere: Sphere primitive with geometric ray-sphere intersection

Primitives are stored by the scene module in Structure-of-Arrays fields;
this module only provides the per-ray intersection and normal functions.
"""

from .sphere import (
    Sphere,
    SphereHit,
    intersect_sphere,
    make_sphere,
    sphere_normal,
)

__all__ = [
    "Sphere",
    "SphereHit",
    "intersect_sphere",
    "make_sphere",
    "sphere_normal",
]
