"""Scene module for scene management and ray-scene queries.

Components:
    intersection: Primitive storage and the nearest-hit query
    manager: Host-side scene owning materials and spheres
    showcase: The six-sphere demo scene

Scene data is organized for efficient device access:
    - Structure-of-Arrays layout for geometric data
    - Contiguous material ID arrays
"""

from .intersection import (
    MAX_SPHERES,
    SceneHitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MaterialInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
)
from .showcase import (
    SHOWCASE_SPHERES,
    ShowcaseParams,
    create_showcase_scene,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    # Showcase module
    "ShowcaseParams",
    "SHOWCASE_SPHERES",
    "create_showcase_scene",
]
