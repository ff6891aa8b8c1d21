"""Showcase scene: six spheres over the checkerboard ground.

The showcase is the default demo scene. It exercises every shading path
at once:

- Four matte spheres in red, green, blue and white
- A perfect mirror directly in front of the camera
- A half mirror blending its own color with what it reflects

All spheres have radius 1. The camera stands at (-2, 0, 1) looking down
the +x axis toward the mirror sphere, so the center pixel of the default
400x300 image sees the mirror.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycaster.scene.showcase import create_showcase_scene
    >>> from src.raycaster.core.renderer import render
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> image = render(camera, scene, 400, 300)
"""

from dataclasses import dataclass

from src.raycaster.camera.projector import Camera
from src.raycaster.materials.material import (
    BLUE,
    GREEN,
    HALF_MIRROR,
    MIRROR,
    RED,
    WHITE,
)
from src.raycaster.scene.manager import SceneManager

# =============================================================================
# Showcase Parameters
# =============================================================================


@dataclass
class ShowcaseParams:
    """Parameters for configuring the showcase scene and its render.

    Attributes:
        camera_position: Initial camera position.
        camera_target: Look-at point. Only its horizontal direction from
            the camera matters.
        width: Render width in pixels.
        height: Render height in pixels.
        display_scale: Integer upscale factor for on-screen display.

    Example:
        >>> params = ShowcaseParams()
        >>> params.width, params.height
        (400, 300)
        >>> closer = ShowcaseParams(camera_position=(0.0, 0.0, 1.0))
    """

    camera_position: tuple[float, float, float] = (-2.0, 0.0, 1.0)
    camera_target: tuple[float, float, float] = (3.0, 0.0, 1.0)
    width: int = 400
    height: int = 300
    display_scale: int = 2


# =============================================================================
# Showcase Constants
# =============================================================================

SPHERE_RADIUS = 1.0

# (center, material) in insertion order
SHOWCASE_SPHERES = (
    ((4.0, -2.0, 1.0), RED),
    ((3.0, 2.0, 1.0), GREEN),
    ((4.0, 1.0, 3.0), BLUE),
    ((5.0, -3.0, 4.0), WHITE),
    ((3.0, 0.0, 1.0), MIRROR),
    ((2.0, -1.0, 2.0), HALF_MIRROR),
)


# =============================================================================
# Showcase Factory
# =============================================================================


def create_showcase_scene(
    params: ShowcaseParams | None = None,
) -> tuple[SceneManager, Camera]:
    """Create the showcase scene and its camera.

    Each sphere gets its own palette entry, so material IDs follow the
    sphere order.

    Args:
        params: Optional ShowcaseParams. If None, uses defaults.

    Returns:
        A tuple of (SceneManager, Camera).

    Example:
        >>> scene, camera = create_showcase_scene()
        >>> scene.get_sphere_count()
        6
        >>> camera.position
        (-2.0, 0.0, 1.0)
    """
    if params is None:
        params = ShowcaseParams()

    scene = SceneManager()
    for center, material in SHOWCASE_SPHERES:
        scene.add_sphere_with_material(center, SPHERE_RADIUS, material)

    camera = Camera(position=params.camera_position, target=params.camera_target)

    return scene, camera
