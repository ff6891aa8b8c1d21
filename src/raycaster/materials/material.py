"""Surface material: a base color and a mirror reflectivity.

A material describes how a surface responds to light. The base color is
scaled by the directional sun light; the reflectivity then blends that
locally shaded color with whatever the mirror-reflected ray sees:

    color = base * (1 - reflectivity) + reflected * reflectivity

Colors use the 0-255 range per channel; out-of-range channels are clamped
when the material is created. Reflectivity is meant to lie in
[0, 1] but is passed through unvalidated: values above 1
extrapolate the blend, and values <= 0 disable reflection entirely.

Materials are immutable once created and may be shared by any number of
spheres, which refer to them by material ID.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycaster.materials.material import MIRROR, add_material
    >>> mirror_id = add_material(MIRROR.color, MIRROR.reflectivity)
    >>> MIRROR.should_reflect()
    True
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

COLOR_MIN = 0.0
COLOR_MAX = 255.0


def clamp_color(color) -> tuple[float, float, float]:
    """Clamp each channel of an RGB color to [0, 255]."""
    return tuple(min(max(float(c), COLOR_MIN), COLOR_MAX) for c in color)


@dataclass(frozen=True)
class Material:
    """Host-side description of a material.

    Attributes:
        color: Base RGB color, each channel clamped to [0, 255].
        reflectivity: Blend factor toward the mirror reflection. 0 means
            a matte surface, 1 a perfect mirror. Not clamped.
    """

    color: tuple[float, float, float]
    reflectivity: float = 0.0

    def __post_init__(self) -> None:
        if len(self.color) != 3:
            raise ValueError(f"Material color must have 3 components, got {len(self.color)}")
        object.__setattr__(self, "color", clamp_color(self.color))

    def should_reflect(self) -> bool:
        """Return True if a reflected ray must be traced for this material."""
        return self.reflectivity > 0


# =============================================================================
# Named Palette
# =============================================================================

RED = Material((255.0, 0.0, 0.0))
GREEN = Material((0.0, 255.0, 0.0))
BLUE = Material((0.0, 0.0, 255.0))
WHITE = Material((255.0, 255.0, 255.0))
BLACK = Material((0.0, 0.0, 0.0))
MIRROR = Material((255.0, 255.0, 255.0), 1.0)
HALF_MIRROR = Material((255.0, 255.0, 255.0), 0.5)

PALETTE = {
    "red": RED,
    "green": GREEN,
    "blue": BLUE,
    "white": WHITE,
    "black": BLACK,
    "mirror": MIRROR,
    "half_mirror": HALF_MIRROR,
}


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

# Maximum number of materials in the scene
MAX_MATERIALS = 256

material_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_reflectivities = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all materials.

    Resets the material count to zero. Existing data in the fields will be
    overwritten when new materials are added.
    """
    num_materials[None] = 0


def add_material(
    color: tuple[float, float, float],
    reflectivity: float = 0.0,
) -> int:
    """Add a material to the device registry.

    Args:
        color: Base color as (R, G, B), each channel in [0, 255]. Clamped.
        reflectivity: Mirror blend factor. Passed through unclamped.

    Returns:
        The material ID (index into the registry).

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If color does not have exactly 3 components.
    """
    if len(color) != 3:
        raise ValueError(f"Material color must have 3 components, got {len(color)}")

    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    material_colors[idx] = vec3(*clamp_color(color))
    material_reflectivities[idx] = reflectivity
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of materials in the registry."""
    return int(num_materials[None])


@ti.func
def get_material_color(material_id: ti.i32) -> vec3:
    """Get the base color (0-255 per channel) for a material."""
    return material_colors[material_id]


@ti.func
def get_material_reflectivity(material_id: ti.i32) -> ti.f32:
    """Get the reflectivity for a material."""
    return material_reflectivities[material_id]


@ti.func
def material_should_reflect(material_id: ti.i32) -> ti.i32:
    """Device-side counterpart of Material.should_reflect().

    Returns:
        1 if reflectivity > 0, 0 otherwise.
    """
    result = 0
    if material_reflectivities[material_id] > 0.0:
        result = 1
    return result
