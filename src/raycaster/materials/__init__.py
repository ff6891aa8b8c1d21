"""Materials module: base color plus mirror reflectivity.

Components:
    material: Material dataclass, named palette and the device registry
"""

from .material import (
    BLACK,
    BLUE,
    GREEN,
    HALF_MIRROR,
    MAX_MATERIALS,
    MIRROR,
    PALETTE,
    RED,
    WHITE,
    Material,
    add_material,
    clamp_color,
    clear_materials,
    get_material_color,
    get_material_count,
    get_material_reflectivity,
    material_should_reflect,
)

__all__ = [
    "Material",
    "PALETTE",
    "RED",
    "GREEN",
    "BLUE",
    "WHITE",
    "BLACK",
    "MIRROR",
    "HALF_MIRROR",
    "MAX_MATERIALS",
    "add_material",
    "clamp_color",
    "clear_materials",
    "get_material_count",
    "get_material_color",
    "get_material_reflectivity",
    "material_should_reflect",
]
