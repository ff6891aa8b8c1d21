"""Scene manager coordinating spheres and their materials.

The SceneManager is the host-side owner of a scene. It keeps the material
palette and the ordered list of spheres as plain Python records, and
writes them into the device fields with upload() right before a render.
Several managers can therefore exist side by side; whichever was
uploaded last is the one the kernels see.

The manager maintains:
- A material_id space indexing into the palette
- The sphere list in insertion order (which decides nearest-hit ties)
- High-level methods for adding spheres with materials in one call
- Scene serialization/configuration support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.raycaster.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> mirror = scene.add_material((255, 255, 255), reflectivity=1.0)
    >>> scene.add_sphere((3, 0, 1), 1.0, mirror)
    0
    >>> scene.upload()
"""

from dataclasses import dataclass, field
from typing import Any

import taichi.math as tm

from src.raycaster.materials.material import (
    MAX_MATERIALS,
    Material,
    add_material,
    clear_materials,
    get_material_count,
)
from src.raycaster.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

# (manager, revision) of the most recent upload
_last_upload: tuple["SceneManager", int] | None = None

# Type alias for 3D vectors
vec3 = tm.vec3

_MATERIAL_KEYS = {"color", "reflectivity"}
_SPHERE_KEYS = {"center", "radius", "material_id"}


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: Index of the material in the palette.
        material: The material itself.
    """

    material_id: int
    material: Material


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: Position of the sphere in the scene (insertion order).
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: The material ID assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence to a float tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _check_keys(config: dict[str, Any], allowed: set[str], kind: str) -> None:
    unknown = set(config) - allowed
    if unknown:
        raise ValueError(f"Unknown {kind} keys: {sorted(unknown)}")


class SceneManager:
    """Host-side scene: a material palette plus an ordered list of spheres.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red = scene.add_material((255, 0, 0))
        >>> scene.add_sphere((4, -2, 1), 1.0, red)
        0
        >>> scene.add_sphere_with_material((2, -1, 2), 1.0, Material((255, 255, 255), 0.5))
        1
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self._revision = 0

    def clear(self) -> None:
        """Remove all materials and spheres.

        Device fields are left alone until the next upload().
        """
        self.materials.clear()
        self.spheres.clear()
        self._revision += 1

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(
        self,
        color: tuple[float, float, float],
        reflectivity: float = 0.0,
    ) -> int:
        """Add a material to the palette.

        Args:
            color: Base color as (R, G, B), each channel clamped to [0, 255].
            reflectivity: Mirror blend factor. Passed through unclamped.

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If color does not have exactly 3 components.
        """
        material = Material(_as_triple(color, "Material color"), float(reflectivity))
        return self.add_palette_material(material)

    def add_palette_material(self, material: Material) -> int:
        """Add an existing Material (e.g. a palette constant).

        Returns:
            The material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
        """
        material_id = len(self.materials)
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        self.materials.append(MaterialInfo(material_id=material_id, material=material))
        self._revision += 1
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return len(self.materials)

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID.

        Returns:
            MaterialInfo for the material, or None if not found.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere. Must be positive.
            material_id: The material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id is invalid or radius is not positive.
        """
        if material_id < 0 or material_id >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")

        sphere_index = len(self.spheres)
        if sphere_index >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        info = SphereInfo(
            sphere_index=sphere_index,
            center=_as_triple(center, "Sphere center"),
            radius=float(radius),
            material_id=material_id,
        )
        self.spheres.append(info)
        self._revision += 1

        return sphere_index

    def add_sphere_with_material(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> int:
        """Add a sphere together with its own new material.

        Returns:
            The index of the added sphere.
        """
        material_id = self.add_palette_material(material)
        return self.add_sphere(center, radius, material_id)

    # =========================================================================
    # Device Upload
    # =========================================================================

    def upload(self) -> None:
        """Write the whole scene into the device fields.

        Replaces whatever scene was uploaded before. Call before rendering
        and never while a kernel is running.
        """
        clear_scene()
        clear_materials()

        for info in self.materials:
            add_material(info.material.color, info.material.reflectivity)

        for sphere in self.spheres:
            add_sphere(vec3(*sphere.center), sphere.radius, sphere.material_id)

        global _last_upload
        _last_upload = (self, self._revision)

    def is_uploaded(self) -> bool:
        """Return True if the device currently holds exactly this scene.

        False once another manager uploads, once this scene changes after
        its upload, or once the device fields are cleared.
        """
        if _last_upload is None:
            return False
        owner, revision = _last_upload
        return (
            owner is self
            and revision == self._revision
            and get_sphere_count() == len(self.spheres)
            and get_material_count() == len(self.materials)
        )

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return len(self.spheres)

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials and spheres.
        """
        config = SceneConfig()

        for info in self.materials:
            config.materials.append(
                {
                    "color": list(info.material.color),
                    "reflectivity": info.material.reflectivity,
                }
            )

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, spheres refer to them by ID
        for mat_config in config.materials:
            _check_keys(mat_config, _MATERIAL_KEYS, "material")
            if "color" not in mat_config:
                raise ValueError("Material config requires 'color'")
            self.add_material(mat_config["color"], mat_config.get("reflectivity", 0.0))

        for sphere_config in config.spheres:
            _check_keys(sphere_config, _SPHERE_KEYS, "sphere")
            center = sphere_config.get("center", [0.0, 0.0, 0.0])
            radius = sphere_config.get("radius", 1.0)
            material_id = sphere_config.get("material_id", 0)
            self.add_sphere(center, radius, material_id)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'materials' and 'spheres' keys.
        """
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_materials() -> int:
        """Get the maximum number of materials supported."""
        return MAX_MATERIALS
