"""Unified scene manager coordinating primitives and materials.

This module provides the high-level scene building API. Materials live in an
arena: every registered material gets a unified material_id, and spheres refer
to their material through that id, so any number of spheres can share one
material. The manager records which material type (Lambertian, Metal,
Dielectric) and which type-local registry slot each id maps to, so the
integrator can dispatch to the right scatter function.

The SceneManager maintains:
- A unified material_id space across all material types
- Mapping from material_id to (material_type, type_local_index)
- add(primitive) for SpherePrimitive values that carry material descriptors
- Scene serialization to and from plain dictionaries

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.scene.manager import SceneManager, SpherePrimitive
    >>> from weekend_tracer.materials import Lambertian
    >>> scene = SceneManager()
    >>> ground = Lambertian(albedo=(0.5, 0.5, 0.5))
    >>> scene.add(SpherePrimitive(center=(0, -1000, 0), radius=1000, material=ground))
    >>> mat_id = scene.add_metal_material(albedo=(0.7, 0.6, 0.5), fuzz=0.0)
    >>> scene.add_sphere(center=(4, 1, 0), radius=1.0, material_id=mat_id)
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Union

import taichi as ti
import taichi.math as tm

from weekend_tracer.materials.dielectric import (
    Dielectric,
    add_dielectric_material,
    clear_dielectric_materials,
)
from weekend_tracer.materials.lambertian import (
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
)
from weekend_tracer.materials.metal import (
    Metal,
    add_metal_material,
    clamp_fuzz,
    clear_metal_materials,
)
from weekend_tracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Any material description accepted by SceneManager.add_material()
Material = Union[Lambertian, Metal, Dielectric]


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the integrator to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


# Maximum number of materials across all types
MAX_MATERIALS = 2048

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the type-local index for material_id i
# (e.g., if material_id 5 is the 2nd metal material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    """Clear the material tracking fields."""
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Args:
        material_id: The unified material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the type-local index for a given material ID.

    This is used to look up material properties in the type-specific
    material arrays (e.g., lambertian_albedos[type_index]).

    Returns:
        The index into the type-specific material array.
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


@dataclass(frozen=True)
class SpherePrimitive:
    """A sphere to be added to a scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere. Must be non-zero; negative values
            flip the surface normal (hollow glass shells).
        material: The material description. Passing the same object for
            several spheres makes them share one material_id.
    """

    center: tuple[float, float, float]
    radius: float
    material: Material


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The type of material (Lambertian, Metal, Dielectric).
        type_index: The index within the type-specific material array.
        params: The material parameters as stored (fuzz already clamped).
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
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
        materials: List of material configurations, in material_id order.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_triple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element sequence into a tuple of floats."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _json_number(value: Any, name: str) -> float:
    """Convert a JSON number into a float."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return float(value)


def _json_triple(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a JSON array of 3 numbers into a tuple of floats."""
    if not isinstance(values, list) or len(values) != 3:
        raise ValueError(f"{name} must be a list of 3 numbers, got {values!r}")
    return (
        _json_number(values[0], name),
        _json_number(values[1], name),
        _json_number(values[2], name),
    )


def _json_object_list(values: Any, name: str) -> list[dict[str, Any]]:
    """Check that a scene section is a list of objects."""
    if not isinstance(values, list) or not all(isinstance(v, dict) for v in values):
        raise ValueError(f"'{name}' must be a list of objects")
    return values


class SceneManager:
    """Scene builder coordinating sphere storage and the material arena.

    Creating a SceneManager clears any scene data left in the Taichi fields,
    so there is exactly one active scene at a time.

    Attributes:
        materials: List of MaterialInfo for all registered materials.
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> red_diffuse = scene.add_lambertian_material(albedo=(0.8, 0.1, 0.1))
        >>> gold_metal = scene.add_metal_material(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> glass = scene.add_dielectric_material(ior=1.5)
        >>> scene.add_sphere((0, 0, -1), 0.5, red_diffuse)
        >>> scene.add_sphere((1, 0, -1), 0.5, gold_metal)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        # Registered descriptor objects, keyed by identity
        self._descriptor_ids: dict[int, tuple[Material, int]] = {}
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_lambertian_materials()
        clear_metal_materials()
        clear_dielectric_materials()
        _clear_material_tracking()
        self.materials.clear()
        self.spheres.clear()
        self._descriptor_ids.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives and materials)."""
        self._clear_all()

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self,
        material_type: MaterialType,
        type_index: int,
        params: dict[str, Any],
    ) -> int:
        """Assign a unified material ID to a type-local registry slot."""
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        return material_id

    def add_lambertian_material(
        self,
        albedo: tuple[float, float, float],
    ) -> int:
        """Add a Lambertian (diffuse) material to the scene.

        Args:
            albedo: The diffuse reflectance color as (R, G, B) tuple.
                Each component should be in [0, 1] for energy conservation.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        albedo = _as_triple(albedo, "albedo")
        type_index = add_lambertian_material(albedo)
        return self._register_material(MaterialType.LAMBERTIAN, type_index, {"albedo": albedo})

    def add_metal_material(
        self,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a metal (specular reflective) material to the scene.

        Args:
            albedo: The reflective color as (R, G, B) tuple.
                Each component should be in [0, 1].
            fuzz: The roughness, clamped into [0, 1]. Default is 0 (perfect mirror).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any albedo component is outside [0, 1].
        """
        albedo = _as_triple(albedo, "albedo")
        type_index = add_metal_material(albedo, fuzz)
        return self._register_material(
            MaterialType.METAL,
            type_index,
            {"albedo": albedo, "fuzz": clamp_fuzz(fuzz)},
        )

    def add_dielectric_material(
        self,
        ior: float = 1.5,
    ) -> int:
        """Add a dielectric (glass/water) material to the scene.

        Args:
            ior: Index of refraction. Default is 1.5 (typical glass).

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If IOR is not positive.
        """
        type_index = add_dielectric_material(ior)
        return self._register_material(MaterialType.DIELECTRIC, type_index, {"ior": ior})

    def add_material(self, material: Material) -> int:
        """Register a material description, reusing its ID if already known.

        Descriptions are matched by identity: the same object always maps to
        the same material_id, while two equal but distinct objects get
        separate IDs.

        Args:
            material: A Lambertian, Metal or Dielectric description.

        Returns:
            The unified material ID.

        Raises:
            TypeError: If material is not a known material description.
        """
        known = self._descriptor_ids.get(id(material))
        if known is not None:
            return known[1]

        if isinstance(material, Lambertian):
            material_id = self.add_lambertian_material(material.albedo)
        elif isinstance(material, Metal):
            material_id = self.add_metal_material(material.albedo, material.fuzz)
        elif isinstance(material, Dielectric):
            material_id = self.add_dielectric_material(material.ior)
        else:
            raise TypeError(f"Unsupported material description: {material!r}")

        # Keep a reference so the id() key cannot be reused by another object
        self._descriptor_ids[id(material)] = (material, material_id)
        return material_id

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        """Get information about a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For lookup inside kernels, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
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
            radius: The radius of the sphere (non-zero).
            material_id: The unified material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If the radius is zero or material_id is invalid.
        """
        if radius == 0.0:
            raise ValueError("Sphere radius must be non-zero")
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

        center = _as_triple(center, "center")
        sphere_index = add_sphere(vec3(center[0], center[1], center[2]), radius, material_id)

        self.spheres.append(
            SphereInfo(
                sphere_index=sphere_index,
                center=center,
                radius=radius,
                material_id=material_id,
            )
        )
        return sphere_index

    def add(self, primitive: SpherePrimitive) -> int:
        """Add a primitive, registering its material on first use.

        Args:
            primitive: The sphere to add.

        Returns:
            The index of the added sphere.
        """
        material_id = self.add_material(primitive.material)
        return self.add_sphere(primitive.center, primitive.radius, material_id)

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        ior: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(ior)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing all materials and spheres.
        """
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {
                "type": mat.material_type.name.lower(),
            }
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

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

        Clears the current scene and loads the configuration. Materials are
        registered in list order, so a sphere's material_id is the position
        of its material in the list.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        for mat_config in _json_object_list(config.materials, "materials"):
            mat_type = str(mat_config.get("type", "")).lower()
            if mat_type == "lambertian":
                albedo = _json_triple(mat_config.get("albedo", [0.5, 0.5, 0.5]), "albedo")
                self.add_lambertian_material(albedo)
            elif mat_type == "metal":
                albedo = _json_triple(mat_config.get("albedo", [0.8, 0.8, 0.8]), "albedo")
                fuzz = _json_number(mat_config.get("fuzz", 0.0), "fuzz")
                self.add_metal_material(albedo, fuzz)
            elif mat_type == "dielectric":
                ior = _json_number(mat_config.get("ior", 1.5), "ior")
                self.add_dielectric_material(ior)
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in _json_object_list(config.spheres, "spheres"):
            center = _json_triple(sphere_config.get("center", [0, 0, 0]), "center")
            radius = _json_number(sphere_config.get("radius", 1.0), "radius")
            material_id = sphere_config.get("material_id", 0)
            if isinstance(material_id, bool) or not isinstance(material_id, int):
                raise ValueError(f"material_id must be an integer, got {material_id!r}")
            self.add_sphere(center, radius, material_id)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary with 'materials' and 'spheres' keys.

        Raises:
            ValueError: If the dictionary does not describe a valid scene.
        """
        if not isinstance(data, dict):
            raise ValueError("Scene data must be an object")
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
