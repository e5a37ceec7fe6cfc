"""Scene module for scene storage, building and queries.

Components:
    intersection: Sphere storage in Taichi fields and the closest-hit query
    manager: Scene manager coordinating spheres and the material arena
    scenes: Ready-made demo scenes (random field of spheres, three spheres)

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for sphere data
    - Unified material ids mapped to (material type, type-local index)
"""

from .intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere,
    get_sphere_count,
    intersect_scene,
)
from .manager import (
    MAX_MATERIALS,
    MaterialInfo,
    MaterialType,
    SceneConfig,
    SceneManager,
    SphereInfo,
    SpherePrimitive,
    get_material_type,
    get_material_type_index,
    material_type_indices,
    material_types,
    num_materials,
)
from .scenes import (
    SCENES,
    create_random_scene,
    create_three_sphere_scene,
)

__all__ = [
    # Intersection module
    "add_sphere",
    "clear_scene",
    "get_sphere",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "SpherePrimitive",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    "material_types",
    "material_type_indices",
    "num_materials",
    # Ready-made scenes
    "SCENES",
    "create_random_scene",
    "create_three_sphere_scene",
]
