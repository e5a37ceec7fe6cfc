"""Materials module for surface scattering models.

This module implements the materials a sphere can be made of:

Components:
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance

Each material provides:
    - A frozen dataclass describing it on the Python side (Lambertian, Metal,
      Dielectric), used when building scenes
    - A registry of parameters in Taichi fields (add_*_material / clear_*)
    - A scatter function returning (scattered_direction, attenuation,
      did_scatter); the scattered ray starts at the hit point

Scatter functions are Taichi functions for use inside kernels. Dispatch on
the material type happens in core.integrator.
"""

from .dielectric import (
    Dielectric,
    add_dielectric_material,
    clear_dielectric_materials,
    get_dielectric_ior,
    get_dielectric_material_count,
    scatter_dielectric,
    scatter_dielectric_by_id,
    will_reflect,
)
from .lambertian import (
    Lambertian,
    add_lambertian_material,
    clear_lambertian_materials,
    get_lambertian_albedo,
    get_lambertian_material_count,
    scatter_lambertian,
    scatter_lambertian_by_id,
)
from .metal import (
    Metal,
    add_metal_material,
    clear_metal_materials,
    get_metal_albedo,
    get_metal_fuzz,
    get_metal_material_count,
    scatter_metal,
    scatter_metal_by_id,
)

__all__ = [
    # Lambertian
    "Lambertian",
    "add_lambertian_material",
    "clear_lambertian_materials",
    "get_lambertian_albedo",
    "get_lambertian_material_count",
    "scatter_lambertian",
    "scatter_lambertian_by_id",
    # Metal
    "Metal",
    "add_metal_material",
    "clear_metal_materials",
    "get_metal_albedo",
    "get_metal_fuzz",
    "get_metal_material_count",
    "scatter_metal",
    "scatter_metal_by_id",
    # Dielectric
    "Dielectric",
    "add_dielectric_material",
    "clear_dielectric_materials",
    "get_dielectric_ior",
    "get_dielectric_material_count",
    "scatter_dielectric",
    "scatter_dielectric_by_id",
    "will_reflect",
]
