"""Core rendering module.

This module contains the fundamental building blocks for ray tracing:

Components:
    ray: Ray data structure, vector helpers and random sampling
    config: Render configuration and validation
    integrator: Radiance estimation, material dispatch and row kernels
    renderer: Scanline loop with progress reporting and image output

All compute-intensive operations use Taichi kernels.
"""

from .config import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    ConfigurationError,
    RenderConfig,
)
from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    random_vec3,
    random_vec3_range,
    ray_at,
    reflect,
    reflectance,
    refract,
    unit_vector,
    vec3,
)

# Note: integrator and renderer are NOT imported here because they declare
# Taichi fields, which requires ti.init() to have run first.
#
# For rendering, use:
#   from weekend_tracer.core.renderer import Renderer

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "unit_vector",
    "dot",
    "cross",
    "reflect",
    "refract",
    "reflectance",
    "near_zero",
    "random_vec3",
    "random_vec3_range",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
    "ConfigurationError",
    "RenderConfig",
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
]
