"""Geometry module for shape primitives.

This module provides the surface intersection contract and its sphere
implementation:

Components:
    sphere: Sphere primitive, HitRecord and ray-sphere intersection

All intersection routines are Taichi functions (@ti.func). Each takes the ray
origin and direction plus an open interval (t_min, t_max) and returns a
HitRecord:
    record = hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max)
"""

from .sphere import (
    HitRecord,
    Sphere,
    hit_sphere,
    make_miss_record,
    make_sphere,
    set_face_normal,
)

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "make_sphere",
    "make_miss_record",
    "set_face_normal",
]
