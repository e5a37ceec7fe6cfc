"""Sphere primitive, hit record and ray-sphere intersection.

This module defines the intersection contract every primitive follows: given a
ray and an open interval (t_min, t_max), report either no hit or the closest
qualifying hit, as a HitRecord. It also implements that contract for spheres
using the half-b form of the quadratic formula.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Must be non-zero. A negative radius
            flips the outward normal, which models the inner wall of a hollow
            glass shell.
        material_id: Unified material ID (see scene.manager).
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The ray parameter of the intersection, strictly inside the queried
            interval. Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point. Unit length and
            always opposing the incoming ray. Only valid if hit == 1.
        front_face: Whether the ray hit the outer surface (1) or came from
            inside (0). Only valid if hit == 1.
        material_id: The material ID of the hit primitive, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a geometric normal against the incoming ray.

    Args:
        ray_direction: The direction of the incoming ray.
        outward_normal: The unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal). front_face is 1 when the ray strikes
        the outer side (direction . outward_normal < 0) and normal is then the
        outward normal; otherwise front_face is 0 and normal is negated.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) >= 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    The intersection is found by solving
        |ray_origin + t * ray_direction - center|^2 = radius^2
    which expands to a*t^2 + 2*half_b*t + c = 0 with
        a = dot(direction, direction)
        half_b = dot(oc, direction)
        c = dot(oc, oc) - radius^2
        oc = origin - center

    The smaller root is tried first and the larger one only if the smaller
    falls outside (t_min, t_max), so the nearest valid surface point is always
    reported. This matters for rays leaving the inside of a glass sphere.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray (need not be normalized).
        sphere: The sphere to test intersection against.
        t_min: Exclusive lower bound on t (avoids self-intersection).
        t_max: Exclusive upper bound on t.

    Returns:
        A HitRecord; check its hit field to determine if intersection occurred.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        # Find the nearest root that lies in the acceptable range
        root = (-half_b - sqrt_d) / a
        valid = (root > t_min) and (root < t_max)

        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = (root > t_min) and (root < t_max)

        if valid:
            hit_point = ray_origin + root * ray_direction
            outward_normal = (hit_point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray_direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=hit_point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32, material_id: ti.i32) -> Sphere:
    """Create a sphere inside a Taichi kernel."""
    return Sphere(center=center, radius=radius, material_id=material_id)
