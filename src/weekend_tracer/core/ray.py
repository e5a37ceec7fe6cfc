"""Ray data structure and vector utilities for the path tracer.

This module provides the fundamental Ray dataclass and the vector algebra used
by every other part of the renderer: products, lengths, normalization, the
reflection and refraction formulas, Schlick's reflectance approximation and the
random sampling helpers used by materials and the camera lens.

All vectors are ``taichi.math.vec3`` values in single precision. A vec3 is used
for points, directions and RGB colors alike. Every function here is a Taichi
function and can only be called from inside Taichi kernels.

Randomness comes from ``ti.random``, which keeps an independent generator state
per Taichi thread. Seed it through ``ti.init(random_seed=...)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Components below this magnitude count as zero in near_zero()
NEAR_ZERO_EPSILON = 1e-8

# Upper bound on rejection sampling attempts. The acceptance rate is ~52% for
# the unit sphere and ~79% for the unit disk, so the bound is never reached.
MAX_REJECTION_TRIES = 100


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). It is not required
            to be normalized; scattered rays generally are not.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Computes v / length(v). The input must have non-zero length; a zero vector
    is a caller contract violation and produces NaN components.

    Args:
        v: The input vector.

    Returns:
        A unit vector in the same direction as v.
    """
    return v / length(v)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to detect degenerate scatter directions, where a random offset
    almost exactly cancels the surface normal.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are below NEAR_ZERO_EPSILON in magnitude, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Mirror-reflect a vector about a normal.

    Computes v - 2 (v . n) n. The normal should be unit length.

    Args:
        v: The incoming direction (pointing toward the surface).
        n: The surface normal.

    Returns:
        The reflected direction.
    """
    return v - 2.0 * tm.dot(v, n) * n


@ti.func
def refract(uv: vec3, n: vec3, etai_over_etat: ti.f32) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The result is split into the components perpendicular and parallel to the
    normal. The caller is responsible for checking total internal reflection
    beforehand (see scatter_dielectric).

    Args:
        uv: The incoming direction, unit length.
        n: The surface normal, unit length and facing the incoming ray.
        etai_over_etat: Ratio of refractive indices, incident over transmitted.

    Returns:
        The refracted direction.
    """
    cos_theta = tm.min(-tm.dot(uv, n), 1.0)
    r_out_perp = etai_over_etat * (uv + cos_theta * n)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - length_squared(r_out_perp))) * n
    return r_out_perp + r_out_parallel


@ti.func
def reflectance(cosine: ti.f32, ref_idx: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    R(cosine) = R0 + (1 - R0) (1 - cosine)^5 with R0 = ((1 - n) / (1 + n))^2.
    At normal incidence (cosine = 1) this is R0, at grazing incidence
    (cosine = 0) it is 1. R0 is the same for n and 1/n.

    Args:
        cosine: Cosine of the angle between the incident direction and normal.
        ref_idx: Refractive index (or ratio of indices).

    Returns:
        The approximate fraction of light that is reflected.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec3() -> vec3:
    """Generate a random vector uniformly distributed in [0, 1)^3."""
    return vec3(ti.random(ti.f32), ti.random(ti.f32), ti.random(ti.f32))


@ti.func
def random_vec3_range(min_val: ti.f32, max_val: ti.f32) -> vec3:
    """Generate a random vector uniformly distributed in [min_val, max_val)^3."""
    span = max_val - min_val
    return vec3(
        min_val + span * ti.random(ti.f32),
        min_val + span * ti.random(ti.f32),
        min_val + span * ti.random(ti.f32),
    )


@ti.func
def random_in_unit_sphere() -> vec3:
    """Generate a random point inside the unit sphere.

    Uses rejection sampling: draws from [-1, 1)^3 until the squared length
    is below 1.

    Returns:
        A random point with length < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    # Rejection sampling loop
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = random_vec3_range(-1.0, 1.0)
            if length_squared(p) < 1.0:
                found = True
    return p


@ti.func
def random_unit_vector() -> vec3:
    """Generate a random unit vector uniformly distributed on the sphere.

    This is the normalized version of random_in_unit_sphere().
    """
    return unit_vector(random_in_unit_sphere())


@ti.func
def random_in_unit_disk() -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used to sample the camera lens for depth of field.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(0.0, 0.0, 0.0)
    found = False
    for _ in range(MAX_REJECTION_TRIES):
        if not found:
            p = vec3(
                ti.random(ti.f32) * 2.0 - 1.0,
                ti.random(ti.f32) * 2.0 - 1.0,
                0.0,
            )
            if p.x * p.x + p.y * p.y < 1.0:
                found = True
    return p
