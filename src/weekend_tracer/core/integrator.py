"""Path tracing integrator: radiance estimation and per-pixel sampling.

This module implements the rendering kernels. A camera ray is followed through
the scene, bouncing off surfaces according to their material, until it escapes
to the sky, is absorbed, or runs out of depth.

The radiance estimate is the recursive definition

    color(ray, depth) = black                                  if depth <= 0
                      = attenuation * color(scattered, depth-1) on a scattering hit
                      = black                                  on an absorbing hit
                      = background(ray)                         on a miss

unrolled into a loop that carries the product of attenuations (throughput).

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Sky gradient background for escaped rays
    - Shadow acne avoided by ignoring hits closer than T_MIN
    - Jittered multi-sample anti-aliasing, one kernel launch per scanline

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.core.integrator import render_row, setup_render_target
    >>> from weekend_tracer.scene.scenes import create_three_sphere_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_three_sphere_scene(aspect_ratio=16 / 9)
    >>> setup_camera(camera)
    >>> setup_render_target(400, 225)
    >>> for j in reversed(range(225)):
    ...     render_row(j, samples_per_pixel=100, max_depth=50)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from weekend_tracer.camera.thin_lens import get_ray_jittered
from weekend_tracer.core.config import (
    MAX_IMAGE_HEIGHT,
    MAX_IMAGE_WIDTH,
    ConfigurationError,
)
from weekend_tracer.core.ray import unit_vector
from weekend_tracer.materials.dielectric import scatter_dielectric_by_id
from weekend_tracer.materials.lambertian import scatter_lambertian_by_id
from weekend_tracer.materials.metal import scatter_metal_by_id
from weekend_tracer.scene.intersection import intersect_scene
from weekend_tracer.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection; hits closer than T_MIN are ignored
# so a scattered ray does not re-hit the surface it left
T_MIN = 0.001
T_MAX = 1e10

# Sky gradient endpoints: white at the horizon, light blue overhead
SKY_HORIZON_COLOR = vec3(1.0, 1.0, 1.0)
SKY_ZENITH_COLOR = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

# Image dimensions (actual active size)
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Linear color buffer indexed [i, j] with j = 0 the bottom row
# (preallocated to max size to avoid kernel recompilation)
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Flag to track if render target is initialized
_render_target_initialized = ti.field(dtype=ti.i32, shape=())

# Single-value outputs of the diagnostic kernels
_pixel_result = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffer.

    Sets the active image dimensions and clears the buffer.

    Args:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).

    Raises:
        ConfigurationError: If dimensions are not positive or exceed the
            maximum supported size.
    """
    if width < 1 or height < 1:
        raise ConfigurationError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ConfigurationError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the render target buffer to zero."""
    _color_buffer.fill(0.0)


def reset_render_target() -> None:
    """Forget the render target so that rendering requires a new setup."""
    _render_target_initialized[None] = 0
    _image_width[None] = 0
    _image_height[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Background
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky color seen along a ray that escapes the scene.

    Blends linearly from white (looking down) to light blue (looking up)
    on the y component of the normalized direction.
    """
    t = 0.5 * (unit_vector(direction).y + 1.0)
    return (1.0 - t) * SKY_HORIZON_COLOR + t * SKY_ZENITH_COLOR


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def _scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: The unified material ID.
        incident_direction: The incoming ray direction.
        normal: The surface normal (unit length, facing toward ray).
        front_face: 1 if hit front face, 0 if back face.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter). Unknown
        material ids absorb the ray.
    """
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    # Default values
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        scattered_direction, attenuation, did_scatter = scatter_lambertian_by_id(
            type_index, normal
        )

    elif mat_type == int(MaterialType.METAL):
        scattered_direction, attenuation, did_scatter = scatter_metal_by_id(
            type_index, incident_direction, normal
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        scattered_direction, attenuation, did_scatter = scatter_dielectric_by_id(
            type_index, incident_direction, normal, front_face
        )

    return scattered_direction, attenuation, did_scatter


# =============================================================================
# Radiance Estimation
# =============================================================================


@ti.func
def ray_color(origin: vec3, direction: vec3, max_depth: ti.i32) -> vec3:
    """Estimate the radiance arriving along a ray.

    Args:
        origin: The ray origin.
        direction: The ray direction (any non-zero length).
        max_depth: Maximum number of scene queries. 0 always yields black.

    Returns:
        The estimated color (RGB, linear).
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _depth in range(max_depth):
        if active == 1:
            hit_record = intersect_scene(origin, direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                color = throughput * background_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = _scatter_material(
                    hit_record.material_id,
                    direction,
                    hit_record.normal,
                    hit_record.front_face,
                )

                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    origin = hit_record.point
                    direction = scattered_direction

    # Paths still active here ran out of depth and contribute black
    return color


@ti.func
def sample_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Average samples_per_pixel jittered radiance estimates for one pixel."""
    total = vec3(0.0, 0.0, 0.0)
    for _s in range(samples_per_pixel):
        ray = get_ray_jittered(pixel_i, pixel_j, width, height)
        total += ray_color(ray.origin, ray.direction, max_depth)
    return total / ti.cast(samples_per_pixel, ti.f32)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_row(
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render every pixel of scanline pixel_j into the color buffer."""
    for i in range(width):
        _color_buffer[i, pixel_j] = sample_pixel(
            i, pixel_j, width, height, samples_per_pixel, max_depth
        )


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render one pixel into _pixel_result."""
    # Single-iteration outer loop keeps the sample loop serial
    for _ in range(1):
        _pixel_result[None] = sample_pixel(
            pixel_i, pixel_j, width, height, samples_per_pixel, max_depth
        )


@ti.kernel
def _trace_single_ray(origin: vec3, direction: vec3, max_depth: ti.i32):
    """Trace one ray into _pixel_result."""
    for _ in range(1):
        _pixel_result[None] = ray_color(origin, direction, max_depth)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_row(pixel_j: int, samples_per_pixel: int, max_depth: int) -> None:
    """Render one scanline into the color buffer.

    Args:
        pixel_j: Scanline index (0 = bottom row).
        samples_per_pixel: Jittered samples averaged per pixel (>= 1).
        max_depth: Maximum bounce depth.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If pixel_j is outside the image or samples_per_pixel < 1.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    if not 0 <= pixel_j < height:
        raise ValueError(f"Scanline {pixel_j} is outside the image (height {height})")
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel must be at least 1, got {samples_per_pixel}")

    _render_row(pixel_j, width, height, samples_per_pixel, max_depth)


def render_pixel(
    pixel_i: int,
    pixel_j: int,
    samples_per_pixel: int,
    max_depth: int,
) -> tuple[float, float, float]:
    """Render the averaged color of a single pixel without storing it.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        samples_per_pixel: Jittered samples averaged (>= 1).
        max_depth: Maximum bounce depth.

    Returns:
        Tuple of (R, G, B) linear color values.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If samples_per_pixel < 1.
    """
    _check_render_target_initialized()
    if samples_per_pixel < 1:
        raise ValueError(f"samples_per_pixel must be at least 1, got {samples_per_pixel}")

    width, height = get_image_dimensions()
    _render_single_pixel(pixel_i, pixel_j, width, height, samples_per_pixel, max_depth)

    color = _pixel_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
) -> tuple[float, float, float]:
    """Estimate the radiance along one ray (one random sample).

    Args:
        origin: The ray origin.
        direction: The ray direction (non-zero).
        max_depth: Maximum bounce depth.

    Returns:
        Tuple of (R, G, B) linear color values.
    """
    _trace_single_ray(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        max_depth,
    )
    color = _pixel_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def get_linear_image_numpy() -> np.ndarray:
    """Get the rendered image as a NumPy array.

    Returns the linear (not gamma corrected, not clamped) per-pixel averages.
    The array shape is (height, width, 3) with dtype float32, first row = top
    of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _color_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 3) -> (height, width, 3)
    image = np.transpose(image, (1, 0, 2))

    # Row 0 of the buffer is the bottom of the image
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)
