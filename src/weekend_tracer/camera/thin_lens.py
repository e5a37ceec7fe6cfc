"""Thin-lens camera model with depth of field.

This module implements a positionable camera that generates primary rays for
rendering. The camera supports:
- Look-at positioning (lookfrom, lookat, vup)
- Vertical field of view specification
- Arbitrary aspect ratios
- Defocus blur through a finite aperture focused at focus_dist
- Jittered sampling for anti-aliasing

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The viewport is placed on the plane of perfect focus, focus_dist in front of
the camera. Rays start at a random point on a lens disk of radius aperture / 2
and pass through the viewport point, so only objects near the focus plane are
sharp. An aperture of 0 gives a pinhole camera.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... )
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from weekend_tracer.core.config import ConfigurationError
from weekend_tracer.core.ray import Ray, make_ray, random_in_unit_disk, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class ThinLensCamera:
    """Configuration for a thin-lens (perspective, defocus blur) camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 disables depth of field.
        focus_dist: Distance from lookfrom to the plane of perfect focus.

    Raises:
        ConfigurationError: If any parameter is out of range or the view
            basis is degenerate.
    """

    lookfrom: tuple[float, float, float]
    lookat: tuple[float, float, float]
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 0.0
    focus_dist: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ConfigurationError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aspect_ratio <= 0.0:
            raise ConfigurationError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.aperture < 0.0:
            raise ConfigurationError(f"aperture must be non-negative, got {self.aperture}")
        if self.focus_dist <= 0.0:
            raise ConfigurationError(f"focus_dist must be positive, got {self.focus_dist}")

        view = np.subtract(self.lookfrom, self.lookat, dtype=np.float64)
        if np.linalg.norm(view) == 0.0:
            raise ConfigurationError("lookfrom and lookat must be different points")
        if np.linalg.norm(np.cross(np.asarray(self.vup, dtype=np.float64), view)) == 0.0:
            raise ConfigurationError("vup must not be parallel to the view direction")


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (position)
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())

# Orthonormal basis vectors
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward (opposite view)

# Viewport vectors on the focus plane
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())  # Lower-left of viewport

_lens_radius = ti.field(dtype=ti.f32, shape=())

# Set to 1 once setup_camera() has written the fields above
_camera_initialized = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per camera configuration)
# =============================================================================


def setup_camera(camera: ThinLensCamera) -> None:
    """Initialize camera state from configuration.

    Computes the camera's orthonormal basis (u, v, w), the viewport on the
    focus plane and the lens radius. This must be called before rendering.

    Args:
        camera: Camera configuration with position, orientation, FOV and lens.

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    theta = math.radians(camera.vfov)
    h = math.tan(theta / 2.0)

    viewport_height = 2.0 * h
    viewport_width = camera.aspect_ratio * viewport_height

    lookfrom = np.array(camera.lookfrom, dtype=np.float32)
    lookat = np.array(camera.lookat, dtype=np.float32)
    vup = np.array(camera.vup, dtype=np.float32)

    # w points from lookat toward lookfrom (backward)
    w = lookfrom - lookat
    w = w / np.linalg.norm(w)

    # u points right (perpendicular to w and vup)
    u = np.cross(vup, w)
    u = u / np.linalg.norm(u)

    # v points up in the camera's frame
    v = np.cross(w, u)

    focus_dist = np.float32(camera.focus_dist)
    horizontal = focus_dist * np.float32(viewport_width) * u
    vertical = focus_dist * np.float32(viewport_height) * v
    lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - focus_dist * w

    _camera_origin[None] = lookfrom.tolist()
    _camera_u[None] = u.tolist()
    _camera_v[None] = v.tolist()
    _camera_w[None] = w.tolist()

    _viewport_horizontal[None] = horizontal.tolist()
    _viewport_vertical[None] = vertical.tolist()
    _lower_left_corner[None] = lower_left.tolist()

    _lens_radius[None] = camera.aperture / 2.0
    _camera_initialized[None] = 1


def reset_camera() -> None:
    """Mark the camera as not set up until the next setup_camera() call."""
    _camera_initialized[None] = 0


def is_camera_initialized() -> bool:
    """Whether setup_camera() has been called since the last reset."""
    return _camera_initialized[None] == 1


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32) -> Ray:
    """Generate a ray through normalized viewport coordinates (s, t).

    The ray starts at a random point on the lens disk and passes through
    the viewport point on the focus plane:
    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    Args:
        s: Horizontal coordinate (left to right).
        t: Vertical coordinate (bottom to top).

    Returns:
        A Ray whose direction is not normalized.
    """
    rd = _lens_radius[None] * random_in_unit_disk()
    offset = _camera_u[None] * rd.x + _camera_v[None] * rd.y

    origin = _camera_origin[None] + offset
    target = _lower_left_corner[None] + s * _viewport_horizontal[None] + t * _viewport_vertical[None]

    return make_ray(origin, target - origin)


@ti.func
def get_ray_jittered(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate a jittered ray for anti-aliasing.

    Adds a random offset in [0, 1) to the pixel coordinates, then maps them
    so that pixel 0 lands on the left/bottom viewport edge and pixel
    width-1 / height-1 on the right/top edge.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A Ray through a random point of the pixel.
    """
    jitter_u = ti.random(ti.f32)
    jitter_v = ti.random(ti.f32)

    # Single-pixel dimensions would otherwise divide by zero
    denom_u = ti.max(ti.cast(width - 1, ti.f32), 1.0)
    denom_v = ti.max(ti.cast(height - 1, ti.f32), 1.0)

    s = (ti.cast(pixel_i, ti.f32) + jitter_u) / denom_u
    t = (ti.cast(pixel_j, ti.f32) + jitter_v) / denom_v

    return get_ray(s, t)


@ti.func
def get_camera_origin() -> vec3:
    """Get the camera origin (lens center) in world space."""
    return _camera_origin[None]


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float] | float]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left
        (as tuples) and lens_radius (as a float).
    """
    info: dict[str, tuple[float, float, float] | float] = {}
    vectors = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _viewport_horizontal,
        "vertical": _viewport_vertical,
        "lower_left": _lower_left_corner,
    }
    for name, vec_field in vectors.items():
        vec = vec_field[None]
        info[name] = (float(vec[0]), float(vec[1]), float(vec[2]))
    info["lens_radius"] = float(_lens_radius[None])
    return info
