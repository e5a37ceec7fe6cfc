"""Camera module for view and ray generation.

Components:
    thin_lens: Positionable camera with defocus blur (depth of field)

Camera responsibilities:
    - Transform (s, t) viewport coordinates to world-space rays
    - Apply anti-aliasing jitter for sub-pixel sampling
    - Support look-at positioning with up vector
    - Sample ray origins on the lens disk for depth of field

Ray generation uses normalized coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    ThinLensCamera,
    get_camera_info,
    get_camera_origin,
    get_ray,
    get_ray_jittered,
    is_camera_initialized,
    reset_camera,
    setup_camera,
)

__all__ = [
    "ThinLensCamera",
    "setup_camera",
    "reset_camera",
    "is_camera_initialized",
    "get_ray",
    "get_ray_jittered",
    "get_camera_origin",
    "get_camera_info",
]
