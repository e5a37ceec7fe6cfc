"""Preview module for image output.

Components:
    export: 8-bit conversion, PPM and PNG writers, image comparison

The render buffer holds linear per-pixel averages. Output applies gamma 2
correction, clamps each channel below 1 and scales to 8 bits before writing
a plain-text PPM or a PNG.

Example:
    >>> from weekend_tracer.preview import image_to_uint8, save_png
    >>> save_png(image_to_uint8(renderer.get_image_numpy()), "output.png")
"""

from weekend_tracer.preview.export import (
    compute_rmse,
    format_ppm_header,
    image_to_uint8,
    load_image,
    save_png,
    save_ppm,
    write_ppm,
)

__all__ = [
    "image_to_uint8",
    "format_ppm_header",
    "write_ppm",
    "save_ppm",
    "save_png",
    "load_image",
    "compute_rmse",
]
