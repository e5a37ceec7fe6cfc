"""Image export utilities for rendered images.

This module converts linear radiance averages into 8-bit pixels and writes
them to disk or a stream.

The 8-bit conversion matches the classic PPM output: each channel is gamma
corrected with gamma 2 (square root), clamped to [0, 0.999], multiplied by 256
and truncated, so every value lands in [0, 255].

Supported formats:
    - PPM (plain "P3" text format)
    - PNG (8-bit via Pillow)

Example:
    >>> from weekend_tracer.preview.export import image_to_uint8, save_ppm
    >>> image = renderer.get_image_numpy()
    >>> save_ppm(image_to_uint8(image), "output.ppm")
"""

from __future__ import annotations

from typing import TextIO

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

# Largest channel value before scaling to 8 bits
CLAMP_MAX = 0.999

# Maximum color value written to the PPM header
PPM_MAX_VALUE = 255


def image_to_uint8(image: npt.NDArray[np.floating[npt.NBitBase]]) -> npt.NDArray[np.uint8]:
    """Convert a linear image to 8-bit output values.

    Args:
        image: Linear image array of shape (H, W, 3). Negative values are
            treated as black.

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    linear = np.maximum(np.asarray(image, dtype=np.float64), 0.0)
    corrected = np.sqrt(linear)
    clamped = np.clip(corrected, 0.0, CLAMP_MAX)
    return (256.0 * clamped).astype(np.uint8)


def format_ppm_header(width: int, height: int) -> str:
    """Return the P3 header lines for an image of the given size."""
    return f"P3\n{width} {height}\n{PPM_MAX_VALUE}\n"


def write_ppm(image_uint8: npt.NDArray[np.uint8], stream: TextIO) -> None:
    """Write an 8-bit image to a text stream as a plain PPM.

    Pixels are written one "R G B" line each, rows from top to bottom and
    each row from left to right.

    Args:
        image_uint8: Image array of shape (H, W, 3), first row = top.
        stream: Writable text stream.

    Raises:
        ValueError: If the array is not of shape (H, W, 3).
    """
    if image_uint8.ndim != 3 or image_uint8.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image_uint8.shape}")

    height, width, _ = image_uint8.shape
    stream.write(format_ppm_header(width, height))

    pixels = image_uint8.reshape(-1, 3).astype(np.int64)
    stream.writelines(f"{r} {g} {b}\n" for r, g, b in pixels)


def save_ppm(image_uint8: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit image as a plain PPM file.

    Args:
        image_uint8: Image array of shape (H, W, 3), first row = top.
        filepath: Output file path (should end in .ppm).
    """
    with open(filepath, "w", encoding="ascii") as stream:
        write_ppm(image_uint8, stream)


def save_png(image_uint8: npt.NDArray[np.uint8], filepath: str) -> None:
    """Save an 8-bit image as a PNG file.

    Args:
        image_uint8: Image array of shape (H, W, 3), first row = top.
        filepath: Output file path (should end in .png).
    """
    pil_image = PILImage.fromarray(np.ascontiguousarray(image_uint8, dtype=np.uint8), mode="RGB")
    pil_image.save(filepath)


def load_image(filepath: str) -> npt.NDArray[np.uint8]:
    """Load an image file (PPM, PNG, ...) as an (H, W, 3) uint8 array."""
    with PILImage.open(filepath) as pil_image:
        return np.asarray(pil_image.convert("RGB"), dtype=np.uint8)


def compute_rmse(
    image_a: npt.NDArray[np.floating[npt.NBitBase]],
    image_b: npt.NDArray[np.floating[npt.NBitBase]],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
