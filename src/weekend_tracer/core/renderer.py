"""Scanline renderer assembling a full image.

This module provides a convenient wrapper around the core integrator that:
- Owns the render configuration (size, samples, depth)
- Renders the image one scanline at a time, top row first
- Reports progress after every row through a callback or a generator
- Converts and saves the finished image

Each row is one kernel launch, so Taichi parallelises over the pixels of the
row while Python keeps control between rows for progress reporting.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from weekend_tracer.core.config import RenderConfig
    >>> from weekend_tracer.core.renderer import Renderer
    >>> from weekend_tracer.scene.scenes import create_random_scene
    >>> from weekend_tracer.camera.thin_lens import setup_camera
    >>>
    >>> scene, camera = create_random_scene(aspect_ratio=3 / 2)
    >>> setup_camera(camera)
    >>>
    >>> renderer = Renderer(RenderConfig.from_aspect_ratio(400, 3 / 2))
    >>> renderer.render(callback=lambda done, total: print(f"{done}/{total}"))
    >>> renderer.save_image("image.ppm")
"""

import time
from collections.abc import Callable, Generator, Iterator
from pathlib import Path

import numpy as np
import numpy.typing as npt
from loguru import logger

from weekend_tracer.camera.thin_lens import is_camera_initialized
from weekend_tracer.core.config import RenderConfig
from weekend_tracer.core.integrator import (
    get_linear_image_numpy,
    render_row,
    setup_render_target,
)
from weekend_tracer.preview.export import image_to_uint8, save_png, save_ppm

# Type alias for progress callback
# Callback receives (rows_done, total_rows)
ProgressCallback = Callable[[int, int], None]


class Renderer:
    """Renders an image scanline by scanline with progress reporting.

    The renderer uses whatever scene and camera are currently set up in the
    Taichi fields; build the scene and call setup_camera() before render().

    Attributes:
        config: The render configuration.
    """

    def __init__(self, config: RenderConfig) -> None:
        """Initialize the renderer and its render target.

        Args:
            config: Validated render configuration.
        """
        self.config = config
        self._rows_done = 0
        setup_render_target(config.width, config.height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.config.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.config.height

    @property
    def rows_done(self) -> int:
        """Number of scanlines rendered by the current or last render."""
        return self._rows_done

    @property
    def is_complete(self) -> bool:
        """Whether every scanline has been rendered."""
        return self._rows_done == self.config.height

    def render_rows(self) -> Generator[tuple[int, int], None, None]:
        """Render all scanlines, yielding progress after each one.

        Rows are rendered from the top of the image (j = height - 1) down to
        the bottom (j = 0).

        Yields:
            Tuple of (rows_done, total_rows).

        Raises:
            RuntimeError: If setup_camera() has not been called.

        Example:
            >>> for done, total in renderer.render_rows():
            ...     print(f"Scanlines remaining: {total - done}")
        """
        if not is_camera_initialized():
            raise RuntimeError("Camera not set up. Call setup_camera() before rendering.")
        total = self.config.height
        self._rows_done = 0
        for j in reversed(range(total)):
            render_row(j, self.config.samples_per_pixel, self.config.max_depth)
            self._rows_done += 1
            yield (self._rows_done, total)

    def render(self, callback: ProgressCallback | None = None) -> float:
        """Render the whole image.

        Args:
            callback: Optional function called after each scanline with
                (rows_done, total_rows).

        Returns:
            Elapsed wall-clock time in seconds.
        """
        config = self.config
        logger.debug(
            f"Rendering {config.width}x{config.height}, "
            f"{config.samples_per_pixel} spp, max depth {config.max_depth}"
        )

        start = time.perf_counter()
        for done, total in self.render_rows():
            if callback is not None:
                callback(done, total)
        elapsed = time.perf_counter() - start

        logger.info(f"Rendering time: {elapsed:.2f}s")
        return elapsed

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the linear per-pixel averages as an (H, W, 3) array, top row first."""
        return get_linear_image_numpy()

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the gamma corrected 8-bit image as an (H, W, 3) array."""
        return image_to_uint8(self.get_image_numpy())

    def iter_pixels(self) -> Iterator[tuple[int, int, int]]:
        """Yield (r, g, b) integer triplets in output order.

        Rows are produced from top to bottom, each row from left to right.
        """
        for r, g, b in self.get_image_uint8().reshape(-1, 3):
            yield (int(r), int(g), int(b))

    def save_image(self, filepath: str | Path) -> None:
        """Save the rendered image.

        Args:
            filepath: Output path. ".ppm" writes a plain PPM, any other
                extension is passed to Pillow (e.g. ".png").
        """
        filepath = Path(filepath)
        image_uint8 = self.get_image_uint8()
        if filepath.suffix.lower() == ".ppm":
            save_ppm(image_uint8, str(filepath))
        else:
            save_png(image_uint8, str(filepath))
        logger.info(f"Saved {filepath}")

    def __repr__(self) -> str:
        """Return a string representation of the renderer state."""
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"samples={self.config.samples_per_pixel}, rows_done={self.rows_done})"
        )
