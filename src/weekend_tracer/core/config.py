"""Render configuration and validation.

RenderConfig collects the plain numeric settings the image assembly loop
needs. Values are validated on construction so that a bad configuration fails
before any Taichi kernel runs instead of producing a degenerate image.

Example:
    >>> config = RenderConfig(width=400, height=266, samples_per_pixel=100, max_depth=50)
    >>> config = RenderConfig.from_aspect_ratio(400, 3 / 2, samples_per_pixel=100)
    >>> config.height
    266
"""

from dataclasses import dataclass

# Largest image the preallocated render target can hold
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048


class ConfigurationError(ValueError):
    """Raised when render or camera settings are invalid."""


@dataclass(frozen=True)
class RenderConfig:
    """Settings for one render.

    Attributes:
        width: Image width in pixels (1 to MAX_IMAGE_WIDTH).
        height: Image height in pixels (1 to MAX_IMAGE_HEIGHT).
        samples_per_pixel: Jittered camera rays averaged per pixel (>= 1).
        max_depth: Maximum number of scene queries per camera ray (>= 0).
            A depth of 0 renders a black image.
    """

    width: int
    height: int
    samples_per_pixel: int = 100
    max_depth: int = 50

    def __post_init__(self) -> None:
        if self.width < 1 or self.height < 1:
            raise ConfigurationError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.width > MAX_IMAGE_WIDTH or self.height > MAX_IMAGE_HEIGHT:
            raise ConfigurationError(
                f"Image dimensions ({self.width}x{self.height}) exceed maximum supported "
                f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
            )
        if self.samples_per_pixel < 1:
            raise ConfigurationError(
                f"samples_per_pixel must be at least 1, got {self.samples_per_pixel}"
            )
        if self.max_depth < 0:
            raise ConfigurationError(f"max_depth must be non-negative, got {self.max_depth}")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @classmethod
    def from_aspect_ratio(
        cls,
        width: int,
        aspect_ratio: float,
        samples_per_pixel: int = 100,
        max_depth: int = 50,
    ) -> "RenderConfig":
        """Build a config whose height follows from the width and aspect ratio.

        Args:
            width: Image width in pixels.
            aspect_ratio: Width divided by height (must be positive).
            samples_per_pixel: Samples averaged per pixel.
            max_depth: Maximum bounce depth.

        Returns:
            A RenderConfig with height int(width / aspect_ratio).

        Raises:
            ConfigurationError: If the aspect ratio is not positive or the
                derived dimensions are invalid.
        """
        if aspect_ratio <= 0.0:
            raise ConfigurationError(f"aspect_ratio must be positive, got {aspect_ratio}")
        return cls(
            width=width,
            height=int(width / aspect_ratio),
            samples_per_pixel=samples_per_pixel,
            max_depth=max_depth,
        )
