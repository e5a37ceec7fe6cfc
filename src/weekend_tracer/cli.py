"""Command line interface for rendering scenes.

Usage:
    weekend-tracer [options]
    python -m weekend_tracer [options]

Options:
    --scene NAME          Built-in scene: random or three-spheres (default: random)
    --scene-file PATH     Load materials, spheres and camera from a JSON file
    --width WIDTH         Image width in pixels (default: 400)
    --aspect-ratio RATIO  Width:height, e.g. 3:2 or 1.5 (default: 3:2)
    --height HEIGHT       Image height in pixels (overrides --aspect-ratio)
    --samples SAMPLES     Samples per pixel (default: 100)
    --max-depth DEPTH     Maximum bounces per camera ray (default: 50)
    --output OUTPUT       Output file (.ppm, .png) or - for PPM on stdout
    --arch ARCH           Taichi backend: cpu or gpu (default: cpu)
    --seed SEED           Seed for scene generation and sampling
    --quiet               Only log warnings and errors

Example:
    weekend-tracer --scene three-spheres --width 400 --samples 50 --output spheres.png
"""

from __future__ import annotations

import argparse
import contextlib
import json
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

import numpy as np
from loguru import logger

from weekend_tracer.core.config import ConfigurationError, RenderConfig

if TYPE_CHECKING:
    from weekend_tracer.camera.thin_lens import ThinLensCamera
    from weekend_tracer.scene.manager import SceneManager

DEFAULT_ASPECT_RATIO = 3.0 / 2.0

# Keys of weekend_tracer.scene.scenes.SCENES. Importing that module declares
# Taichi fields, which must not happen before init_taichi()
SCENE_NAMES = ("random", "three-spheres")

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"


def parse_aspect_ratio(text: str) -> float:
    """Parse an aspect ratio given as "W:H" or as a plain number.

    Raises:
        argparse.ArgumentTypeError: If the text is not a positive ratio.
    """
    try:
        if ":" in text:
            width_text, height_text = text.split(":", 1)
            ratio = float(width_text) / float(height_text)
        else:
            ratio = float(text)
    except (ValueError, ZeroDivisionError) as e:
        raise argparse.ArgumentTypeError(f"invalid aspect ratio: {text!r}") from e

    if not ratio > 0.0:
        raise argparse.ArgumentTypeError(f"aspect ratio must be positive: {text!r}")
    return ratio


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="weekend-tracer",
        description="Render a sphere scene with a CPU path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    scene_group = parser.add_mutually_exclusive_group()
    scene_group.add_argument(
        "--scene",
        choices=SCENE_NAMES,
        default="random",
        help="Built-in scene (default: random)",
    )
    scene_group.add_argument(
        "--scene-file",
        type=Path,
        default=None,
        help="JSON scene file with 'materials', 'spheres' and optional 'camera'",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=parse_aspect_ratio,
        default=DEFAULT_ASPECT_RATIO,
        help="Image aspect ratio as W:H or a number (default: 3:2)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (overrides --aspect-ratio)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum bounces per camera ray (default: 50)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path, or - for PPM on stdout (default: image.ppm)",
    )
    parser.add_argument(
        "--arch",
        choices=["cpu", "gpu"],
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for scene generation and sampling",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Only log warnings and errors",
    )
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    return build_parser().parse_args(argv)


def configure_logging(quiet: bool = False) -> None:
    """Send log output to stderr, keeping stdout free for image data."""
    logger.remove()
    logger.add(sys.stderr, level="WARNING" if quiet else "INFO", format=LOG_FORMAT)


def init_taichi(arch: str = "cpu", seed: int | None = None) -> None:
    """Initialize Taichi for the requested backend.

    Taichi prints its version banner on import and the chosen arch on init.
    Both go to stderr so that stdout only ever carries image data.
    """
    with contextlib.redirect_stdout(sys.stderr):
        import taichi as ti

        kwargs: dict[str, Any] = {"arch": ti.gpu if arch == "gpu" else ti.cpu, "log_level": ti.WARN}
        if seed is not None:
            kwargs["random_seed"] = seed
        ti.init(**kwargs)


def build_render_config(args: argparse.Namespace) -> RenderConfig:
    """Create the render configuration from parsed arguments."""
    if args.height is not None:
        return RenderConfig(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.max_depth,
        )
    return RenderConfig.from_aspect_ratio(
        args.width,
        args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
    )


def load_scene_file(path: Path, aspect_ratio: float) -> tuple[SceneManager, ThinLensCamera]:
    """Build the scene and camera described by a JSON file.

    The file holds the SceneManager.to_dict() layout plus an optional
    "camera" object with ThinLensCamera fields. Without one, the camera sits
    at the origin looking down -z with a 90 degree field of view.

    Raises:
        ValueError: If the file content is not a valid scene.
    """
    # Lazy imports to allow Taichi initialization first
    from weekend_tracer.camera.thin_lens import ThinLensCamera
    from weekend_tracer.scene.manager import SceneManager

    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Scene file {path} must contain a JSON object")

    scene = SceneManager()
    scene.from_dict(data)

    camera_config = data.get("camera", {})
    if not isinstance(camera_config, dict):
        raise ValueError(f"'camera' in {path} must be an object")
    camera_data = dict(camera_config)
    camera_data["aspect_ratio"] = aspect_ratio
    camera_data.setdefault("lookfrom", (0.0, 0.0, 0.0))
    camera_data.setdefault("lookat", (0.0, 0.0, -1.0))
    try:
        camera = ThinLensCamera(**camera_data)
    except TypeError as e:
        raise ValueError(f"Invalid camera in {path}: {e}") from e

    return scene, camera


def build_scene(args: argparse.Namespace, aspect_ratio: float) -> tuple[SceneManager, ThinLensCamera]:
    """Create the scene and camera selected on the command line."""
    # Lazy imports to allow Taichi initialization first
    from weekend_tracer.scene.scenes import SCENES

    if args.scene_file is not None:
        return load_scene_file(args.scene_file, aspect_ratio)
    return SCENES[args.scene](aspect_ratio, rng=np.random.default_rng(args.seed))


def run(args: argparse.Namespace) -> int:
    """Render according to parsed arguments. Taichi must be initialized.

    Returns:
        Process exit code: 0 on success, 1 on error.
    """
    # Lazy imports to allow Taichi initialization first
    from weekend_tracer.camera.thin_lens import setup_camera
    from weekend_tracer.core.renderer import Renderer
    from weekend_tracer.preview.export import write_ppm

    try:
        config = build_render_config(args)
        scene, camera = build_scene(args, config.aspect_ratio)
        logger.info(
            f"Scene has {scene.get_sphere_count()} spheres, "
            f"{scene.get_material_count()} materials"
        )
        setup_camera(camera)

        renderer = Renderer(config)

        def progress_callback(done: int, total: int) -> None:
            logger.info(f"Scanlines remaining: {total - done}")

        renderer.render(callback=progress_callback)

        if args.output == "-":
            write_ppm(renderer.get_image_uint8(), sys.stdout)
            sys.stdout.flush()
        else:
            renderer.save_image(args.output)

        logger.info("Done")
        return 0
    except (ConfigurationError, ValueError, RuntimeError, OSError) as e:
        logger.error(f"Error: {e}")
        return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    configure_logging(args.quiet)
    init_taichi(args.arch, args.seed)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
