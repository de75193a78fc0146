#!/usr/bin/env python3
"""Render a sphere scene to PPM or PNG.

Progress is logged to stderr, so a PPM can be streamed to stdout.

Usage:
    python -m examples.render_spheres [options]

Options:
    --width WIDTH           Image width in pixels (default: 400)
    --aspect-ratio RATIO    Width divided by height (default: 16/9)
    --samples SAMPLES       Samples per pixel (default: 10)
    --max-depth DEPTH       Maximum scatter events per path (default: 50)
    --seed SEED             Random seed (default: 0)
    --scene NAME            Scene preset: diffuse or materials (default: materials)
    --format FORMAT         Output format: ppm or png (default: ppm)
    --output OUTPUT         Output file path, or - for stdout (default: -)
    --batch-size SIZE       Samples per progress update (default: 1)
    --log-level LEVEL       Logging level (default: INFO)

Example:
    python -m examples.render_spheres --samples 50 > spheres.ppm
    python -m examples.render_spheres --format png --output spheres.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

from pathtracer.config import RenderConfig, init_taichi
from pathtracer.logconfig import setup_logging

logger = logging.getLogger("pathtracer.examples.render_spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderConfig()
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=defaults.image_width,
        help=f"Image width in pixels (default: {defaults.image_width})",
    )
    parser.add_argument(
        "--aspect-ratio",
        type=float,
        default=defaults.aspect_ratio,
        help="Width divided by height (default: 16/9)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=defaults.samples_per_pixel,
        help=f"Samples per pixel (default: {defaults.samples_per_pixel})",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=defaults.max_depth,
        help=f"Maximum scatter events per path (default: {defaults.max_depth})",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=defaults.seed,
        help=f"Random seed (default: {defaults.seed})",
    )
    parser.add_argument(
        "--scene",
        choices=["diffuse", "materials"],
        default="materials",
        help="Scene preset (default: materials)",
    )
    parser.add_argument(
        "--format",
        choices=["ppm", "png"],
        default="ppm",
        help="Output format (default: ppm)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="-",
        help="Output file path, or - for stdout (default: -)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=1,
        help="Samples per progress update (default: 1)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def render_spheres(
    config: RenderConfig,
    scene_name: str = "materials",
    output_format: str = "ppm",
    output_path: str = "-",
    batch_size: int = 1,
) -> None:
    """Render a preset scene and write it out.

    Taichi must already be initialized.

    Args:
        config: Image size, sampling and depth settings.
        scene_name: Key of the preset in SCENE_PRESETS.
        output_format: "ppm" or "png".
        output_path: Output file path; "-" writes PPM to stdout.
        batch_size: Number of samples to render between progress updates.

    Raises:
        ValueError: If PNG output is requested on stdout.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.camera.pinhole import setup_camera
    from pathtracer.core.progressive import ProgressiveRenderer
    from pathtracer.preview.export import save_png, write_ppm
    from pathtracer.scene.presets import SCENE_PRESETS

    if output_format == "png" and output_path == "-":
        raise ValueError("PNG output needs a file path")

    scene, camera = SCENE_PRESETS[scene_name](config.aspect_ratio)
    setup_camera(camera)
    logger.info(
        "Rendering %r scene (%d spheres) at %dx%d, %d spp, max depth %d",
        scene_name,
        scene.get_sphere_count(),
        config.image_width,
        config.image_height,
        config.samples_per_pixel,
        config.max_depth,
    )

    renderer = ProgressiveRenderer(config.image_width, config.image_height, config.max_depth)
    start_time = time.time()
    renderer.render(num_samples=config.samples_per_pixel, batch_size=batch_size)
    logger.info("Rendered in %.2fs", time.time() - start_time)

    if output_format == "png":
        save_png(renderer, output_path)
    elif output_path == "-":
        write_ppm(renderer.get_image_numpy(), sys.stdout)
    else:
        write_ppm(renderer.get_image_numpy(), output_path)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging("pathtracer", level=args.log_level)

    config = RenderConfig(
        image_width=args.width,
        aspect_ratio=args.aspect_ratio,
        samples_per_pixel=args.samples,
        max_depth=args.max_depth,
        seed=args.seed,
    )

    try:
        init_taichi(config)
        render_spheres(
            config,
            scene_name=args.scene,
            output_format=args.format,
            output_path=args.output,
            batch_size=args.batch_size,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
