#!/usr/bin/env python3
"""Cast camera rays into a small implicit-surface scene.

This script builds a scene (a ground plane, a sphere and a box, or a scene
loaded from JSON), points a spherical-angle camera at it and casts the rays
of a few probe pixels, logging where each one lands. With --all every pixel
is cast in one batch and a hit summary is logged.

Usage:
    python examples/cast_rays.py [options]

Options:
    --width WIDTH       Screen width in pixels (default: 160)
    --height HEIGHT     Screen height in pixels (default: 120)
    --aperture ANGLE    Half field of view in degrees (default: 40)
    --step LEN          March step length (default: 0.05)
    --iters N           Bisection iterations (default: 12)
    --max-len LEN       Maximum cast distance (default: 50)
    --no-refine         Disable bisection refinement
    --scene FILE        Load the scene from a JSON file (Scene.to_dict format)
    --all               Cast every pixel instead of the probe pixels
    --verbose           Enable debug logging

Example:
    python examples/cast_rays.py --width 320 --height 240 --all
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path

import taichi as ti

logger = logging.getLogger("raymarch.examples.cast_rays")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Cast camera rays into an implicit-surface scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=160, help="Screen width in pixels (default: 160)")
    parser.add_argument("--height", type=int, default=120, help="Screen height in pixels (default: 120)")
    parser.add_argument(
        "--aperture",
        type=float,
        default=40.0,
        help="Half field of view in degrees (default: 40)",
    )
    parser.add_argument("--step", type=float, default=0.05, help="March step length (default: 0.05)")
    parser.add_argument("--iters", type=int, default=12, help="Bisection iterations (default: 12)")
    parser.add_argument("--max-len", type=float, default=50.0, help="Maximum cast distance (default: 50)")
    parser.add_argument("--no-refine", action="store_true", help="Disable bisection refinement")
    parser.add_argument("--scene", type=str, default=None, help="Scene JSON file")
    parser.add_argument("--all", action="store_true", help="Cast every pixel")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def build_default_scene(scene) -> None:
    """Populate a scene with a ground plane, a sphere and a box."""
    scene.add_plane(point=(0.0, 0.0, -1.0), normal=(0.0, 0.0, 1.0))
    scene.add_sphere(center=(6.0, 0.0, 0.0), radius=1.0)
    scene.add_box(center=(8.0, 3.0, 0.0), half_extents=(1.0, 1.0, 1.0))


def cast_rays(args: argparse.Namespace) -> int:
    """Run the casts described by the arguments.

    Returns:
        The number of rays that hit something.
    """
    # Lazy imports to allow Taichi initialization first
    from raymarch.camera.projection import CameraConfig, SphericalCamera
    from raymarch.scene.intersection import MarchConfig, RayMarcher
    from raymarch.scene.manager import Scene

    scene = Scene()
    if args.scene:
        data = json.loads(Path(args.scene).read_text(encoding="utf-8"))
        scene.from_dict(data)
    else:
        build_default_scene(scene)
    logger.info("Scene has %d objects", scene.get_object_count())

    camera = SphericalCamera(
        CameraConfig(
            width=args.width,
            height=args.height,
            aperture_angle=math.radians(args.aperture),
            theta=0.0,
            phi=-0.1,
        )
    )
    marcher = RayMarcher(scene, MarchConfig(cast_inc_len=args.step, bin_search_iters=args.iters))
    origin = (0.0, 0.0, 0.0)
    refine = not args.no_refine

    if args.all:
        directions = camera.get_ray_directions().reshape(-1, 3)
        hits, _, object_ids = marcher.cast_rays(origin, directions, refine, args.max_len)
        for info in scene.objects:
            count = int((object_ids == info.object_id).sum())
            logger.info("Object %d (%s): %d pixels", info.object_id, info.kind.name.lower(), count)
        logger.info("%d of %d rays hit", int(hits.sum()), len(hits))
        return int(hits.sum())

    probes = [
        (args.width // 2, args.height // 2),
        (0, args.height // 2),
        (args.width - 1, args.height // 2),
        (args.width // 2, 0),
        (args.width // 2, args.height - 1),
    ]
    hit_count = 0
    for x, y in probes:
        direction = camera.get_ray_direction(x, y)
        result = marcher.cast_ray(origin, direction, refine, args.max_len)
        if result.hit:
            hit_count += 1
            logger.info(
                "Pixel (%d, %d): hit %s %d at (%.4f, %.4f, %.4f)",
                x,
                y,
                result.obj.kind.name.lower(),
                result.obj.object_id,
                *result.point,
            )
        else:
            logger.info("Pixel (%d, %d): no hit within %g", x, y, args.max_len)
    return hit_count


def main() -> int:
    """Main entry point."""
    args = parse_args()

    from raymarch.logging_config import setup_logging

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    ti.init(arch=ti.cpu)

    try:
        cast_rays(args)
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        logger.error("Error: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
