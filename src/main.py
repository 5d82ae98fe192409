# main.py
"""
Command-line entry point: build a demo scene, render it with the tiled CPU
path tracer and write the image.

Example:
    python src/main.py --scene final --width 400 --aspect-ratio 1.7778 \
        --quality balanced --workers 8 --output image.ppm
"""
import argparse
import logging
import os
import random
import sys
from typing import List, Optional

from core.vector import Vector3, Color
from core.utils import make_rng, random_double
from camera.camera import Camera
from geometry.world import HittableList
from geometry.sphere import Sphere
from materials.lambertian import Lambertian
from materials.metal import Metal
from materials.dielectric import Dielectric
from renderer.image import ImageWriteError
from renderer.scheduler import BACKENDS, TiledRenderer

logger = logging.getLogger(__name__)

# Samples per pixel and bounce limits; explicit flags override these.
QUALITY_LEVELS = {
    "preview": {"samples": 4, "bounces": 8},
    "balanced": {"samples": 32, "bounces": 20},
    "final": {"samples": 500, "bounces": 50},
}

SCENES = ("final", "three", "empty")


def create_world(name: str = "final", rng=random) -> HittableList:
    """
    Build one of the demo scenes. "final" scatters small random spheres
    around three large ones, "three" keeps only the ground and the three
    large spheres, "empty" has no geometry at all.
    """
    if name not in SCENES:
        raise ValueError(f"Unknown scene {name!r}; expected one of {SCENES}")

    world = HittableList()
    if name == "empty":
        return world

    world.add(Sphere(Vector3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))

    if name == "final":
        for a in range(-11, 11):
            for b in range(-11, 11):
                choose_mat = rng.random()
                center = Vector3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())
                if (center - Vector3(4, 0.2, 0)).length() <= 0.9:
                    continue
                if choose_mat < 0.8:
                    # diffuse
                    albedo = Color(rng.random(), rng.random(), rng.random()) * \
                        Color(rng.random(), rng.random(), rng.random())
                    material = Lambertian(albedo)
                elif choose_mat < 0.95:
                    # metal
                    albedo = Color(random_double(rng, 0.5, 1),
                                   random_double(rng, 0.5, 1),
                                   random_double(rng, 0.5, 1))
                    material = Metal(albedo, random_double(rng, 0, 0.5))
                else:
                    # glass
                    material = Dielectric(1.5)
                world.add(Sphere(center, 0.2, material))

    world.add(Sphere(Vector3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Vector3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Vector3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    logger.info("Created scene %r with %d objects", name, len(world))
    return world


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the tiled CPU path tracer.",
    )
    parser.add_argument("--scene", choices=SCENES, default="final",
                        help="Demo scene to render (default: final)")
    parser.add_argument("--width", type=int, default=400,
                        help="Image width in pixels (default: 400)")
    parser.add_argument("--aspect-ratio", type=float, default=16.0 / 9.0,
                        help="Width over height (default: 16/9)")
    parser.add_argument("--quality", choices=sorted(QUALITY_LEVELS), default="balanced",
                        help="Quality preset for samples and bounces (default: balanced)")
    parser.add_argument("--samples", type=int, default=None,
                        help="Samples per pixel (overrides --quality)")
    parser.add_argument("--max-depth", type=int, default=None,
                        help="Maximum ray bounces (overrides --quality)")
    parser.add_argument("--vfov", type=float, default=20.0,
                        help="Vertical field of view in degrees (default: 20)")
    parser.add_argument("--lookfrom", type=float, nargs=3, default=[13.0, 2.0, 3.0],
                        metavar=("X", "Y", "Z"))
    parser.add_argument("--lookat", type=float, nargs=3, default=[0.0, 0.0, 0.0],
                        metavar=("X", "Y", "Z"))
    parser.add_argument("--vup", type=float, nargs=3, default=[0.0, 1.0, 0.0],
                        metavar=("X", "Y", "Z"))
    parser.add_argument("--defocus-angle", type=float, default=0.6,
                        help="Lens cone angle in degrees, 0 disables depth of field (default: 0.6)")
    parser.add_argument("--focus-dist", type=float, default=10.0,
                        help="Distance to the plane of perfect focus (default: 10)")
    parser.add_argument("--workers", type=int, default=os.cpu_count() or 1,
                        help="Number of render workers (default: CPU count)")
    parser.add_argument("--backend", choices=BACKENDS, default="process",
                        help="Run workers as processes or threads (default: process)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for scene generation and sampling")
    parser.add_argument("--output", type=str, default="image.ppm",
                        help="Output file; .ppm is written directly, other formats via Pillow")
    parser.add_argument("--binary", action="store_true",
                        help="Write binary (P6) instead of text (P3) PPM")
    parser.add_argument("--verbose", action="store_true",
                        help="Log per-row progress")
    return parser.parse_args(argv)


def build_camera(args: argparse.Namespace) -> Camera:
    quality = QUALITY_LEVELS[args.quality]
    return Camera(
        aspect_ratio=args.aspect_ratio,
        image_width=args.width,
        samples_per_pixel=args.samples if args.samples is not None else quality["samples"],
        max_depth=args.max_depth if args.max_depth is not None else quality["bounces"],
        vfov=args.vfov,
        lookfrom=Vector3(*args.lookfrom),
        lookat=Vector3(*args.lookat),
        vup=Vector3(*args.vup),
        defocus_angle=args.defocus_angle,
        focus_dist=args.focus_dist,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    world = create_world(args.scene, make_rng(args.seed))
    camera = build_camera(args)
    renderer = TiledRenderer(camera, worker_count=max(1, args.workers),
                             backend=args.backend, seed=args.seed)
    try:
        renderer.render_to_file(world, args.output, binary=args.binary)
    except ImageWriteError as e:
        logger.error("%s", e)
        return 1
    return 0


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
