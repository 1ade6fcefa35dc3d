#!/usr/bin/env python3
"""
prismtrace - A Python Ray Tracing Renderer

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
from pathlib import Path

from prismtrace.renderer import Renderer, RenderSettings
from prismtrace.scene_parser import SceneParseError, SceneParser
from prismtrace.scenes import SCENES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='prismtrace - A Python Ray Tracing Renderer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --output render.png
  python main.py --width 200 --height 100 --samples 20 --seed 1 --output small.png
  python main.py --scene-file scene.json --output scene.png
        '''
    )

    parser.add_argument('--width', type=int, default=None, help='Image width (default: 1000)')
    parser.add_argument('--height', type=int, default=None, help='Image height (default: 500)')
    parser.add_argument('--samples', type=int, default=None, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=None, help='Max ray depth (default: 50)')
    parser.add_argument('--threads', type=int, default=None, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Random seed for reproducible output')
    parser.add_argument('--output', type=str, default='image.png', help='Output filename')
    parser.add_argument('--scene', type=str, default='demo', choices=sorted(SCENES),
                        help='Built-in scene to render (default: demo)')
    parser.add_argument('--scene-file', type=str, default=None,
                        help='Load the scene from a JSON or YAML file instead')
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    return parser


def resolve_settings(args: argparse.Namespace, base: RenderSettings) -> RenderSettings:
    """Overlay command line options on top of base settings."""
    return RenderSettings(
        width=args.width if args.width is not None else base.width,
        height=args.height if args.height is not None else base.height,
        samples_per_pixel=args.samples if args.samples is not None else base.samples_per_pixel,
        max_depth=args.depth if args.depth is not None else base.max_depth,
        num_threads=args.threads if args.threads is not None else base.num_threads,
        seed=args.seed if args.seed is not None else base.seed
    )


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    try:
        if args.scene_file:
            scene_parser = SceneParser()
            world, camera, file_settings = scene_parser.parse_file(args.scene_file)
            settings = resolve_settings(args, file_settings)
            if settings.aspect_ratio != file_settings.aspect_ratio:
                camera = scene_parser.build_camera(settings.aspect_ratio)
        else:
            settings = resolve_settings(args, RenderSettings(width=1000, height=500))
            world, camera = SCENES[args.scene](aspect_ratio=settings.aspect_ratio)
    except (SceneParseError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Objects in scene: {len(world)}")

    renderer = Renderer(settings)
    image = renderer.render(world, camera)
    stats = renderer.stats

    print(f"Total Time {stats.elapsed:.3f}")
    print(f"Total Rays {stats.total_rays}")
    print(f"Speed {stats.rays_per_second:.0f} Rays per second")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    renderer.save_image(image, str(output_path))

    return 0


if __name__ == '__main__':
    sys.exit(main())
