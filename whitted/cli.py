"""
Command line entry point: render a scene file to an image.

    whitted scenes/spheres.scene --threads 8 --output spheres.png
"""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import Optional, Sequence

from .renderer import Renderer, RenderSettings
from .scene_parser import SceneParseError, load_scene

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "WARNING") -> logging.Logger:
    """Attach a console handler to the package logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

    Returns:
        The configured package logger
    """
    package_logger = logging.getLogger("whitted")
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if not package_logger.handlers:
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(console_handler)

    return package_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='whitted',
        description='Whitted - a recursive ray tracer for text scene files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  whitted scene.txt
  whitted scene.txt --output render.png --threads 8
  whitted scene.txt --samples 3 3 --log-level INFO
        '''
    )
    parser.add_argument('scene', help='Scene description file')
    parser.add_argument('--output', type=str, default=None,
                        help='Output filename (default: name from the image directive)')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--samples', type=int, nargs=2, metavar=('X', 'Y'), default=None,
                        help='Override the supersampling grid per pixel')
    parser.add_argument('--seed', type=int, default=None, help='Seed for sample jitter')
    parser.add_argument('--log-level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        help='Log level (default: WARNING)')
    parser.add_argument('--quiet', action='store_true', help='Do not print the progress bar')
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        scene = load_scene(args.scene)
    except OSError as e:
        print(f"error reading from file {args.scene}: {e}", file=sys.stderr)
        return 1
    except SceneParseError as e:
        print(f"error parsing {args.scene}: {e}", file=sys.stderr)
        return 1

    if args.samples is not None:
        scene.xsample = max(args.samples[0], 1)
        scene.ysample = max(args.samples[1], 1)

    settings = RenderSettings(num_threads=args.threads, seed=args.seed)
    renderer = Renderer(settings)

    if not args.quiet:
        last_progress = [-1]

        def progress_callback(progress: float):
            pct = int(progress * 100)
            if pct > last_progress[0]:
                last_progress[0] = pct
                bar_len = 40
                filled = int(bar_len * progress)
                bar = '█' * filled + '░' * (bar_len - filled)
                print(f'\rray tracing... [{bar}] {pct}%', end='', flush=True)

        renderer.set_progress_callback(progress_callback)

    start_time = time.time()
    image = renderer.render(scene)
    elapsed = time.time() - start_time

    if not args.quiet:
        print(f"\rray tracing completed in {elapsed:.2f} seconds." + " " * 30)
    logger.info("Rendered %s in %.2f s", args.scene, elapsed)

    output_path = Path(args.output if args.output else scene.image_name)
    if output_path.parent != Path('.'):
        output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        renderer.save_image(image, str(output_path), scene.exposure)
    except (OSError, ValueError) as e:
        print(f"error writing {output_path}: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
