#!/usr/bin/env python
import os
import argparse
import logging
from entropymap.pipeline import compute_entropy_image, DEFAULT_WORKERS
from entropymap.entropy import ENTROPY_METHODS, RADIUS_X, RADIUS_Y, CONTRAST_EXPONENT
from entropymap.utils import load_image, save_image, get_image_pairs, plot_entropy_image, plot_entropy_histogram

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Compute the local entropy map of an image or a folder of images.")
    parser.add_argument('--input', required=True, help="Path to an image file, or a folder of images")
    parser.add_argument('--output', required=True, help="Output image path, or output folder when --input is a folder")
    parser.add_argument('--radius_x', type=int, default=RADIUS_X, help=f"Half-width of the entropy window (default: {RADIUS_X})")
    parser.add_argument('--radius_y', type=int, default=RADIUS_Y, help=f"Half-height of the entropy window (default: {RADIUS_Y})")
    parser.add_argument('--method', choices=sorted(ENTROPY_METHODS), default="fast", help="Entropy implementation (default: fast)")
    parser.add_argument('--exponent', type=float, default=CONTRAST_EXPONENT, help=f"Contrast exponent applied to the proportional entropy (default: {CONTRAST_EXPONENT})")
    parser.add_argument('--workers', type=int, default=DEFAULT_WORKERS, help=f"Threads used for color images (default: {DEFAULT_WORKERS})")
    parser.add_argument('--plot', action='store_true', help="Show each image next to its entropy map")
    parser.add_argument('--histogram', action='store_true', help="Show the distribution of entropy scores for each image")
    parser.add_argument('--verbose', action='store_true', help="Log per-plane timings")
    args = parser.parse_args(argv)

    if args.workers < 1:
        parser.error(f"--workers must be at least 1, got {args.workers}")
    if args.radius_x < 0 or args.radius_y < 0:
        parser.error(f"window radii must be non-negative, got ({args.radius_x}, {args.radius_y})")
    return args


def main(argv=None):
    # Parse command line arguments.
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    pairs = get_image_pairs(args.input, args.output)
    failures = 0
    for image_path, entropy_path in pairs:
        logger.info("Loading %s", image_path)
        try:
            image = load_image(image_path)
        except ValueError as e:
            logger.error("Failed to load image: %s", e)
            failures += 1
            continue

        entropy_image = compute_entropy_image(image,
                                              radius_x=args.radius_x,
                                              radius_y=args.radius_y,
                                              method=args.method,
                                              exponent=args.exponent,
                                              max_workers=args.workers)

        try:
            save_image(entropy_image, entropy_path)
        except ValueError as e:
            logger.error("Failed to save entropy image: %s", e)
            failures += 1
            continue
        logger.info("Entropy image saved to %s", entropy_path)

        name = os.path.basename(image_path)
        if args.plot:
            plot_entropy_image(image, entropy_image, title=name)
        if args.histogram:
            plot_entropy_histogram(entropy_image, title=f"{name} entropy scores")

    if failures:
        logger.warning("%d of %d images failed", failures, len(pairs))
    return 1 if failures else 0

if __name__ == "__main__":
    raise SystemExit(main())
