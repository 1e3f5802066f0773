#!/usr/bin/env python
import argparse
import logging
import time
import numpy as np
from entropymap.codec import decompose
from entropymap.entropy import entropy_plane, entropy_plane_naive, RADIUS_X, RADIUS_Y
from entropymap.utils import load_image

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Compare the naive and fast entropy implementations on an image.")
    parser.add_argument('--input', required=True, help="Path to the input image")
    parser.add_argument('--radius_x', type=int, default=RADIUS_X, help=f"Half-width of the entropy window (default: {RADIUS_X})")
    parser.add_argument('--radius_y', type=int, default=RADIUS_Y, help=f"Half-height of the entropy window (default: {RADIUS_Y})")
    return parser.parse_args()


def timed(fn, plane, radius_x, radius_y):
    start = time.perf_counter()
    result = fn(plane, radius_x, radius_y)
    return result, time.perf_counter() - start


def main():
    args = parse_args()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    image = load_image(args.input)
    worst = 0
    for channel, plane in zip("RGB" if not image.is_grayscale else "I", decompose(image)):
        naive, naive_time = timed(entropy_plane_naive, plane, args.radius_x, args.radius_y)
        fast, fast_time = timed(entropy_plane, plane, args.radius_x, args.radius_y)

        diff = np.abs(naive.array.astype(int) - fast.array.astype(int))
        max_diff = int(diff.max()) if diff.size else 0
        worst = max(worst, max_diff)
        logger.info("channel %s: max difference %d, %d pixels differ, naive %.3fs, fast %.3fs (%.1fx)",
                    channel, max_diff, int(np.count_nonzero(diff)), naive_time, fast_time,
                    naive_time / fast_time if fast_time > 0 else float('inf'))

    return 0 if worst <= 1 else 1

if __name__ == "__main__":
    raise SystemExit(main())
