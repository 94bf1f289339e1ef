"""cProfile the full scan pipeline on one image and print the hot spots."""

import argparse
import cProfile
import pstats
import sys
from pathlib import Path

from gridmarker.pipeline import process_image

PROF_OUT = Path("profile.prof")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("image", type=Path)
    parser.add_argument("--reps", type=int, default=20)
    args = parser.parse_args()

    # Warm-up so timing reflects steady state
    process_image(args.image)

    pr = cProfile.Profile()
    pr.enable()
    for _ in range(args.reps):
        process_image(args.image)
    pr.disable()

    pr.dump_stats(str(PROF_OUT))
    print(f"Profile saved → {PROF_OUT}")

    stats = pstats.Stats(str(PROF_OUT), stream=sys.stdout)
    stats.strip_dirs()
    stats.sort_stats("cumulative")
    stats.print_stats(30)


if __name__ == "__main__":
    main()
