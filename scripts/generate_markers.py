"""Generate synthetic marker photos for threshold tuning and smoke tests.

Renders positive samples (regular 3×3 grids at random scale, rotation and
position) and negative samples (too few patches, scattered blobs) and
writes an ``expected.csv`` with columns ``filename, expected``.

Usage:
    python -m scripts.generate_markers --output samples/
    python -m scripts.generate_markers --output samples/ --count 50 --seed 7
"""

from __future__ import annotations

import argparse
import csv
from pathlib import Path

import cv2
import numpy as np

from gridmarker.synth import render_marker

CANVAS_W, CANVAS_H = 640, 480


def _positive(rng: np.random.Generator) -> np.ndarray:
    """Regular grid filling roughly half the frame or more."""
    spacing = float(rng.uniform(110, 140))
    cell = int(spacing * rng.uniform(0.65, 0.85))
    angle = float(rng.uniform(-30, 30))
    cx = CANVAS_W / 2 + rng.uniform(-20, 20)
    cy = CANVAS_H / 2 + rng.uniform(-20, 20)

    a = np.radians(angle)
    ux = np.array([np.cos(a), np.sin(a)]) * spacing
    uy = np.array([-np.sin(a), np.cos(a)]) * spacing
    centers = [
        tuple(np.array([cx, cy]) + (c - 1) * ux + (r - 1) * uy)
        for r in range(3)
        for c in range(3)
    ]
    return render_marker((CANVAS_W, CANVAS_H), centers, cell=cell, angle_deg=angle)


def _few_patches(rng: np.random.Generator) -> np.ndarray:
    centers = [
        (float(rng.uniform(60, CANVAS_W - 60)), float(rng.uniform(60, CANVAS_H - 60)))
        for _ in range(2)
    ]
    return render_marker((CANVAS_W, CANVAS_H), centers, cell=50)


def _scattered(rng: np.random.Generator) -> np.ndarray:
    """Nine blobs at random positions: rarely a regular grid."""
    centers = [
        (float(rng.uniform(40, CANVAS_W - 40)), float(rng.uniform(40, CANVAS_H - 40)))
        for _ in range(9)
    ]
    return render_marker((CANVAS_W, CANVAS_H), centers, cell=int(rng.integers(20, 40)))


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--output", type=Path, default=Path("samples"))
    parser.add_argument("--count", type=int, default=20, help="Positives to render.")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    rng = np.random.default_rng(args.seed)
    args.output.mkdir(parents=True, exist_ok=True)

    rows: list[tuple[str, str]] = []
    for i in range(args.count):
        name = f"pos_{i:03d}.png"
        cv2.imwrite(str(args.output / name), _positive(rng))
        rows.append((name, "pass"))
    for i in range(max(1, args.count // 4)):
        name = f"few_{i:03d}.png"
        cv2.imwrite(str(args.output / name), _few_patches(rng))
        rows.append((name, "fail"))
        name = f"scatter_{i:03d}.png"
        cv2.imwrite(str(args.output / name), _scattered(rng))
        rows.append((name, "fail"))

    with open(args.output / "expected.csv", "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(["filename", "expected"])
        writer.writerows(rows)

    print(f"Wrote {len(rows)} images to {args.output.resolve()}")


if __name__ == "__main__":
    main()
