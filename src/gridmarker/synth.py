"""Synthetic markers for tests, demos and threshold tuning.

Two levels are provided:

* :func:`make_patches` / :func:`rotate_patches` build :class:`Patch` lists
  directly, bypassing segmentation.
* :func:`render_marker` paints coloured squares on a canvas that
  :func:`~gridmarker.segment.segment_color_patches` can read back.
"""

from __future__ import annotations

import itertools
import math
from typing import Sequence

import cv2
import numpy as np

from .constants import PALETTE_BGR
from .segment import Patch

_PALETTE = list(PALETTE_BGR)


def grid_centers(
    xs: Sequence[float], ys: Sequence[float]
) -> list[tuple[float, float]]:
    """Row-major centres of the product grid ``ys × xs``."""
    return [(float(x), float(y)) for y in ys for x in xs]


def make_patches(
    centers: Sequence[tuple[float, float]],
    size: tuple[int, int] = (80, 80),
    colors: Sequence[str] | None = None,
) -> list[Patch]:
    """Axis-aligned ``size`` boxes centred on *centers*, ids in list order."""
    w, h = size
    colors = list(colors) if colors is not None else _PALETTE
    patches = []
    for i, (cx, cy) in enumerate(centers):
        x = int(round(cx - w / 2))
        y = int(round(cy - h / 2))
        patches.append(
            Patch(
                color=colors[i % len(colors)],
                box=(x, y, w, h),
                center=(float(cx), float(cy)),
                area=float(w * h),
                id=i,
            )
        )
    return patches


def _rotate(
    pts: np.ndarray, angle_deg: float, pivot: tuple[float, float]
) -> np.ndarray:
    a = math.radians(angle_deg)
    rot = np.array([[math.cos(a), -math.sin(a)], [math.sin(a), math.cos(a)]])
    pivot_arr = np.asarray(pivot, dtype=np.float64)
    return (pts - pivot_arr) @ rot.T + pivot_arr


def rotate_patches(
    patches: Sequence[Patch],
    angle_deg: float,
    pivot: tuple[float, float],
) -> list[Patch]:
    """Rotate centroids and boxes about *pivot*.

    Each new box is the integer axis-aligned bounding box of the rotated
    corners, as segmentation would report it.
    """
    rotated = []
    for p in patches:
        center = _rotate(np.array([p.center], dtype=np.float64), angle_deg, pivot)[0]
        corners = _rotate(np.array(p.corners(), dtype=np.float64), angle_deg, pivot)
        # Round first so 90° multiples stay exact despite cos/sin noise.
        corners = np.round(corners, 6)
        x0, y0 = np.floor(corners.min(axis=0)).astype(int)
        x1, y1 = np.ceil(corners.max(axis=0)).astype(int)
        rotated.append(
            Patch(
                color=p.color,
                box=(int(x0), int(y0), int(x1 - x0), int(y1 - y0)),
                center=(float(center[0]), float(center[1])),
                area=p.area,
                id=p.id,
            )
        )
    return rotated


def render_marker(
    image_size: tuple[int, int],
    centers: Sequence[tuple[float, float]],
    cell: int = 60,
    angle_deg: float = 0.0,
    background: tuple[int, int, int] = (255, 255, 255),
    colors: Sequence[str] | None = None,
) -> np.ndarray:
    """Paint one filled square of side *cell* per centre on a BGR canvas.

    Squares are rotated by *angle_deg* about their own centre, and colours
    cycle through the palette unless *colors* is given.
    """
    width, height = image_size
    canvas = np.full((height, width, 3), background, dtype=np.uint8)
    names = itertools.cycle(colors if colors is not None else _PALETTE)
    half = cell / 2.0
    square = np.array(
        [[-half, -half], [half, -half], [half, half], [-half, half]], dtype=np.float64
    )
    for (cx, cy), name in zip(centers, names):
        pts = _rotate(square, angle_deg, (0.0, 0.0)) + (cx, cy)
        cv2.fillConvexPoly(canvas, np.round(pts).astype(np.int32), PALETTE_BGR[name])
    return canvas
