"""Coverage of the frame by the assigned grid.

The four corners of all nine cell boxes (36 points) are wrapped in a convex
hull.  Its area relative to the whole image is the reported coverage; the
ratio to the grid's own bounding box is kept for diagnostics.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import cv2
import numpy as np

from .assign import GridAssignment
from .constants import FailureReason


@dataclass
class CoverageResult:
    """Hull and area measurements for one assigned grid."""

    hull_area: float = 0.0
    bbox_area: float = 0.0
    image_area: float = 0.0
    ratio: float = 0.0  # hull / image
    ratio_bbox: float = 0.0  # hull / grid bounding box
    hull: np.ndarray = field(default_factory=lambda: np.empty((0, 2), np.float32))


def compute_coverage(
    grid: GridAssignment, image_size: tuple[int, int]
) -> CoverageResult | FailureReason:
    """Measure how much of the image the grid's convex hull covers.

    Args:
        grid: Assigned 3×3 grid.
        image_size: ``(width, height)`` of the analysed image.

    Returns:
        :class:`CoverageResult`, or ``SMALL_HULL`` when the hull has fewer
        than three vertices, or ``BAD_BBOX`` when the grid's bounding box
        or hull has no area.
    """
    width, height = image_size
    if width <= 0 or height <= 0:
        raise ValueError(f"image_size must be positive, got {image_size}")

    corners = np.array(
        [corner for patch in grid for corner in patch.corners()], dtype=np.float32
    )
    hull = cv2.convexHull(corners).reshape(-1, 2)
    if len(hull) < 3:
        return FailureReason.SMALL_HULL

    x_min, y_min = corners.min(axis=0)
    x_max, y_max = corners.max(axis=0)
    bbox_area = float(max(0.0, x_max - x_min)) * float(max(0.0, y_max - y_min))
    hull_area = abs(float(cv2.contourArea(hull)))
    if bbox_area <= 0.0 or hull_area <= 0.0:
        return FailureReason.BAD_BBOX

    image_area = float(width) * float(height)
    return CoverageResult(
        hull_area=hull_area,
        bbox_area=bbox_area,
        image_area=image_area,
        ratio=hull_area / image_area,
        ratio_bbox=hull_area / bbox_area,
        hull=hull,
    )
