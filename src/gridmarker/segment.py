"""Colour segmentation: turn a BGR photo into candidate marker patches.

Pipeline::

    BGR → HSV → 3×3 blur → per-colour inRange → open/close → contours

Every external contour whose area lies within the configured fraction of
the image becomes one :class:`Patch`.  Ids are assigned densely in
discovery order (palette order, then contour order).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import cv2
import numpy as np

from .constants import COLOR_BANDS
from .params import SegmentationParams

logger = logging.getLogger(__name__)

# (x, y, w, h) as returned by cv2.boundingRect.
Box = tuple[int, int, int, int]


@dataclass(frozen=True)
class Patch:
    """A single coloured region that may be one cell of the marker."""

    color: str
    box: Box
    center: tuple[float, float]
    area: float
    id: int

    @property
    def x_min(self) -> int:
        return self.box[0]

    @property
    def y_min(self) -> int:
        return self.box[1]

    @property
    def x_max(self) -> int:
        return self.box[0] + self.box[2]

    @property
    def y_max(self) -> int:
        return self.box[1] + self.box[3]

    def corners(self) -> list[tuple[float, float]]:
        """Box corners clockwise from top-left."""
        return [
            (self.x_min, self.y_min),
            (self.x_max, self.y_min),
            (self.x_max, self.y_max),
            (self.x_min, self.y_max),
        ]


def resize_to_fit(
    image: np.ndarray,
    max_width: int = 640,
    max_height: int = 480,
) -> np.ndarray:
    """Uniformly downscale *image* so it fits in ``max_width × max_height``.

    Images that already fit are returned unchanged (never upscaled).
    """
    h, w = image.shape[:2]
    if w <= max_width and h <= max_height:
        return image
    scale = min(max_width / w, max_height / h)
    return cv2.resize(image, None, fx=scale, fy=scale, interpolation=cv2.INTER_AREA)


def color_masks(bgr: np.ndarray) -> dict[str, np.ndarray]:
    """Return a cleaned binary mask per palette colour."""
    hsv = cv2.cvtColor(bgr, cv2.COLOR_BGR2HSV)
    hsv = cv2.GaussianBlur(hsv, (3, 3), 0)
    kernel = cv2.getStructuringElement(cv2.MORPH_ELLIPSE, (3, 3))

    masks: dict[str, np.ndarray] = {}
    for color, bands in COLOR_BANDS.items():
        mask = np.zeros(hsv.shape[:2], dtype=np.uint8)
        for low, high in bands:
            band = cv2.inRange(
                hsv, np.array(low, dtype=np.uint8), np.array(high, dtype=np.uint8)
            )
            mask = cv2.bitwise_or(mask, band)
        mask = cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel)
        mask = cv2.morphologyEx(mask, cv2.MORPH_CLOSE, kernel)
        masks[color] = mask
    return masks


def segment_color_patches(
    bgr: np.ndarray,
    params: SegmentationParams | None = None,
) -> list[Patch]:
    """Extract candidate patches from a BGR image.

    Args:
        bgr: 3-channel BGR image.
        params: Area filter settings.  Defaults to :class:`SegmentationParams`.

    Returns:
        Patches with ids ``0..N-1`` in discovery order.
    """
    if bgr.size == 0 or bgr.ndim != 3:
        raise ValueError("segment_color_patches expects a non-empty BGR image")
    params = params or SegmentationParams()

    img_area = float(bgr.shape[0] * bgr.shape[1])
    min_area = params.min_area_ratio * img_area
    max_area = params.max_area_ratio * img_area

    patches: list[Patch] = []
    for color, mask in color_masks(bgr).items():
        contours, _ = cv2.findContours(
            mask, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE
        )
        for cnt in contours:
            area = cv2.contourArea(cnt)
            if area < min_area or area > max_area:
                continue
            m = cv2.moments(cnt)
            if m["m00"] <= 0:
                continue
            x, y, w, h = cv2.boundingRect(cnt)
            patches.append(
                Patch(
                    color=color,
                    box=(int(x), int(y), int(w), int(h)),
                    center=(m["m10"] / m["m00"], m["m01"] / m["m00"]),
                    area=float(area),
                    id=len(patches),
                )
            )

    logger.debug(
        "Segmented %d patches (area filter %.0f..%.0f px)",
        len(patches), min_area, max_area,
    )
    return patches
