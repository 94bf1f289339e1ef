"""Shared constants for patch segmentation and grid validation."""

from __future__ import annotations

from enum import Enum

# Marker layout: 3 × 3 coloured patches.
#
#   (0,0) (0,1) (0,2)
#   (1,0) (1,1) (1,2)
#   (2,0) (2,1) (2,2)
#
GRID_SIZE: int = 3
NUM_CELLS: int = GRID_SIZE * GRID_SIZE

# Fewer candidate patches than this cannot define a frame.
MIN_PATCHES: int = 3

# HSV bands per palette colour, OpenCV convention (H in [0, 180]).
# Red wraps around hue 0 and therefore needs two bands.
HsvBand = tuple[tuple[int, int, int], tuple[int, int, int]]

COLOR_BANDS: dict[str, list[HsvBand]] = {
    "red": [((0, 80, 60), (10, 255, 255)), ((170, 80, 60), (180, 255, 255))],
    "green": [((35, 60, 60), (85, 255, 255))],
    "blue": [((90, 60, 60), (130, 255, 255))],
    "yellow": [((20, 60, 60), (35, 255, 255))],
    "cyan": [((80, 60, 60), (95, 255, 255))],
    "magenta": [((140, 60, 60), (170, 255, 255))],
}

# BGR values that fall inside exactly one band above.
PALETTE_BGR: dict[str, tuple[int, int, int]] = {
    "red": (0, 0, 255),
    "green": (0, 255, 0),
    "blue": (255, 0, 0),
    "yellow": (0, 255, 255),
    "magenta": (255, 0, 255),
}


class FailureReason(Enum):
    """Why an image was rejected.  The value is the short code printed by the CLI."""

    NONE = "OK"
    FEW_PATCHES = "FEW_PATCHES"
    ASSIGN_GRID = "GRID_ASSIGNMENT_FAILED"
    SPACING = "SPACING_VALIDATION_FAILED"
    SMALL_HULL = "HULL_TOO_SMALL"
    BAD_BBOX = "INVALID_BBOX"
    LOW_COVERAGE = "LOW_COVERAGE"

    @property
    def code(self) -> str:
        return self.value
