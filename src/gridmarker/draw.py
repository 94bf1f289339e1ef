"""Debug drawing helpers.  Every function returns an annotated copy."""

from __future__ import annotations

from pathlib import Path

import cv2
import numpy as np

from .assign import GridAssignment
from .coverage import CoverageResult
from .segment import Patch

_GREEN = (0, 255, 0)
_RED = (0, 0, 255)
_WHITE = (255, 255, 255)
_YELLOW = (0, 255, 255)


def draw_patches(image: np.ndarray, patches: list[Patch]) -> np.ndarray:
    """Draw every candidate patch box, centroid and ``id:color`` label."""
    annotated = image.copy()
    for p in patches:
        cv2.rectangle(annotated, (p.x_min, p.y_min), (p.x_max, p.y_max), _GREEN, 2)
        center = (int(round(p.center[0])), int(round(p.center[1])))
        cv2.circle(annotated, center, 3, _RED, cv2.FILLED)
        cv2.putText(
            annotated,
            f"{p.id}:{p.color}",
            (p.x_min, p.y_min - 5),
            cv2.FONT_HERSHEY_SIMPLEX,
            0.4,
            _GREEN,
            1,
        )
    return annotated


def draw_grid(image: np.ndarray, grid: GridAssignment) -> np.ndarray:
    """Draw the assigned cells labelled ``r<row>c<col>``."""
    annotated = image.copy()
    for r, row in enumerate(grid.cells):
        for c, p in enumerate(row):
            cv2.rectangle(annotated, (p.x_min, p.y_min), (p.x_max, p.y_max), _GREEN, 2)
            center = (int(round(p.center[0])), int(round(p.center[1])))
            cv2.circle(annotated, center, 3, _RED, cv2.FILLED)
            cv2.putText(
                annotated,
                f"r{r}c{c}",
                (center[0] + 4, center[1] - 4),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.4,
                _WHITE,
                1,
            )
    return annotated


def draw_hull(image: np.ndarray, coverage: CoverageResult) -> np.ndarray:
    """Draw the coverage hull as a closed polyline."""
    annotated = image.copy()
    if len(coverage.hull) >= 3:
        pts = np.round(coverage.hull).astype(np.int32).reshape(-1, 1, 2)
        cv2.polylines(annotated, [pts], True, _YELLOW, 2)
    return annotated


def write_debug_images(
    output_dir: Path,
    stem: str,
    image: np.ndarray,
    patches: list[Patch],
    grid: GridAssignment | None = None,
    coverage: CoverageResult | None = None,
) -> list[Path]:
    """Save ``<stem>_patches.png`` and, when available, grid and hull overlays."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    def _save(suffix: str, img: np.ndarray) -> None:
        path = output_dir / f"{stem}_{suffix}.png"
        cv2.imwrite(str(path), img)
        written.append(path)

    _save("patches", draw_patches(image, patches))
    if grid is not None:
        _save("grid", draw_grid(image, grid))
    if coverage is not None:
        _save("hull", draw_hull(image, coverage))
    return written
