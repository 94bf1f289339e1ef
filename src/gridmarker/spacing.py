"""Spacing regularity of an assigned grid.

Within every row the three patches are sorted by ``x'`` and the two gaps
are divided by their mean; the six resulting ratios give ``cvx``.  Columns
are treated the same way along ``y'`` to give ``cvy``.  A real marker has
evenly spaced cells, so both coefficients of variation stay small, while
an accidental arrangement of coloured blobs rarely does.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from .assign import GridAssignment
from .constants import GRID_SIZE, FailureReason
from .params import GridParams
from .segment import Patch

logger = logging.getLogger(__name__)

# Gaps at or below this (normalised pixels) count as non-positive.
MIN_GAP: float = 1e-9


@dataclass(frozen=True)
class SpacingMetrics:
    """Coefficients of variation of the row and column gaps."""

    cvx: float
    cvy: float
    ok: bool


def _gap_ratios(line: list[Patch], points: np.ndarray, axis: int) -> list[float] | None:
    """Mean-normalised consecutive gaps along *axis*, or ``None`` if degenerate."""
    coords = sorted(float(points[p.id, axis]) for p in line)
    gaps = np.diff(coords)
    if np.any(gaps <= MIN_GAP):
        return None
    mean = float(gaps.mean())
    if mean <= 0:
        return None
    return [float(g) / mean for g in gaps]


def coefficient_of_variation(values: list[float]) -> float | None:
    """Sample standard deviation over mean, or ``None`` for a non-positive mean."""
    arr = np.asarray(values, dtype=np.float64)
    mean = float(arr.mean())
    if mean <= 0:
        return None
    return float(arr.std(ddof=1)) / mean


def measure_spacing(
    grid: GridAssignment,
    points: np.ndarray,
    params: GridParams,
) -> SpacingMetrics | FailureReason:
    """Compute ``cvx``/``cvy`` for *grid* and gate them on the hard thresholds.

    Returns:
        :class:`SpacingMetrics`, or ``FailureReason.SPACING`` when any gap
        or mean is non-positive.
    """
    dx: list[float] = []
    for r in range(GRID_SIZE):
        ratios = _gap_ratios(grid.row(r), points, axis=0)
        if ratios is None:
            logger.debug("Row %d has a non-positive x' gap", r)
            return FailureReason.SPACING
        dx.extend(ratios)

    dy: list[float] = []
    for c in range(GRID_SIZE):
        ratios = _gap_ratios(grid.column(c), points, axis=1)
        if ratios is None:
            logger.debug("Column %d has a non-positive y' gap", c)
            return FailureReason.SPACING
        dy.extend(ratios)

    cvx = coefficient_of_variation(dx)
    cvy = coefficient_of_variation(dy)
    if cvx is None or cvy is None:
        return FailureReason.SPACING

    ok = cvx <= params.cvx_thresh and cvy <= params.cvy_thresh
    logger.debug("Spacing cvx=%.3f cvy=%.3f ok=%s", cvx, cvy, ok)
    return SpacingMetrics(cvx=cvx, cvy=cvy, ok=ok)
