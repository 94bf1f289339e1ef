"""Greedy assignment of patches to the nine grid cells.

Every ``(row, col, patch)`` triple is scored by the L1 distance from the
patch to the intersection of the row and column centres, discounted when
the patch's own clustering agrees with the cell::

    d = (|x' - colX[c]| + |y' - rowY[r]|) / (1 + 0.25 * bonus)

Triples are committed globally cheapest first, skipping filled cells and
used patches.  This approximates a minimum-cost bipartite matching and
stops two cells competing for one patch while a third cell goes empty.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

import numpy as np

from .cluster import AxisClusters
from .constants import GRID_SIZE
from .segment import Patch

AGREEMENT_WEIGHT: float = 0.25


@dataclass(frozen=True)
class GridAssignment:
    """A full 3×3 cell → patch mapping (no cell empty, no patch reused)."""

    cells: tuple[tuple[Patch, ...], ...]

    def __getitem__(self, rc: tuple[int, int]) -> Patch:
        r, c = rc
        return self.cells[r][c]

    def __iter__(self) -> Iterator[Patch]:
        for row in self.cells:
            yield from row

    def row(self, r: int) -> list[Patch]:
        return list(self.cells[r])

    def column(self, c: int) -> list[Patch]:
        return [row[c] for row in self.cells]

    @property
    def ids(self) -> list[list[int]]:
        return [[p.id for p in row] for row in self.cells]


def candidate_costs(
    points: np.ndarray, rows: AxisClusters, cols: AxisClusters
) -> list[tuple[float, int, int, int]]:
    """All ``(cost, row, col, patch_id)`` candidates, cheapest first.

    Ties are broken by row, column and patch id so the order never depends
    on container iteration order.
    """
    k = len(rows.centers)
    candidates: list[tuple[float, int, int, int]] = []
    for r in range(k):
        for c in range(k):
            for idx in range(len(points)):
                bonus = int(rows.labels[idx] == r) + int(cols.labels[idx] == c)
                dist = abs(points[idx, 0] - cols.centers[c]) + abs(
                    points[idx, 1] - rows.centers[r]
                )
                cost = float(dist) / (1.0 + AGREEMENT_WEIGHT * bonus)
                candidates.append((cost, r, c, idx))
    candidates.sort()
    return candidates


def assign_grid(
    patches: list[Patch],
    points: np.ndarray,
    rows: AxisClusters,
    cols: AxisClusters,
) -> GridAssignment | None:
    """Pick exactly one patch per cell.

    Args:
        patches: Candidate patches; ``patches[i].id == i``.
        points: Normalised ``(x', y')`` per patch id.
        rows: Ordered row clustering.
        cols: Ordered column clustering.

    Returns:
        The assignment, or ``None`` if fewer than nine cells could be filled.
    """
    k = GRID_SIZE
    grid: list[list[Patch | None]] = [[None] * k for _ in range(k)]
    used: set[int] = set()
    filled = 0

    for _, r, c, idx in candidate_costs(points, rows, cols):
        if grid[r][c] is not None or idx in used:
            continue
        grid[r][c] = patches[idx]
        used.add(idx)
        filled += 1
        if filled == k * k:
            break

    if filled != k * k:
        return None
    return GridAssignment(cells=tuple(tuple(row) for row in grid))  # type: ignore[arg-type]
