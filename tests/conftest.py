"""Shared fixtures and synthetic geometry for the test suite."""

import logging

import pytest

from gridmarker.synth import grid_centers, make_patches

# 400×400 frame, centres 130 px apart, 100 px boxes: hull 360² → 0.81.
FRAME = (400, 400)
AXIS = (70, 200, 330)

# Uneven grid: cvx ≈ 0.570 and cvy ≈ 0.657 sit between the hard and the
# soft spacing limits.  50 px boxes give a 350² hull.
UNEVEN_XS = (50, 278, 350)
UNEVEN_YS = (50, 290, 350)


def perfect_grid(size=100, xs=AXIS, ys=AXIS):
    return make_patches(grid_centers(xs, ys), size=(size, size))


def uneven_grid():
    return make_patches(grid_centers(UNEVEN_XS, UNEVEN_YS), size=(50, 50))


@pytest.fixture(autouse=True)
def _reset_logging():
    """CLI tests reconfigure the root logger onto a captured stream."""
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler not in before:
            root.removeHandler(handler)
    root.setLevel(level)
