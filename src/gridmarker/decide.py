"""Final verdict from spacing and coverage, with layered fallbacks.

Evaluated in order:

1. Spacing failed but coverage ≥ ``coverage_fallback`` → accept spacing.
2. Spacing failed but ``cvx``/``cvy`` are within the soft limits and
   coverage ≥ ``coverage_soft`` → accept spacing.
3. Pass iff spacing is accepted and coverage ≥ ``coverage_thresh``.
4. Otherwise SPACING if spacing is still rejected, else LOW_COVERAGE.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from .constants import FailureReason
from .coverage import CoverageResult
from .params import GridParams
from .spacing import SpacingMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """Outcome of the fuser.

    Attributes:
        reason: ``NONE`` on pass, else SPACING or LOW_COVERAGE.
        ratio: The coverage ratio the decision was based on.
        spacing_ok: Spacing verdict after fallbacks.
        fallback: ``"coverage"`` or ``"soft"`` when a fallback rescued
            spacing, else ``None``.
    """

    reason: FailureReason
    ratio: float
    spacing_ok: bool
    fallback: str | None = None

    @property
    def passed(self) -> bool:
        return self.reason is FailureReason.NONE


def to_percentage(ratio: float) -> int:
    """Whole percentage of *ratio*, rounding halves up and clamped to 0..100."""
    return max(0, min(100, int(math.floor(ratio * 100.0 + 0.5))))


def decision_ratio(coverage: CoverageResult, params: GridParams) -> float:
    return coverage.ratio_bbox if params.coverage_base == "bbox" else coverage.ratio


def decide(
    spacing: SpacingMetrics,
    coverage: CoverageResult,
    params: GridParams,
) -> Decision:
    """Combine spacing and coverage into a pass/fail decision."""
    ratio = decision_ratio(coverage, params)
    spacing_ok = spacing.ok
    fallback: str | None = None

    if not spacing_ok and ratio >= params.coverage_fallback:
        spacing_ok, fallback = True, "coverage"
        logger.info("Spacing fallback accepted (coverage=%.3f)", ratio)
    elif (
        not spacing_ok
        and spacing.cvx <= params.soft_cvx_thresh
        and spacing.cvy <= params.soft_cvy_thresh
        and ratio >= params.coverage_soft
    ):
        spacing_ok, fallback = True, "soft"
        logger.info(
            "Spacing soft-fallback accepted (cvx=%.3f, cvy=%.3f, coverage=%.3f)",
            spacing.cvx, spacing.cvy, ratio,
        )

    if not spacing_ok:
        reason = FailureReason.SPACING
    elif ratio < params.coverage_thresh:
        reason = FailureReason.LOW_COVERAGE
    else:
        reason = FailureReason.NONE
    return Decision(reason=reason, ratio=ratio, spacing_ok=spacing_ok, fallback=fallback)
