"""Full processing pipeline: segment → normalise → cluster → assign → validate → score → decide."""

from __future__ import annotations

import logging
import math
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import cv2
import numpy as np

from .assign import GridAssignment, assign_grid
from .cluster import Clusterer, cluster_axes, make_clusterer
from .constants import MIN_PATCHES, FailureReason
from .coverage import CoverageResult, compute_coverage
from .decide import decide, to_percentage
from .normalize import normalize_points
from .params import DEFAULT_PARAMS, GridParams, SegmentationParams
from .segment import Patch, resize_to_fit, segment_color_patches
from .spacing import SpacingMetrics, measure_spacing

logger = logging.getLogger(__name__)

SLOW_IMAGE_MS: float = 200.0


@dataclass
class MarkerResult:
    """Verdict for one image.

    ``reason`` is ``FailureReason.NONE`` exactly when the marker was found;
    ``percentage`` is then the coverage score, otherwise 0.  The remaining
    fields hold whatever the pipeline computed before it stopped.
    """

    reason: FailureReason
    percentage: int = 0
    points: np.ndarray | None = None
    grid: GridAssignment | None = None
    spacing: SpacingMetrics | None = None
    coverage: CoverageResult | None = None
    fallback: str | None = None

    @property
    def passed(self) -> bool:
        return self.reason is FailureReason.NONE


@dataclass
class ImageResult:
    """Result for one image file.  ``result`` is ``None`` if it could not be read."""

    path: Path
    result: MarkerResult | None
    patches: list[Patch] | None = None
    elapsed_ms: float = 0.0
    image: np.ndarray | None = None  # resized working image, if kept

    @property
    def passed(self) -> bool:
        return self.result is not None and self.result.passed


def validate_patches(patches: Sequence[Patch]) -> None:
    """Reject inputs that break the pipeline's preconditions.

    Raises:
        ValueError: On non-dense ids, negative areas or non-finite centres.
    """
    for i, p in enumerate(patches):
        if p.id != i:
            raise ValueError(f"patch ids must be dense from 0; got id {p.id} at {i}")
        if p.area < 0:
            raise ValueError(f"patch {p.id} has negative area {p.area}")
        if not all(math.isfinite(v) for v in p.center):
            raise ValueError(f"patch {p.id} has non-finite centre {p.center}")
        if p.box[2] < 0 or p.box[3] < 0:
            raise ValueError(f"patch {p.id} has negative box size {p.box}")


def detect_marker(
    patches: Sequence[Patch],
    image_size: tuple[int, int],
    params: GridParams | None = None,
    clusterer: Clusterer | None = None,
) -> MarkerResult:
    """Decide whether *patches* form the 3×3 marker and score its coverage.

    Args:
        patches: Candidate patches with ids ``0..N-1``.
        image_size: ``(width, height)`` of the image the patches came from.
        params: Thresholds.  Defaults to :data:`DEFAULT_PARAMS`.
        clusterer: Clustering backend.  Defaults to the one named in *params*.

    Returns:
        A :class:`MarkerResult`; every business failure is a
        :class:`FailureReason`, never an exception.
    """
    params = params or DEFAULT_PARAMS
    if image_size[0] <= 0 or image_size[1] <= 0:
        raise ValueError(f"image_size must be positive, got {image_size}")
    validate_patches(patches)

    if len(patches) < MIN_PATCHES:
        logger.debug("Only %d patches (< %d)", len(patches), MIN_PATCHES)
        return MarkerResult(reason=FailureReason.FEW_PATCHES)

    centers = np.array([p.center for p in patches], dtype=np.float64)
    points = normalize_points(centers, params.isotropy_ratio)

    rows, cols = cluster_axes(
        points, clusterer or make_clusterer(params), params.grid_size
    )

    grid = assign_grid(list(patches), points, rows, cols)
    if grid is None:
        logger.debug("Grid assignment filled fewer than 9 cells")
        return MarkerResult(reason=FailureReason.ASSIGN_GRID, points=points)
    logger.debug("Grid assigned: %s", grid.ids)

    spacing = measure_spacing(grid, points, params)
    if isinstance(spacing, FailureReason):
        return MarkerResult(reason=spacing, points=points, grid=grid)

    coverage = compute_coverage(grid, image_size)
    if isinstance(coverage, FailureReason):
        logger.debug("Coverage failed: %s", coverage.code)
        return MarkerResult(reason=coverage, points=points, grid=grid, spacing=spacing)
    logger.debug(
        "Coverage hull=%.0f bbox=%.0f image=%.0f ratio=%.3f",
        coverage.hull_area, coverage.bbox_area, coverage.image_area, coverage.ratio,
    )

    decision = decide(spacing, coverage, params)
    if not decision.passed:
        logger.debug(
            "Rejected (%s): cvx=%.3f cvy=%.3f coverage=%.3f",
            decision.reason.code, spacing.cvx, spacing.cvy, decision.ratio,
        )
    return MarkerResult(
        reason=decision.reason,
        percentage=to_percentage(decision.ratio) if decision.passed else 0,
        points=points,
        grid=grid,
        spacing=spacing,
        coverage=coverage,
        fallback=decision.fallback,
    )


def load_image(image_path: Path) -> np.ndarray:
    """Read a BGR image from disk.

    Raises:
        FileNotFoundError: If the file is missing or cannot be decoded.
    """
    image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
    if image is None:
        raise FileNotFoundError(f"Could not load image: {image_path}")
    return image


def analyze_image(
    image: np.ndarray,
    params: GridParams | None = None,
    seg_params: SegmentationParams | None = None,
) -> tuple[MarkerResult, list[Patch], np.ndarray]:
    """Run segmentation and detection on an in-memory BGR image.

    Returns:
        ``(result, patches, working_image)`` where *working_image* is the
        resized image the patches refer to.
    """
    seg_params = seg_params or SegmentationParams()
    working = resize_to_fit(image, seg_params.max_width, seg_params.max_height)
    patches = segment_color_patches(working, seg_params)
    h, w = working.shape[:2]
    return detect_marker(patches, (w, h), params), patches, working


def process_image(
    image_path: Path,
    params: GridParams | None = None,
    seg_params: SegmentationParams | None = None,
    keep_image: bool = False,
) -> ImageResult:
    """Load one image and run the full pipeline on it.

    Unreadable files produce ``ImageResult(result=None)`` so that a batch
    keeps going.  With *keep_image* the resized working image is attached
    for debug drawing.
    """
    t0 = time.perf_counter()
    try:
        image = load_image(image_path)
    except FileNotFoundError:
        logger.warning("failed_to_load %s", image_path)
        return ImageResult(path=image_path, result=None)

    result, patches, working = analyze_image(image, params, seg_params)
    elapsed_ms = (time.perf_counter() - t0) * 1000.0
    if elapsed_ms > SLOW_IMAGE_MS:
        logger.warning("%s took %.0f ms (>%.0f ms)", image_path, elapsed_ms, SLOW_IMAGE_MS)
    else:
        logger.debug("%s took %.0f ms", image_path, elapsed_ms)
    return ImageResult(
        path=image_path,
        result=result,
        patches=patches,
        elapsed_ms=elapsed_ms,
        image=working if keep_image else None,
    )


def scan_images(
    image_paths: Sequence[Path],
    params: GridParams | None = None,
    seg_params: SegmentationParams | None = None,
    workers: int = 1,
    keep_image: bool = False,
) -> list[ImageResult]:
    """Process a batch of images, optionally on worker threads.

    Images are independent; results are returned in input order.
    """
    if workers <= 1 or len(image_paths) <= 1:
        return [process_image(p, params, seg_params, keep_image) for p in image_paths]
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(
            pool.map(
                lambda p: process_image(p, params, seg_params, keep_image), image_paths
            )
        )


def format_result_line(name: str, result: MarkerResult | None) -> str:
    """``"<name> <pct>%"`` on pass, ``"<name> 0%"`` otherwise."""
    pct = result.percentage if result is not None and result.passed else 0
    return f"{name} {pct}%"


def format_debug_line(name: str, result: MarkerResult | None) -> str:
    """``marker_found``/``marker_not_found`` line used in debug mode."""
    if result is not None and result.passed:
        return f"marker_found {name}"
    reason = result.reason if result is not None else FailureReason.FEW_PATCHES
    return f"marker_not_found {name} {reason.code}"
