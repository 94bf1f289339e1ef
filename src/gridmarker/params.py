"""Tunable thresholds for segmentation and grid validation.

Defaults live in frozen dataclasses and are passed explicitly into the
pipeline.  A JSON file may override any subset of the grid defaults::

    {"coverage_thresh": 0.40, "cvx_thresh": 0.6}

which :func:`load_params` merges over :class:`GridParams` defaults.
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

from .constants import GRID_SIZE

COVERAGE_BASES = ("image", "bbox")
CLUSTERERS = ("opencv", "sklearn")


@dataclass(frozen=True)
class GridParams:
    """Thresholds for spacing validation and coverage acceptance.

    Attributes:
        grid_size: Rows and columns of the marker.  Only 3 is supported.
        cvx_thresh: Hard limit on row-gap irregularity.
        cvy_thresh: Hard limit on column-gap irregularity.
        soft_cvx_thresh: Looser ``cvx`` limit for the soft fallback.
        soft_cvy_thresh: Looser ``cvy`` limit for the soft fallback.
        coverage_thresh: Minimum coverage ratio for a pass.
        coverage_fallback: Coverage that overrides a spacing failure.
        coverage_soft: Coverage needed by the soft fallback.
        coverage_base: ``"image"`` (hull / image area) or ``"bbox"``
            (hull / grid bounding box) as the decision ratio.
        clusterer: ``"opencv"`` or ``"sklearn"`` k-means backend.
        kmeans_attempts: Random restarts per clustering.
        kmeans_max_iter: Iteration cap per restart.
        kmeans_epsilon: Centre-shift stopping criterion.
        seed: RNG seed applied before every clustering call.
        isotropy_ratio: Eigenvalue ratio above which the PCA frame is
            replaced by the lattice direction.
    """

    grid_size: int = GRID_SIZE
    cvx_thresh: float = 0.55
    cvy_thresh: float = 0.65
    soft_cvx_thresh: float = 0.60
    soft_cvy_thresh: float = 0.70
    coverage_thresh: float = 0.45
    coverage_fallback: float = 0.55
    coverage_soft: float = 0.50
    coverage_base: str = "image"
    clusterer: str = "opencv"
    kmeans_attempts: int = 5
    kmeans_max_iter: int = 100
    kmeans_epsilon: float = 1e-3
    seed: int = 0
    isotropy_ratio: float = 0.85

    def __post_init__(self) -> None:
        if self.grid_size != GRID_SIZE:
            raise ValueError(
                f"grid_size must be {GRID_SIZE}, got {self.grid_size}"
            )
        for name in (
            "cvx_thresh",
            "cvy_thresh",
            "soft_cvx_thresh",
            "soft_cvy_thresh",
            "kmeans_epsilon",
        ):
            if not getattr(self, name) > 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in (
            "coverage_thresh",
            "coverage_fallback",
            "coverage_soft",
            "isotropy_ratio",
        ):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.coverage_base not in COVERAGE_BASES:
            raise ValueError(
                f"coverage_base must be one of {COVERAGE_BASES}, got {self.coverage_base!r}"
            )
        if self.clusterer not in CLUSTERERS:
            raise ValueError(
                f"clusterer must be one of {CLUSTERERS}, got {self.clusterer!r}"
            )
        if self.kmeans_attempts < 1 or self.kmeans_max_iter < 1:
            raise ValueError("kmeans_attempts and kmeans_max_iter must be >= 1")

    @classmethod
    def bbox_based(cls, **overrides: object) -> GridParams:
        """Preset that scores coverage against the grid's own bounding box."""
        base = cls(
            coverage_base="bbox",
            coverage_thresh=0.70,
            coverage_fallback=0.80,
            coverage_soft=0.75,
        )
        return replace(base, **overrides)

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


@dataclass(frozen=True)
class SegmentationParams:
    """Settings for turning a photo into candidate patches.

    Attributes:
        min_area_ratio: Smallest kept contour, relative to image area.
        max_area_ratio: Largest kept contour, relative to image area.
        max_width: Images wider than this are downscaled first.
        max_height: Images taller than this are downscaled first.
    """

    min_area_ratio: float = 0.0006
    max_area_ratio: float = 0.2
    max_width: int = 640
    max_height: int = 480

    def __post_init__(self) -> None:
        if not 0.0 <= self.min_area_ratio < self.max_area_ratio <= 1.0:
            raise ValueError(
                "area ratios must satisfy 0 <= min_area_ratio < max_area_ratio <= 1"
            )
        if self.max_width < 1 or self.max_height < 1:
            raise ValueError("max_width and max_height must be >= 1")


DEFAULT_PARAMS = GridParams()


def load_params(path: Path | None = None) -> GridParams:
    """Return grid parameters, overriding defaults with *path* when given.

    Raises:
        FileNotFoundError: If *path* is given but does not exist.
        ValueError: If the file holds unknown keys or invalid values.
    """
    if path is None:
        return DEFAULT_PARAMS
    if not path.exists():
        raise FileNotFoundError(f"Params file not found: {path}")

    saved = json.loads(path.read_text())
    if not isinstance(saved, dict):
        raise ValueError(f"Params file must hold a JSON object: {path}")

    known = {f.name for f in fields(GridParams)}
    unknown = sorted(set(saved) - known)
    if unknown:
        raise ValueError(f"Unknown parameter(s) in {path}: {', '.join(unknown)}")
    return GridParams(**{**DEFAULT_PARAMS.to_dict(), **saved})


def save_params(path: Path, params: GridParams) -> None:
    """Write *params* to *path* as JSON (the format :func:`load_params` reads)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(params.to_dict(), indent=2) + "\n")
