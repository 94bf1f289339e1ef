"""1-D clustering of normalised coordinates into ordered rows and columns.

k-means labels are arbitrary, so every clustering is followed by an
ordering step: clusters are sorted by centre and relabelled ``0..k-1``
(row 0 = smallest ``y'``, column 0 = smallest ``x'``).

The clustering backend is pluggable.  Any callable taking a 1-D array of
values and returning ``(labels, centers)`` with ``k`` clusters works; the
two shipped backends are seeded so that repeated runs agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

import cv2
import numpy as np

from .constants import GRID_SIZE
from .params import GridParams

# values (N,) -> (labels (N,) int, centers (k,) float)
Clusterer = Callable[[np.ndarray], tuple[np.ndarray, np.ndarray]]


@dataclass(frozen=True)
class KMeansClusterer:
    """OpenCV k-means with k-means++ seeding and several restarts."""

    k: int = GRID_SIZE
    attempts: int = 5
    max_iter: int = 100
    epsilon: float = 1e-3
    seed: int = 0

    def __call__(self, values: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        samples = np.asarray(values, dtype=np.float32).reshape(-1, 1)
        criteria = (
            cv2.TERM_CRITERIA_EPS + cv2.TERM_CRITERIA_MAX_ITER,
            self.max_iter,
            self.epsilon,
        )
        # The RNG is thread-local in OpenCV; seeding here keeps worker
        # threads independent.
        cv2.setRNGSeed(self.seed)
        _, labels, centers = cv2.kmeans(
            samples, self.k, None, criteria, self.attempts, cv2.KMEANS_PP_CENTERS
        )
        return labels.reshape(-1).astype(np.int64), centers.reshape(-1).astype(np.float64)


@dataclass(frozen=True)
class SklearnClusterer:
    """scikit-learn k-means with a fixed ``random_state``."""

    k: int = GRID_SIZE
    attempts: int = 5
    max_iter: int = 100
    epsilon: float = 1e-3
    seed: int = 0

    def __call__(self, values: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        from sklearn.cluster import KMeans

        samples = np.asarray(values, dtype=np.float64).reshape(-1, 1)
        km = KMeans(
            n_clusters=self.k,
            n_init=self.attempts,
            max_iter=self.max_iter,
            tol=self.epsilon,
            random_state=self.seed,
        ).fit(samples)
        return km.labels_.astype(np.int64), km.cluster_centers_.reshape(-1)


def make_clusterer(params: GridParams) -> Clusterer:
    """Build the clustering backend named by ``params.clusterer``."""
    cls = SklearnClusterer if params.clusterer == "sklearn" else KMeansClusterer
    return cls(
        k=params.grid_size,
        attempts=params.kmeans_attempts,
        max_iter=params.kmeans_max_iter,
        epsilon=params.kmeans_epsilon,
        seed=params.seed,
    )


@dataclass(frozen=True)
class AxisClusters:
    """Ordered clustering of one axis.

    Attributes:
        labels: Ordered cluster index (``0..k-1``) per patch id.
        centers: Representative coordinate per ordered cluster: the mean of
            its members, or the raw k-means centre if it has none.
    """

    labels: np.ndarray
    centers: np.ndarray

    def members(self, index: int) -> list[int]:
        return [int(i) for i in np.flatnonzero(self.labels == index)]


def order_clusters(
    values: np.ndarray,
    labels: np.ndarray,
    centers: np.ndarray,
) -> AxisClusters:
    """Relabel clusters by ascending centre and compute member means."""
    k = len(centers)
    order = np.argsort(centers, kind="stable")
    rank = np.empty(k, dtype=np.int64)
    rank[order] = np.arange(k)
    ordered_labels = rank[labels]

    means = np.empty(k, dtype=np.float64)
    for idx in range(k):
        members = values[ordered_labels == idx]
        means[idx] = members.mean() if members.size else centers[order[idx]]
    return AxisClusters(labels=ordered_labels, centers=means)


def cluster_axis(
    values: np.ndarray, clusterer: Clusterer, k: int = GRID_SIZE
) -> AxisClusters:
    """Cluster one coordinate axis into ``k`` ordered groups."""
    values = np.asarray(values, dtype=np.float64).reshape(-1)
    labels, centers = clusterer(values)
    labels = np.asarray(labels, dtype=np.int64).reshape(-1)
    centers = np.asarray(centers, dtype=np.float64).reshape(-1)
    if len(centers) != k or len(labels) != len(values):
        raise ValueError(
            f"clusterer returned {len(centers)} centres / {len(labels)} labels, "
            f"expected {k} / {len(values)}"
        )
    return order_clusters(values, labels, centers)


def cluster_axes(
    points: np.ndarray, clusterer: Clusterer, k: int = GRID_SIZE
) -> tuple[AxisClusters, AxisClusters]:
    """Cluster normalised points into ordered ``(rows, columns)``.

    Rows come from ``y'``, columns from ``x'``.
    """
    rows = cluster_axis(points[:, 1], clusterer, k)
    cols = cluster_axis(points[:, 0], clusterer, k)
    return rows, cols
