"""Orientation normalisation of patch centroids.

Centroids are projected onto the principal axes of the point cloud so that
row/column clustering does not depend on how the camera was rotated.

A square 3×3 grid has an isotropic covariance, which leaves the PCA
eigenvectors undefined.  In that case the frame is taken from the lattice
itself: nearest-neighbour directions of a grid repeat every 90°, so their
mean on the 4φ circle gives the grid's rotation.
"""

from __future__ import annotations

import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


def lattice_angle(points: np.ndarray) -> float | None:
    """Dominant nearest-neighbour direction of *points*, modulo 90°.

    Returns the angle in radians, or ``None`` when the directions cancel
    out (no usable lattice).
    """
    n = len(points)
    if n < 2:
        return None

    diff = points[None, :, :] - points[:, None, :]
    dist = np.hypot(diff[..., 0], diff[..., 1])
    np.fill_diagonal(dist, np.inf)
    # Coincident points carry no direction.
    dist[dist <= 0] = np.inf

    nearest = np.argmin(dist, axis=1)
    valid = np.isfinite(dist[np.arange(n), nearest])
    if not valid.any():
        return None

    vec = diff[np.arange(n), nearest][valid]
    phi = np.arctan2(vec[:, 1], vec[:, 0])
    s = np.exp(4j * phi).mean()
    if abs(s) < 1e-6:
        return None
    return float(np.angle(s) / 4.0)


def _canonical_basis(basis: np.ndarray) -> np.ndarray:
    """Order and orient two row basis vectors toward image +x / +y."""
    e1, e2 = basis[0].copy(), basis[1].copy()
    if abs(e1[0]) < abs(e2[0]):
        e1, e2 = e2, e1
    if e1[0] < 0:
        e1 = -e1
    if e2[1] < 0:
        e2 = -e2
    return np.stack([e1, e2])


def principal_basis(
    points: np.ndarray, isotropy_ratio: float = 0.85
) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(mean, basis)`` of the principal frame of *points*.

    ``basis`` holds one unit axis per row; the first row becomes ``x'``.
    """
    mean, eigvecs, eigvals = cv2.PCACompute2(points, mean=np.empty(0))
    mean = mean.reshape(2)
    eigvals = eigvals.reshape(-1)
    basis = eigvecs.reshape(2, 2).astype(np.float64)

    if eigvals[0] <= 0:
        logger.debug("All centroids coincide; keeping image axes")
        return mean, np.eye(2)

    if eigvals[1] / eigvals[0] >= isotropy_ratio:
        theta = lattice_angle(points)
        if theta is not None:
            logger.debug(
                "Near-isotropic spread (%.3f); lattice angle %.2f°",
                eigvals[1] / eigvals[0], np.degrees(theta),
            )
            c, s = np.cos(theta), np.sin(theta)
            basis = np.array([[c, s], [-s, c]])

    return mean, _canonical_basis(basis)


def normalize_points(
    centers: np.ndarray | list[tuple[float, float]],
    isotropy_ratio: float = 0.85,
) -> np.ndarray:
    """Project centroids into the principal-axis frame.

    Args:
        centers: ``(N, 2)`` image-space centroids, ``N >= 3``.
        isotropy_ratio: Eigenvalue ratio above which the lattice direction
            replaces the PCA axes.

    Returns:
        ``(N, 2)`` float64 array of ``(x', y')``, index-aligned with the input.
    """
    points = np.asarray(centers, dtype=np.float64).reshape(-1, 2)
    mean, basis = principal_basis(points, isotropy_ratio)
    return (points - mean) @ basis.T
