"""Tests for axis clustering and cluster ordering."""

import numpy as np
import pytest

from gridmarker.cluster import (
    AxisClusters,
    KMeansClusterer,
    SklearnClusterer,
    cluster_axes,
    cluster_axis,
    make_clusterer,
    order_clusters,
)
from gridmarker.params import GridParams

VALUES = np.array([-130.0, 0.0, 130.0, -131.0, 1.0, 129.0, -129.0, -1.0, 131.0])


class TestOrderClusters:
    def test_relabels_by_centre(self):
        values = np.array([5, 5, 5, 1, 1, 1, 9, 9, 9], dtype=np.float64)
        labels = np.array([2, 2, 2, 0, 0, 0, 1, 1, 1])
        centers = np.array([1.0, 9.0, 5.0])
        out = order_clusters(values, labels, centers)
        assert out.labels.tolist() == [1, 1, 1, 0, 0, 0, 2, 2, 2]
        assert out.centers.tolist() == [1.0, 5.0, 9.0]

    def test_centres_are_member_means(self):
        values = np.array([0.0, 2.0, 10.0, 12.0, 20.0, 24.0])
        labels = np.array([0, 0, 1, 1, 2, 2])
        centers = np.array([0.5, 11.5, 21.0])
        out = order_clusters(values, labels, centers)
        assert out.centers.tolist() == [1.0, 11.0, 22.0]

    def test_empty_cluster_keeps_raw_centre(self):
        values = np.array([1.0, 1.0, 9.0])
        labels = np.array([0, 0, 2])
        centers = np.array([1.0, 5.0, 9.0])
        out = order_clusters(values, labels, centers)
        assert out.centers.tolist() == [1.0, 5.0, 9.0]
        assert out.members(1) == []

    def test_members(self):
        clusters = AxisClusters(labels=np.array([1, 0, 1, 2]), centers=np.zeros(3))
        assert clusters.members(1) == [0, 2]
        assert clusters.members(2) == [3]


# ---------------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("backend", [KMeansClusterer, SklearnClusterer])
class TestBackends:
    def test_separates_three_groups(self, backend):
        out = cluster_axis(VALUES, backend())
        assert out.labels.tolist() == [0, 1, 2, 0, 1, 2, 0, 1, 2]
        np.testing.assert_allclose(out.centers, [-130.0, 0.0, 130.0])

    def test_deterministic(self, backend):
        first = cluster_axis(VALUES, backend(seed=3))
        second = cluster_axis(VALUES, backend(seed=3))
        assert first.labels.tolist() == second.labels.tolist()
        np.testing.assert_array_equal(first.centers, second.centers)


class TestMakeClusterer:
    def test_default_is_opencv(self):
        assert isinstance(make_clusterer(GridParams()), KMeansClusterer)

    def test_sklearn(self):
        c = make_clusterer(GridParams(clusterer="sklearn", seed=5, kmeans_attempts=2))
        assert isinstance(c, SklearnClusterer)
        assert (c.seed, c.attempts, c.k) == (5, 2, 3)


class TestClusterAxis:
    def test_rejects_wrong_cluster_count(self):
        def two_clusters(values):
            return np.zeros(len(values), dtype=int), np.array([0.0, 1.0])

        with pytest.raises(ValueError, match="expected 3"):
            cluster_axis(VALUES, two_clusters)

    def test_custom_clusterer(self):
        def by_sign(values):
            labels = np.sign(values).astype(int) + 1
            return labels, np.array([-1.0, 0.0, 1.0])

        out = cluster_axis(np.array([-5.0, 0.0, 5.0, 6.0]), by_sign)
        assert out.labels.tolist() == [0, 1, 2, 2]
        assert out.centers.tolist() == [-5.0, 0.0, 5.5]


class TestClusterAxes:
    def test_rows_from_y_columns_from_x(self):
        xs = np.array([-100.0, 0.0, 100.0] * 3)
        ys = np.repeat([-50.0, 0.0, 50.0], 3)
        rows, cols = cluster_axes(np.column_stack([xs, ys]), KMeansClusterer())
        assert rows.labels.tolist() == [0, 0, 0, 1, 1, 1, 2, 2, 2]
        assert cols.labels.tolist() == [0, 1, 2, 0, 1, 2, 0, 1, 2]
        np.testing.assert_allclose(rows.centers, [-50.0, 0.0, 50.0])
        np.testing.assert_allclose(cols.centers, [-100.0, 0.0, 100.0])
