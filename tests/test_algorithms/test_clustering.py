"""
Tests for centroid updates and agreement metrics.
"""

import numpy as np
import pytest

from kmeans_engine.algorithms.clustering import (
    adjusted_rand_index,
    cluster_stats,
    lloyd_step,
    update_centroids,
)


# ------------------------------------------------------------------
# cluster_stats / update_centroids
# ------------------------------------------------------------------


def test_cluster_stats():
    """Test per-cluster sums and counts."""
    X = np.array([[0.0, 0.0], [2.0, 2.0], [10.0, 0.0]])
    labels = np.array([0, 0, 2])

    sums, counts = cluster_stats(X, labels, 3)

    np.testing.assert_allclose(sums, [[2.0, 2.0], [0.0, 0.0], [10.0, 0.0]])
    np.testing.assert_array_equal(counts, [2, 0, 1])


def test_update_centroids_means():
    """Centroids become the mean of their members."""
    X = np.array([[0.0, 0.0], [2.0, 2.0], [10.0, 0.0]])
    labels = np.array([0, 0, 1])

    centroids, counts = update_centroids(X, labels, 2)

    np.testing.assert_allclose(centroids, [[1.0, 1.0], [10.0, 0.0]])
    np.testing.assert_array_equal(counts, [2, 1])


def test_update_centroids_empty_keeps_previous():
    """Empty clusters keep their previous position."""
    X = np.array([[0.0], [2.0]])
    labels = np.array([0, 0])
    previous = np.array([[5.0], [7.0]])

    centroids, counts = update_centroids(X, labels, 2, previous)

    np.testing.assert_allclose(centroids, [[1.0], [7.0]])
    np.testing.assert_array_equal(counts, [2, 0])
    # previous is not modified
    np.testing.assert_allclose(previous, [[5.0], [7.0]])


def test_update_centroids_empty_without_previous_is_zero():
    X = np.array([[3.0, 4.0]])
    centroids, _ = update_centroids(X, np.array([1]), 2)
    np.testing.assert_allclose(centroids, [[0.0, 0.0], [3.0, 4.0]])


def test_lloyd_step():
    """One assignment then mean update."""
    X = np.array([[0.0], [1.0], [9.0], [11.0]])
    centroids = np.array([[0.0], [10.0]])

    labels, new_centroids, counts = lloyd_step(X, centroids)

    np.testing.assert_array_equal(labels, [0, 0, 1, 1])
    np.testing.assert_allclose(new_centroids, [[0.5], [10.0]])
    np.testing.assert_array_equal(counts, [2, 2])


# ------------------------------------------------------------------
# ARI
# ------------------------------------------------------------------


def test_adjusted_rand_index():
    """Test ARI computation."""
    labels_a = np.array([0, 0, 1, 1, 2, 2])
    labels_b = np.array([0, 0, 1, 1, 2, 2])

    ari = adjusted_rand_index(labels_a, labels_b)
    assert ari == pytest.approx(1.0, abs=1e-6)

    labels_c = np.array([0, 1, 0, 1, 0, 1])
    ari_mixed = adjusted_rand_index(labels_a, labels_c)
    assert -1.0 <= ari_mixed <= 1.0


def test_adjusted_rand_index_ignores_label_names():
    """Permuted label names describe the same partition."""
    labels_a = np.array([0, 0, 1, 1, 2, 2])
    labels_b = np.array([5, 5, 3, 3, 9, 9])
    assert adjusted_rand_index(labels_a, labels_b) == pytest.approx(1.0)


def test_adjusted_rand_index_shape_mismatch():
    with pytest.raises(ValueError, match="same shape"):
        adjusted_rand_index(np.array([0, 1]), np.array([0, 1, 1]))
