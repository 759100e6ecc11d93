"""
Centroid update helpers and agreement metrics.

Provides the per-iteration cluster statistics used by the engine and by the
initializers, plus label-agreement metrics used to compare strategies.
"""

from __future__ import annotations

from typing import Optional, Tuple
import numpy as np

from .point_set import pairwise_sq_distances

Array2D = np.ndarray


def cluster_stats(X: Array2D, labels: np.ndarray, k: int) -> Tuple[Array2D, np.ndarray]:
    """
    Per-cluster coordinate sums and member counts.

    Args:
        X: (n, d) points
        labels: (n,) cluster assignments in [0, k)
        k: Number of clusters

    Returns:
        Tuple of (sums of shape (k, d), counts of shape (k,))
    """
    sums = np.zeros((k, X.shape[1]), dtype=np.float64)
    np.add.at(sums, labels, X)
    counts = np.bincount(labels, minlength=k).astype(np.int64)
    return sums, counts


def update_centroids(
    X: Array2D,
    labels: np.ndarray,
    k: int,
    previous: Optional[Array2D] = None,
) -> Tuple[Array2D, np.ndarray]:
    """
    Recompute centroids as the mean of their members.

    Empty clusters keep their *previous* position (zeros when no previous
    centroids are given); the empty-cluster policy decides what happens next.

    Returns:
        Tuple of (centroids (k, d), counts (k,))
    """
    sums, counts = cluster_stats(X, labels, k)
    if previous is None:
        centroids = np.zeros((k, X.shape[1]), dtype=np.float64)
    else:
        centroids = np.array(previous, dtype=np.float64, copy=True)
    nonempty = counts > 0
    centroids[nonempty] = sums[nonempty] / counts[nonempty, None]
    return centroids, counts


def lloyd_step(X: Array2D, centroids: Array2D) -> Tuple[np.ndarray, Array2D, np.ndarray]:
    """One brute-force assignment followed by a mean update (empty clusters stay put)."""
    labels = np.argmin(pairwise_sq_distances(X, centroids), axis=1)
    new_centroids, counts = update_centroids(X, labels, centroids.shape[0], centroids)
    return labels, new_centroids, counts


def adjusted_rand_index(labels_a: np.ndarray, labels_b: np.ndarray) -> float:
    """
    Compute Adjusted Rand Index between two clusterings.

    ARI measures agreement between two clusterings, adjusted for chance.
    Returns 1.0 for identical clusterings, ~0.0 for random agreement.

    Args:
        labels_a: First clustering labels
        labels_b: Second clustering labels

    Returns:
        ARI score in [-1, 1], typically in [0, 1]
    """
    labels_a = np.asarray(labels_a)
    labels_b = np.asarray(labels_b)
    if labels_a.shape != labels_b.shape:
        raise ValueError(
            f"Label arrays must have the same shape; got {labels_a.shape} and {labels_b.shape}"
        )
    _, a = np.unique(labels_a, return_inverse=True)
    _, b = np.unique(labels_b, return_inverse=True)
    n = len(labels_a)

    contingency = np.zeros((a.max() + 1, b.max() + 1), dtype=np.int64)
    np.add.at(contingency, (a, b), 1)

    sum_comb = (contingency * (contingency - 1) / 2.0).sum()
    rows = contingency.sum(axis=1)
    cols = contingency.sum(axis=0)
    sum_comb_c = (rows * (rows - 1) / 2.0).sum()
    sum_comb_k = (cols * (cols - 1) / 2.0).sum()
    comb_n = n * (n - 1) / 2.0

    if comb_n == 0:
        return 1.0

    expected_index = (sum_comb_c * sum_comb_k) / comb_n
    max_index = 0.5 * (sum_comb_c + sum_comb_k)
    denom = max_index - expected_index
    if denom == 0:
        return 1.0
    return float((sum_comb - expected_index) / denom)
