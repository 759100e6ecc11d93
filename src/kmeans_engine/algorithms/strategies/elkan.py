"""
Elkan's triangle-inequality pruned assignment.

Keeps, per point, an upper bound on the distance to its assigned centroid
and a lower bound on the distance to every centroid. Between calls the
bounds are loosened by how far each centroid moved; a centroid is only
measured exactly when neither its lower bound nor half the inter-centroid
distance rules it out.
"""

from __future__ import annotations

from typing import Optional
import numpy as np

from ..point_set import PointSet, pairwise_sq_distances, row_sq_distances
from .base import AssignmentResult, AssignmentStrategy, certainly_below, half_separation


class ElkanStrategy(AssignmentStrategy):
    """Elkan k-means assignment with per point-centroid lower bounds."""

    name = "elkan"

    def __init__(self):
        self._points: Optional[PointSet] = None
        self._centroids: Optional[np.ndarray] = None
        self._labels: Optional[np.ndarray] = None
        self._upper: Optional[np.ndarray] = None
        self._lower: Optional[np.ndarray] = None

    def reset(self) -> None:
        self._points = None
        self._centroids = None
        self._labels = None
        self._upper = None
        self._lower = None

    def _is_warm(self, points: PointSet, centroids: np.ndarray) -> bool:
        return (
            self._points is points
            and self._centroids is not None
            and self._centroids.shape == centroids.shape
        )

    def _remember(self, points, centroids, labels, upper, lower) -> None:
        self._points = points
        self._centroids = centroids.copy()
        self._labels = labels.copy()
        self._upper = upper
        self._lower = lower

    def assign(self, points: PointSet, centroids: np.ndarray) -> AssignmentResult:
        centroids = np.asarray(centroids, dtype=np.float64)
        X = points.data
        n, k = points.n_points, centroids.shape[0]

        if not self._is_warm(points, centroids):
            sq = points.sq_distances_to(centroids)
            labels = np.argmin(sq, axis=1)
            lower = np.sqrt(sq)
            upper = lower[np.arange(n), labels].copy()
            self._remember(points, centroids, labels, upper, lower)
            return self._result(points, centroids, labels, sq.size)

        drift = np.sqrt(row_sq_distances(self._centroids, centroids))
        labels = self._labels.copy()
        upper = self._upper + drift[labels]
        lower = np.maximum(self._lower - drift[None, :], 0.0)

        cc = np.sqrt(pairwise_sq_distances(centroids, centroids))
        half_cc = 0.5 * cc
        half_sep = half_separation(cc)

        evaluations = 0
        candidates = np.flatnonzero(~certainly_below(upper, half_sep[labels]))
        for i in candidates:
            x = X[i:i + 1]
            a = int(labels[i])
            u = upper[i]
            best_sq = None
            for j in range(k):
                if j == a:
                    continue
                if certainly_below(u, lower[i, j]) or certainly_below(u, half_cc[a, j]):
                    continue
                if best_sq is None:
                    # Tighten the upper bound before paying for centroid j
                    best_sq = pairwise_sq_distances(x, centroids[a:a + 1])[0, 0]
                    evaluations += 1
                    u = np.sqrt(best_sq)
                    lower[i, a] = u
                    if certainly_below(u, lower[i, j]) or certainly_below(u, half_cc[a, j]):
                        continue
                sq_j = pairwise_sq_distances(x, centroids[j:j + 1])[0, 0]
                evaluations += 1
                d_j = np.sqrt(sq_j)
                lower[i, j] = d_j
                if sq_j < best_sq or (sq_j == best_sq and j < a):
                    a, best_sq, u = j, sq_j, d_j
            labels[i] = a
            upper[i] = u

        self._remember(points, centroids, labels, upper, lower)
        return self._result(points, centroids, labels, evaluations)
