"""
Hamerly's triangle-inequality pruned assignment.

Keeps only two bounds per point: an upper bound on the distance to its own
centroid and a single lower bound on the distance to the nearest other
centroid. Less bookkeeping than Elkan, but a point that cannot be skipped is
measured against every centroid.
"""

from __future__ import annotations

from typing import Optional
import numpy as np

from ..point_set import PointSet, pairwise_sq_distances, row_sq_distances
from .base import AssignmentResult, AssignmentStrategy, certainly_below, half_separation


def _second_smallest(d: np.ndarray, labels: np.ndarray) -> np.ndarray:
    """Smallest entry per row of *d* excluding the column given by *labels*."""
    if d.shape[1] < 2:
        return np.full(d.shape[0], np.inf)
    masked = d.copy()
    masked[np.arange(d.shape[0]), labels] = np.inf
    return masked.min(axis=1)


class HamerlyStrategy(AssignmentStrategy):
    """Hamerly k-means assignment with one lower bound per point."""

    name = "hamerly"

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

    def assign(self, points: PointSet, centroids: np.ndarray) -> AssignmentResult:
        centroids = np.asarray(centroids, dtype=np.float64)
        X = points.data
        n, k = points.n_points, centroids.shape[0]

        if not self._is_warm(points, centroids):
            sq = points.sq_distances_to(centroids)
            labels = np.argmin(sq, axis=1)
            d = np.sqrt(sq)
            upper = d[np.arange(n), labels]
            lower = _second_smallest(d, labels)
            evaluations = sq.size
        else:
            labels = self._labels.copy()
            drift = np.sqrt(row_sq_distances(self._centroids, centroids))
            upper = self._upper + drift[labels]
            if k > 1:
                order = np.argsort(drift, kind="stable")
                top, runner_up = order[-1], order[-2]
                # Largest movement among the centroids a point is not assigned to
                max_other = np.where(labels == top, drift[runner_up], drift[top])
            else:
                max_other = np.zeros(n)
            lower = np.maximum(self._lower - max_other, 0.0)

            half_sep = half_separation(np.sqrt(pairwise_sq_distances(centroids, centroids)))
            bound = np.maximum(half_sep[labels], lower)

            evaluations = 0
            candidates = np.flatnonzero(~certainly_below(upper, bound))
            if candidates.size:
                sq_own = row_sq_distances(X[candidates], centroids[labels[candidates]])
                evaluations += candidates.size
                upper[candidates] = np.sqrt(sq_own)

                still = candidates[~certainly_below(upper[candidates], bound[candidates])]
                if still.size:
                    sq = pairwise_sq_distances(X[still], centroids)
                    evaluations += sq.size
                    new_labels = np.argmin(sq, axis=1)
                    d = np.sqrt(sq)
                    labels[still] = new_labels
                    upper[still] = d[np.arange(still.size), new_labels]
                    lower[still] = _second_smallest(d, new_labels)

        self._points = points
        self._centroids = centroids.copy()
        self._labels = labels.copy()
        self._upper = upper
        self._lower = lower
        return self._result(points, centroids, labels, evaluations)
