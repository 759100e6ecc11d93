"""Brute-force nearest-centroid assignment."""

from __future__ import annotations

import numpy as np

from ..point_set import PointSet
from .base import AssignmentResult, AssignmentStrategy


class NaiveStrategy(AssignmentStrategy):
    """
    Compute every point-centroid distance and take the minimum.

    This is the reference implementation the other strategies are checked
    against. ``np.argmin`` returns the first minimum, which gives the
    lowest-index tie-break.
    """

    name = "naive"

    def assign(self, points: PointSet, centroids: np.ndarray) -> AssignmentResult:
        sq = points.sq_distances_to(centroids)
        labels = np.argmin(sq, axis=1)
        return self._result(points, centroids, labels, sq.size)
