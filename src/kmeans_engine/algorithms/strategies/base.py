"""
Base classes for assignment strategies.

This module defines the interface that all assignment strategies must
implement. Every strategy returns, for each point, the index of its nearest
centroid (lowest index on exact ties) and must agree with ``NaiveStrategy``
on every input; strategies differ only in how much work they skip.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import numpy as np

from ..point_set import PointSet

# Slack applied to every pruning test. Bounds are accumulated in floating
# point, so a skip is only taken when it holds by more than this margin.
PRUNE_RTOL = 1e-9
PRUNE_ATOL = 1e-12


def certainly_below(upper, lower):
    """True where *lower* exceeds *upper* by more than the pruning slack.

    Works elementwise on arrays as well as on scalars.
    """
    return lower > upper * (1.0 + PRUNE_RTOL) + PRUNE_ATOL


def half_separation(centroid_dists: np.ndarray) -> np.ndarray:
    """Half the distance from each centroid to its nearest other centroid (inf when k == 1)."""
    k = centroid_dists.shape[0]
    masked = 0.5 * centroid_dists + np.diag(np.full(k, np.inf))
    return masked.min(axis=1)


@dataclass
class AssignmentResult:
    """
    Output of a single assignment pass.

    Attributes:
        labels: (n,) nearest-centroid index per point
        distortion: Sum of squared distances to the assigned centroids
        distance_evaluations: Exact point-centroid distances computed
    """
    labels: np.ndarray
    distortion: float
    distance_evaluations: int = 0


class AssignmentStrategy(ABC):
    """
    Abstract base class for nearest-centroid assignment.

    Instances may keep warm state (bounds, trees) between calls within one
    run; a fresh instance should be created for each independent run.
    """

    name: str = ""

    @abstractmethod
    def assign(self, points: PointSet, centroids: np.ndarray) -> AssignmentResult:
        """
        Assign every point to its nearest centroid.

        Args:
            points: The point set being clustered
            centroids: (k, d) current centroids

        Returns:
            AssignmentResult with labels, distortion and work counter
        """

    def reset(self) -> None:
        """Drop any warm state kept from previous calls."""

    def _result(self, points: PointSet, centroids: np.ndarray, labels: np.ndarray, evaluations: int) -> AssignmentResult:
        labels = labels.astype(np.int64, copy=False)
        return AssignmentResult(
            labels=labels,
            distortion=points.distortion(centroids, labels),
            distance_evaluations=int(evaluations),
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
