"""
Empty-cluster policies.

The engine calls ``policy.apply(points, state)`` after recomputing centroids
whenever at least one cluster received no points. ``state.cluster_ids`` maps
each current slot to the cluster's original index, so callers can follow a
cluster through ``KillEmpty`` renumbering.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
import numpy as np

from ..utils.logging_config import get_logger
from .point_set import PointSet, row_sq_distances

logger = get_logger(__name__)


@dataclass
class ClusterState:
    """Centroids, assignment and per-cluster counts between iterations."""

    centroids: np.ndarray
    labels: np.ndarray
    counts: np.ndarray
    cluster_ids: np.ndarray

    @property
    def n_clusters(self) -> int:
        return self.centroids.shape[0]

    @property
    def empty(self) -> np.ndarray:
        return np.flatnonzero(self.counts == 0)


class EmptyClusterPolicy(ABC):
    """Decides what happens to clusters that lost all of their points."""

    name: str = ""

    @abstractmethod
    def apply(self, points: PointSet, state: ClusterState) -> ClusterState:
        """Return the state to continue iterating from."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class DefaultPolicy(EmptyClusterPolicy):
    """
    Move each empty centroid onto the point farthest from its own centroid.

    Empty clusters are handled in index order. A point is used at most once
    per call, and points that are the only member of their cluster are never
    taken (that would empty another cluster). The chosen point joins the
    revived cluster as its only member and is removed from its former
    cluster's mean.
    """

    name = "default"

    def apply(self, points: PointSet, state: ClusterState) -> ClusterState:
        X = points.data
        centroids = state.centroids.copy()
        labels = state.labels.copy()
        counts = state.counts.copy()
        dist = row_sq_distances(X, centroids[labels])
        taken = np.zeros(points.n_points, dtype=bool)

        for e in state.empty:
            eligible = ~taken & (counts[labels] > 1)
            if not eligible.any():
                logger.warning(
                    "No point available to revive empty cluster %d; leaving it in place",
                    int(state.cluster_ids[e]),
                )
                continue
            i = int(np.argmax(np.where(eligible, dist, -1.0)))
            old = labels[i]
            centroids[old] = (centroids[old] * counts[old] - X[i]) / (counts[old] - 1)
            counts[old] -= 1
            centroids[e] = X[i]
            labels[i] = e
            counts[e] = 1
            taken[i] = True
            logger.debug(
                "Revived empty cluster %d at point %d (squared distance %.6g)",
                int(state.cluster_ids[e]), i, dist[i],
            )

        return ClusterState(centroids, labels, counts, state.cluster_ids.copy())


class AllowEmptyPolicy(EmptyClusterPolicy):
    """Leave empty centroids where they were; they may win points back later."""

    name = "allow"

    def apply(self, points: PointSet, state: ClusterState) -> ClusterState:
        return state


class KillEmptyPolicy(EmptyClusterPolicy):
    """Delete empty clusters and renumber the rest contiguously."""

    name = "kill"

    def apply(self, points: PointSet, state: ClusterState) -> ClusterState:
        keep = state.counts > 0
        if keep.all():
            return state
        new_slot = np.cumsum(keep) - 1
        logger.debug(
            "Removing %d empty clusters (original ids %s)",
            int((~keep).sum()), state.cluster_ids[~keep].tolist(),
        )
        return ClusterState(
            centroids=state.centroids[keep].copy(),
            labels=new_slot[state.labels].astype(np.int64),
            counts=state.counts[keep].copy(),
            cluster_ids=state.cluster_ids[keep].copy(),
        )


def create_empty_cluster_policy(name: str) -> EmptyClusterPolicy:
    """
    Create an empty-cluster policy by name.

    Raises:
        ValueError: If name is unknown
    """
    key = name.strip().lower()
    if key in ("default", "max-distance"):
        return DefaultPolicy()
    elif key in ("allow", "allow-empty", "allow_empty"):
        return AllowEmptyPolicy()
    elif key in ("kill", "kill-empty", "kill_empty"):
        return KillEmptyPolicy()
    else:
        raise ValueError(
            f"Unknown empty cluster policy: {name}. "
            f"Available policies: default, allow, kill"
        )
