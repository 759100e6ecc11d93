"""
The k-means iteration loop.

``KMeansEngine.run`` moves through the states

    INITIALIZING -> ITERATING -> CONVERGED | ITERATION_LIMIT_REACHED | FAILED

Validation and initialization errors are the only way to reach FAILED; once
iterating starts, empty clusters are handled by the configured policy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional
import numpy as np

from ..errors import InvalidClusterCountError, KMeansError
from ..utils.logging_config import get_logger
from .clustering import update_centroids
from .empty_clusters import ClusterState, DefaultPolicy, EmptyClusterPolicy
from .initialization import Initializer, RandomPartition
from .point_set import PointSet
from .strategies import AssignmentStrategy, NaiveStrategy

logger = get_logger(__name__)


class EngineState(str, Enum):
    """Lifecycle states of a clustering run."""

    INITIALIZING = "initializing"
    ITERATING = "iterating"
    CONVERGED = "converged"
    ITERATION_LIMIT_REACHED = "iteration_limit_reached"
    FAILED = "failed"

    @property
    def is_success(self) -> bool:
        return self in (EngineState.CONVERGED, EngineState.ITERATION_LIMIT_REACHED)


@dataclass
class EngineResult:
    """
    Final state of a clustering run.

    Attributes:
        labels: (n,) cluster index per point, contiguous in [0, n_clusters)
        centroids: (n_clusters, d) final centroids
        cluster_ids: (n_clusters,) original index of each surviving cluster
        distortion: Sum of squared distances to the assigned centroids
        n_iter: Number of assignment passes performed, excluding the
            closing re-labelling pass made when the iteration limit stops the run
        state: CONVERGED or ITERATION_LIMIT_REACHED
        distance_evaluations: Exact distances computed by the strategy
        distortion_history: Distortion reported by each assignment pass
    """

    labels: np.ndarray
    centroids: np.ndarray
    cluster_ids: np.ndarray
    distortion: float
    n_iter: int
    state: EngineState
    distance_evaluations: int = 0
    distortion_history: List[float] = field(default_factory=list)

    @property
    def n_clusters(self) -> int:
        return self.centroids.shape[0]

    @property
    def converged(self) -> bool:
        return self.state == EngineState.CONVERGED


def validate_cluster_count(n_clusters: Any, n_points: int) -> int:
    """
    Check that *n_clusters* is an integer in ``[1, n_points]``.

    Raises:
        InvalidClusterCountError: Otherwise
    """
    if isinstance(n_clusters, bool) or not isinstance(n_clusters, (int, np.integer)):
        raise InvalidClusterCountError(
            f"Number of clusters must be an integer, got {n_clusters!r}"
        )
    k = int(n_clusters)
    if k < 1:
        raise InvalidClusterCountError(f"Number of clusters must be >= 1, got {k}")
    if k > n_points:
        raise InvalidClusterCountError(
            f"Number of clusters ({k}) cannot exceed number of points ({n_points})"
        )
    return k


class KMeansEngine:
    """
    Lloyd-style k-means with pluggable assignment, initialization and
    empty-cluster handling.

    Args:
        strategy: Assignment strategy (its warm state is reset at each run)
        initializer: Initial centroid selection (default: random partition)
        empty_policy: Empty-cluster policy (default: relocate to farthest point)
        max_iterations: Maximum assignment passes; 0 means no limit
        seed: Seed for the initializer's random generator
    """

    def __init__(
        self,
        strategy: Optional[AssignmentStrategy] = None,
        initializer: Optional[Initializer] = None,
        empty_policy: Optional[EmptyClusterPolicy] = None,
        max_iterations: int = 1000,
        seed: Optional[int] = None,
    ):
        if max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {max_iterations}")
        self.strategy = strategy or NaiveStrategy()
        self.initializer = initializer or RandomPartition()
        self.empty_policy = empty_policy or DefaultPolicy()
        self.max_iterations = int(max_iterations)
        self.seed = seed
        self.state: Optional[EngineState] = None

    def _transition(self, state: EngineState) -> None:
        logger.debug("Engine state %s -> %s", self.state.value if self.state else None, state.value)
        self.state = state

    def _initialize(self, points: PointSet, n_clusters: Any) -> np.ndarray:
        self._transition(EngineState.INITIALIZING)
        try:
            k = validate_cluster_count(n_clusters, points.n_points)
            rng = np.random.default_rng(self.seed)
            centroids = self.initializer.initialize(points, k, rng)
        except KMeansError as e:
            self._transition(EngineState.FAILED)
            logger.error("Initialization failed: %s", e)
            raise
        return np.asarray(centroids, dtype=np.float64)

    def run(self, points: PointSet, n_clusters: Any) -> EngineResult:
        """
        Cluster *points* into *n_clusters* groups.

        Returns:
            EngineResult in state CONVERGED or ITERATION_LIMIT_REACHED

        Raises:
            InvalidClusterCountError: If n_clusters is not in [1, n_points]
            DegenerateInitError: If the initializer cannot produce centroids
        """
        centroids = self._initialize(points, n_clusters)
        k = centroids.shape[0]
        logger.info(
            "[KMeans] %d points x %d dims -> %d clusters (strategy=%s, init=%r, max_iterations=%s)",
            points.n_points, points.n_dims, k, self.strategy.name, self.initializer,
            self.max_iterations or "unlimited",
        )

        self._transition(EngineState.ITERATING)
        self.strategy.reset()
        labels: Optional[np.ndarray] = None
        cluster_ids = np.arange(k)
        n_iter = 0
        evaluations = 0
        history: List[float] = []

        while True:
            if self.max_iterations and n_iter >= self.max_iterations:
                self._transition(EngineState.ITERATION_LIMIT_REACHED)
                # Re-label against the final centroids; not counted in n_iter
                final = self.strategy.assign(points, centroids)
                evaluations += final.distance_evaluations
                labels = final.labels
                break

            result = self.strategy.assign(points, centroids)
            n_iter += 1
            evaluations += result.distance_evaluations
            history.append(result.distortion)
            logger.debug(
                "Iteration %d: distortion=%.6g, clusters=%d, distance evaluations=%d",
                n_iter, result.distortion, centroids.shape[0], result.distance_evaluations,
            )

            if labels is not None and np.array_equal(result.labels, labels):
                labels = result.labels
                self._transition(EngineState.CONVERGED)
                break
            labels = result.labels

            centroids, counts = update_centroids(points.data, labels, centroids.shape[0], centroids)
            if np.any(counts == 0):
                state = self.empty_policy.apply(
                    points, ClusterState(centroids, labels, counts, cluster_ids)
                )
                centroids, labels, cluster_ids = state.centroids, state.labels, state.cluster_ids

        distortion = points.distortion(centroids, labels)
        if self.state == EngineState.CONVERGED:
            logger.info("[KMeans] Converged after %d iterations (distortion=%.6g)", n_iter, distortion)
        else:
            logger.info(
                "[KMeans] Stopped at iteration limit %d without convergence (distortion=%.6g)",
                n_iter, distortion,
            )

        return EngineResult(
            labels=labels.astype(np.int64, copy=False),
            centroids=centroids,
            cluster_ids=cluster_ids,
            distortion=distortion,
            n_iter=n_iter,
            state=self.state,
            distance_evaluations=evaluations,
            distortion_history=history,
        )
