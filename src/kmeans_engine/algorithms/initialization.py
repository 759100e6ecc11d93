"""
Initial centroid selection.

Each initializer exposes ``initialize(points, k, rng) -> (k, d) centroids``
and validates only the constraints it owns; cluster-count range checks are
done by the engine before any initializer runs.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional
import numpy as np

from ..errors import DegenerateInitError, InvalidPercentageError
from ..utils.logging_config import get_logger
from .clustering import lloyd_step, update_centroids
from .point_set import PointSet, pairwise_sq_distances, row_sq_distances

logger = get_logger(__name__)

Array2D = np.ndarray


class Initializer(ABC):
    """Produces the starting centroids for a run."""

    name: str = ""

    @abstractmethod
    def initialize(self, points: PointSet, k: int, rng: np.random.Generator) -> Array2D:
        """Return a (k, d) float64 array of initial centroids."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


def _random_partition(X: Array2D, k: int, rng: np.random.Generator) -> Array2D:
    n = X.shape[0]
    if k > n:
        raise DegenerateInitError(
            f"Cannot partition {n} points into {k} clusters"
        )
    labels = rng.integers(0, k, size=n, endpoint=False)
    centroids, counts = update_centroids(X, labels, k)
    empty = np.flatnonzero(counts == 0)
    if len(empty) > 0:
        # Seed empty clusters on distinct random points
        picks = rng.choice(n, size=len(empty), replace=False)
        centroids[empty] = X[picks]
    return centroids


class RandomPartition(Initializer):
    """
    Assign every point a uniformly random cluster, then take cluster means.

    Clusters that receive no points are placed on distinct random data points.
    """

    name = "random"

    def initialize(self, points: PointSet, k: int, rng: np.random.Generator) -> Array2D:
        return _random_partition(points.data, k, rng)


class RefinedStart(Initializer):
    """
    Sampling-based refined start.

    Draws ``samplings`` random subsets of ``percentage * n`` points, clusters
    each subset briefly, and keeps the candidate centroids with the lowest
    distortion over the whole dataset. Ties keep the earliest candidate.

    Args:
        percentage: Fraction of the dataset per sample, in (0, 1]
        samplings: Number of samples drawn
        iterations: Lloyd passes run on each sample
    """

    name = "refined"

    def __init__(self, percentage: float = 0.02, samplings: int = 100, iterations: int = 1):
        if not (0.0 < percentage <= 1.0):
            raise InvalidPercentageError(
                f"Percentage must be in (0, 1], got {percentage}"
            )
        if samplings < 1:
            raise ValueError(f"samplings must be >= 1, got {samplings}")
        if iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {iterations}")
        self.percentage = float(percentage)
        self.samplings = int(samplings)
        self.iterations = int(iterations)

    def sample_size(self, n: int, k: int) -> int:
        size = int(round(self.percentage * n))
        return min(n, max(k, size))

    def initialize(self, points: PointSet, k: int, rng: np.random.Generator) -> Array2D:
        X = points.data
        n = points.n_points
        if k > n:
            raise DegenerateInitError(f"Cannot draw {k} centroids from {n} points")
        m = self.sample_size(n, k)
        logger.debug(
            "Refined start: %d samplings of %d points (percentage=%.4f)",
            self.samplings, m, self.percentage,
        )

        best: Optional[Array2D] = None
        best_score = np.inf
        for trial in range(self.samplings):
            idx = np.sort(rng.choice(n, size=m, replace=False))
            sample = X[idx]
            centroids = _random_partition(sample, k, rng)
            for _ in range(self.iterations):
                _, centroids, _ = lloyd_step(sample, centroids)

            sq = pairwise_sq_distances(X, centroids)
            score = float(np.sum(sq.min(axis=1)))
            if score < best_score:
                best_score = score
                best = centroids
                logger.debug("Refined start trial %d: new best distortion %.6g", trial, score)

        return best

    def __repr__(self) -> str:
        return (
            f"RefinedStart(percentage={self.percentage}, samplings={self.samplings}, "
            f"iterations={self.iterations})"
        )


class KMeansPlusPlus(Initializer):
    """Return (k, d) initial centroids chosen by the k-means++ rule."""

    name = "kmeans++"

    def initialize(self, points: PointSet, k: int, rng: np.random.Generator) -> Array2D:
        X = points.data
        n, d = X.shape
        if k > n:
            raise DegenerateInitError(f"Cannot draw {k} centroids from {n} points")
        centroids = np.empty((k, d), dtype=np.float64)
        centroids[0] = X[int(rng.integers(0, n))]
        min_sq = row_sq_distances(X, np.broadcast_to(centroids[0], X.shape))

        for c in range(1, k):
            total = min_sq.sum()
            if total == 0.0:
                centroids[c] = X[int(rng.integers(0, n))]
            else:
                centroids[c] = X[int(rng.choice(n, p=min_sq / total))]
            min_sq = np.minimum(
                min_sq, row_sq_distances(X, np.broadcast_to(centroids[c], X.shape))
            )
        return centroids


class GivenCentroids(Initializer):
    """Use caller-supplied initial centroids."""

    name = "given"

    def __init__(self, centroids: Any):
        try:
            self.centroids = np.array(centroids, dtype=np.float64, copy=True)
        except (TypeError, ValueError) as e:
            raise DegenerateInitError(f"Initial centroids are not numeric: {e}") from e

    def initialize(self, points: PointSet, k: int, rng: np.random.Generator) -> Array2D:
        expected = (k, points.n_dims)
        if self.centroids.shape != expected:
            raise DegenerateInitError(
                f"Initial centroids must have shape {expected}, got {self.centroids.shape}"
            )
        if not np.all(np.isfinite(self.centroids)):
            raise DegenerateInitError("Initial centroids contain NaN or infinite values")
        return self.centroids.copy()


def create_initializer(
    name: str,
    *,
    percentage: float = 0.02,
    samplings: int = 100,
    iterations: int = 1,
    initial_centroids: Any = None,
) -> Initializer:
    """
    Create an initializer by name.

    Caller-supplied *initial_centroids* take precedence over *name*.

    Raises:
        ValueError: If *name* is unknown
        InvalidPercentageError: If a refined start gets a bad percentage
    """
    if initial_centroids is not None:
        return GivenCentroids(initial_centroids)

    name = name.lower()
    if name == "random":
        return RandomPartition()
    elif name == "refined":
        return RefinedStart(percentage, samplings, iterations)
    elif name in ("kmeans++", "kmeanspp"):
        return KMeansPlusPlus()
    else:
        raise ValueError(
            f"Unknown initializer: {name}. "
            f"Available initializers: random, refined, kmeans++"
        )
