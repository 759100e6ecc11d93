"""
Entry point for hosts (CLIs, notebooks, bindings).

``cluster`` checks that the required inputs are present, runs the engine
described by ``ClusterOptions`` and shapes the output. Every failure is
raised as a ``KMeansError`` subclass for the host to report.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union
import numpy as np
import pandas as pd

from .algorithms.engine import EngineState
from .algorithms.options import ClusterOptions, build_engine
from .algorithms.output import OutputFormatter
from .algorithms.point_set import PointSet
from .errors import MissingInputError
from .utils.logging_config import get_logger

logger = get_logger(__name__)

Table = Union[np.ndarray, pd.DataFrame]


@dataclass
class ClusterResult:
    """
    Result of ``cluster``.

    Attributes:
        output: Labels-only table, dataset plus labels, or the mutated input
        centroids: (n_clusters, d) final centroids
        n_clusters: Number of clusters that survived the run
        labels: (n,) final labels
        distortion: Sum of squared distances to the assigned centroids
        n_iter: Assignment passes performed
        state: Terminal engine state
        cluster_ids: Original index of each surviving cluster
        distance_evaluations: Exact distances computed during the run
    """

    output: Table
    centroids: Table
    n_clusters: int
    labels: np.ndarray
    distortion: float
    n_iter: int
    state: EngineState
    cluster_ids: np.ndarray
    distance_evaluations: int = 0

    def __repr__(self) -> str:
        return (
            f"ClusterResult(n_clusters={self.n_clusters}, n_iter={self.n_iter}, "
            f"state={self.state.value}, distortion={self.distortion:.6g})"
        )


def cluster(
    dataset: Any = None,
    clusters: Optional[int] = None,
    options: Optional[ClusterOptions] = None,
    **overrides: Any,
) -> ClusterResult:
    """
    Run k-means on *dataset*.

    Example:
        result = cluster(X, 5, algorithm="elkan", labels_only=True)
        result.output.shape   # (n, 1)

    Args:
        dataset: (n, d) numpy array, nested list or pandas DataFrame
        clusters: Number of clusters, 1 <= clusters <= n
        options: Run options; defaults come from the environment config
        **overrides: Individual ClusterOptions fields to override

    Returns:
        ClusterResult

    Raises:
        MissingInputError: If dataset or clusters is missing
        InvalidClusterCountError: If clusters is not in [1, n]
        InvalidPercentageError: If a refined start gets a bad percentage
        DegenerateInitError: If initial centroids have the wrong shape
        InvalidDatasetError: If the dataset is empty, not 2-D or non-finite
        InPlaceUnsupportedError: If in_place is set for a dataset that cannot grow a column
        ValueError: For unknown option names or values
    """
    if dataset is None:
        raise MissingInputError("A dataset must be specified")
    if clusters is None:
        raise MissingInputError("The number of clusters must be specified")

    opts = options if options is not None else ClusterOptions.from_config()
    if overrides:
        opts = opts.with_overrides(**overrides)

    formatter = OutputFormatter(labels_only=opts.labels_only, in_place=opts.in_place)
    formatter.check_dataset(dataset)
    points = PointSet(dataset)
    engine = build_engine(opts)
    result = engine.run(points, clusters)

    return ClusterResult(
        output=formatter.format_output(dataset, points, result.labels),
        centroids=formatter.format_centroids(result.centroids, points.columns),
        n_clusters=result.n_clusters,
        labels=result.labels,
        distortion=result.distortion,
        n_iter=result.n_iter,
        state=result.state,
        cluster_ids=result.cluster_ids,
        distance_evaluations=result.distance_evaluations,
    )
