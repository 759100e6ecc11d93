"""
Algorithm Core Library - k-means engine, assignment strategies and helpers.

This module provides the clustering core with minimal dependencies,
separate from any host layer. Designed for reuse and testing.
"""

from .point_set import PointSet, pairwise_sq_distances, row_sq_distances
from .clustering import adjusted_rand_index, update_centroids
from .initialization import (
    Initializer,
    RandomPartition,
    RefinedStart,
    KMeansPlusPlus,
    GivenCentroids,
    create_initializer,
)
from .strategies import (
    AssignmentResult,
    AssignmentStrategy,
    NaiveStrategy,
    ElkanStrategy,
    HamerlyStrategy,
    DualTreeKDStrategy,
    DualTreeCoverStrategy,
    create_strategy,
    get_available_strategies,
)
from .trees import KDTree, CoverTree
from .empty_clusters import (
    ClusterState,
    EmptyClusterPolicy,
    DefaultPolicy,
    AllowEmptyPolicy,
    KillEmptyPolicy,
    create_empty_cluster_policy,
)
from .engine import EngineResult, EngineState, KMeansEngine
from .output import OutputFormatter
from .options import ClusterOptions, build_engine
from .comparison import ComparisonResult, compare_algorithms

__all__ = [
    # Data
    "PointSet",
    "pairwise_sq_distances",
    "row_sq_distances",
    "update_centroids",
    # Metrics
    "adjusted_rand_index",
    # Initialization
    "Initializer",
    "RandomPartition",
    "RefinedStart",
    "KMeansPlusPlus",
    "GivenCentroids",
    "create_initializer",
    # Assignment
    "AssignmentResult",
    "AssignmentStrategy",
    "NaiveStrategy",
    "ElkanStrategy",
    "HamerlyStrategy",
    "DualTreeKDStrategy",
    "DualTreeCoverStrategy",
    "create_strategy",
    "get_available_strategies",
    "KDTree",
    "CoverTree",
    # Empty clusters
    "ClusterState",
    "EmptyClusterPolicy",
    "DefaultPolicy",
    "AllowEmptyPolicy",
    "KillEmptyPolicy",
    "create_empty_cluster_policy",
    # Engine
    "EngineResult",
    "EngineState",
    "KMeansEngine",
    "OutputFormatter",
    "ClusterOptions",
    "build_engine",
    # Comparison
    "ComparisonResult",
    "compare_algorithms",
]
