"""
kmeans_engine - Core Package

An in-memory Euclidean k-means engine whose five assignment strategies
(naive, Elkan, Hamerly, kd-tree dual-tree, cover-tree dual-tree) produce
identical cluster assignments.

This package provides:
- Assignment strategies and the spatial trees they use
- Initializers and empty-cluster policies
- The iteration engine and output shaping
- ``cluster``, the entry point for host applications
"""

__version__ = "0.1.0"

from .errors import (
    KMeansError,
    InvalidClusterCountError,
    InvalidPercentageError,
    MissingInputError,
    DegenerateInitError,
    InvalidDatasetError,
    InPlaceUnsupportedError,
)
from .algorithms import ClusterOptions, EngineState, KMeansEngine, compare_algorithms
from .api import ClusterResult, cluster

# Explicitly import subpackages to ensure they're discoverable
from . import algorithms
from . import utils

__all__ = [
    "cluster",
    "ClusterResult",
    "ClusterOptions",
    "EngineState",
    "KMeansEngine",
    "compare_algorithms",
    "KMeansError",
    "InvalidClusterCountError",
    "InvalidPercentageError",
    "MissingInputError",
    "DegenerateInitError",
    "InvalidDatasetError",
    "InPlaceUnsupportedError",
    "algorithms",
    "utils",
]
