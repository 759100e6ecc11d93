"""
Run options and engine construction.

``ClusterOptions`` gathers every knob of a clustering run; ``build_engine``
turns it into a ready ``KMeansEngine``. Fields not given explicitly default
to the environment configuration (see ``kmeans_engine.config``).
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from ..config import Config, get_config
from .empty_clusters import create_empty_cluster_policy
from .engine import KMeansEngine
from .initialization import create_initializer
from .strategies import create_strategy


@dataclass
class ClusterOptions:
    """Configuration for a single clustering run."""

    algorithm: str = "naive"  # naive | elkan | hamerly | dualtree | dualtree-covertree
    initializer: str = "random"  # random | refined | kmeans++
    refined_percentage: float = 0.02
    refined_samplings: int = 100
    refined_iterations: int = 1
    max_iterations: int = 1000  # 0 means iterate until convergence
    empty_cluster_policy: str = "default"  # default | allow | kill
    labels_only: bool = False
    in_place: bool = False
    initial_centroids: Optional[Any] = None
    seed: Optional[int] = None
    leaf_size: int = 8

    @classmethod
    def from_config(cls, cfg: Optional[Config] = None, **overrides: Any) -> "ClusterOptions":
        """
        Build options from environment configuration, then apply *overrides*.

        Raises:
            ValueError: If an override names an unknown option, or a
                KMEANS_* variable is malformed when the environment is first read
        """
        cfg = cfg or get_config()
        engine = cfg.engine
        opts = cls(
            algorithm=engine.algorithm,
            initializer=engine.initializer,
            refined_percentage=engine.refined_percentage,
            refined_samplings=engine.refined_samplings,
            max_iterations=engine.max_iterations,
            empty_cluster_policy=engine.empty_cluster_policy,
            seed=engine.seed,
            leaf_size=engine.leaf_size,
        )
        return opts.with_overrides(**overrides)

    def with_overrides(self, **overrides: Any) -> "ClusterOptions":
        """Return a copy with the given fields replaced."""
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ValueError(
                f"Unknown option(s): {', '.join(unknown)}. "
                f"Available options: {', '.join(sorted(known))}"
            )
        return replace(self, **overrides)


def build_engine(options: ClusterOptions) -> KMeansEngine:
    """
    Create the engine described by *options*.

    Raises:
        ValueError: For unknown algorithm, initializer or policy names
        InvalidPercentageError: If a refined start is requested with a
            percentage outside (0, 1]
    """
    strategy = create_strategy(options.algorithm, leaf_size=options.leaf_size)
    initializer = create_initializer(
        options.initializer,
        percentage=options.refined_percentage,
        samplings=options.refined_samplings,
        iterations=options.refined_iterations,
        initial_centroids=options.initial_centroids,
    )
    policy = create_empty_cluster_policy(options.empty_cluster_policy)
    return KMeansEngine(
        strategy=strategy,
        initializer=initializer,
        empty_policy=policy,
        max_iterations=options.max_iterations,
        seed=options.seed,
    )
