"""
Side-by-side runs of several assignment strategies.

Runs the same dataset, cluster count, initializer and seed through each
strategy and reports whether their final labelings agree. Runs are
independent (each gets its own engine and strategy instance over a shared
read-only PointSet), so they can execute in a thread pool.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import numpy as np
import pandas as pd

from ..utils.logging_config import get_logger
from .clustering import adjusted_rand_index
from .engine import EngineResult
from .options import ClusterOptions, build_engine
from .point_set import PointSet
from .strategies import get_available_strategies

logger = get_logger(__name__)


@dataclass
class ComparisonResult:
    """Results from a strategy comparison."""

    reference: str
    results: Dict[str, EngineResult] = field(default_factory=dict)
    mismatches: Dict[str, int] = field(default_factory=dict)
    ari: Dict[str, float] = field(default_factory=dict)

    @property
    def agree(self) -> bool:
        """True when every strategy produced exactly the reference labels."""
        return all(count == 0 for count in self.mismatches.values())

    def to_frame(self) -> pd.DataFrame:
        """
        One row per strategy with iteration count, distortion, work and agreement.

        Returns:
            DataFrame indexed by algorithm name
        """
        rows = []
        for name, res in self.results.items():
            rows.append({
                "algorithm": name,
                "state": res.state.value,
                "n_iter": res.n_iter,
                "n_clusters": res.n_clusters,
                "distortion": res.distortion,
                "distance_evaluations": res.distance_evaluations,
                "mismatches": self.mismatches.get(name, 0),
                "ari_vs_reference": self.ari.get(name, 1.0),
            })
        if not rows:
            return pd.DataFrame()
        return pd.DataFrame(rows).set_index("algorithm")


def compare_algorithms(
    dataset: Any,
    clusters: int,
    algorithms: Optional[Sequence[str]] = None,
    options: Optional[ClusterOptions] = None,
    *,
    reference: str = "naive",
    n_workers: int = 1,
) -> ComparisonResult:
    """
    Run several strategies on the same input and compare their labels.

    Every run uses the same options (notably the same initializer and seed),
    so the strategies start from identical centroids.

    Args:
        dataset: (n, d) data accepted by ``PointSet``
        clusters: Number of clusters
        algorithms: Strategy names (default: all available)
        options: Shared run options; ``algorithm`` is overridden per run
        reference: Strategy whose labels the others are checked against
        n_workers: Thread pool size; 1 runs sequentially

    Returns:
        ComparisonResult with per-strategy results and mismatch counts

    Raises:
        ValueError: If n_workers < 1 or the reference is not among the runs
    """
    if n_workers < 1:
        raise ValueError(f"n_workers must be >= 1, got {n_workers}")
    names: List[str] = list(algorithms) if algorithms is not None else get_available_strategies()
    if reference not in names:
        names.insert(0, reference)

    points = PointSet(dataset)
    base = options if options is not None else ClusterOptions.from_config()
    if base.initial_centroids is None and base.seed is None:
        # Without a fixed seed each run would start from different centroids
        base = base.with_overrides(seed=int(np.random.default_rng().integers(0, 2**31 - 1)))
        logger.debug("No seed given; using %d for every run", base.seed)
    engines = {name: build_engine(base.with_overrides(algorithm=name)) for name in names}

    def _run(name: str) -> EngineResult:
        return engines[name].run(points, clusters)

    if n_workers == 1:
        finished = {name: _run(name) for name in names}
    else:
        with ThreadPoolExecutor(max_workers=n_workers) as executor:
            finished = dict(zip(names, executor.map(_run, names)))

    out = ComparisonResult(reference=reference, results=finished)
    ref_labels = finished[reference].labels
    for name, res in finished.items():
        if name == reference:
            continue
        out.mismatches[name] = int(np.sum(res.labels != ref_labels))
        out.ari[name] = adjusted_rand_index(ref_labels, res.labels)
        if out.mismatches[name]:
            logger.warning(
                "%s disagrees with %s on %d of %d points",
                name, reference, out.mismatches[name], points.n_points,
            )
    return out
