"""
Dual-tree nearest-centroid assignment.

A tree over the points (built once per run) is traversed together with a
tree over the centroids (rebuilt on every call). Each point keeps the best
centroid found so far; a pair of nodes is pruned when the minimum distance
between them exceeds the largest best distance of any point in the point
node, because then no centroid in the centroid node can beat or tie any of
those points. The traversal is identical for both tree types; only the node
geometry differs.
"""

from __future__ import annotations

from typing import Callable, Optional
import numpy as np

from ...utils.logging_config import get_logger
from ..point_set import PointSet, pairwise_sq_distances, row_sq_distances
from ..trees import CoverTree, KDTree, SpaceTree, TreeNode
from .base import AssignmentResult, AssignmentStrategy, certainly_below

logger = get_logger(__name__)

TreeBuilder = Callable[[np.ndarray], SpaceTree]


class DualTreeStrategy(AssignmentStrategy):
    """
    Dual-tree assignment parameterised by a tree builder.

    Args:
        tree_builder: Callable building a ``SpaceTree`` from an (m, d) array
    """

    name = "dualtree-generic"

    def __init__(self, tree_builder: TreeBuilder):
        self.tree_builder = tree_builder
        self._points: Optional[PointSet] = None
        self._point_tree: Optional[SpaceTree] = None
        self._labels: Optional[np.ndarray] = None
        # Per-call traversal state
        self._X: Optional[np.ndarray] = None
        self._C: Optional[np.ndarray] = None
        self._best: Optional[np.ndarray] = None
        self._best_sq: Optional[np.ndarray] = None
        self._upper: Optional[np.ndarray] = None
        self._bounds: Optional[np.ndarray] = None
        self._evaluations = 0
        self.pruned = 0

    def reset(self) -> None:
        self._points = None
        self._point_tree = None
        self._labels = None

    @property
    def point_tree(self) -> Optional[SpaceTree]:
        return self._point_tree

    def assign(self, points: PointSet, centroids: np.ndarray) -> AssignmentResult:
        centroids = np.asarray(centroids, dtype=np.float64)
        k = centroids.shape[0]
        if self._points is not points:
            self._points = points
            self._point_tree = self.tree_builder(points.data)
            self._labels = None

        centroid_tree = self.tree_builder(centroids)

        # Warm start: the previous label gives every point a finite bound
        if self._labels is not None and self._labels.max(initial=-1) < k:
            start = self._labels.copy()
        else:
            start = np.zeros(points.n_points, dtype=np.int64)

        self._X = points.data
        self._C = centroids
        self._best = start
        self._best_sq = row_sq_distances(points.data, centroids[start])
        self._upper = np.sqrt(self._best_sq)
        self._evaluations = points.n_points
        self.pruned = 0

        self._bounds = np.empty(self._point_tree.n_nodes, dtype=np.float64)
        self._init_bounds(self._point_tree.root)
        self._traverse(self._point_tree.root, centroid_tree.root)

        labels = self._best
        self._labels = labels.copy()
        evaluations = self._evaluations
        logger.debug(
            "Dual-tree pass (%s): %d node pairs pruned, %d distance evaluations",
            self.name, self.pruned, evaluations,
        )
        self._X = self._C = self._best = self._best_sq = self._upper = self._bounds = None
        return self._result(points, centroids, labels, evaluations)

    def _init_bounds(self, node: TreeNode) -> float:
        if node.is_leaf:
            bound = float(self._upper[node.indices].max())
        else:
            bound = max(self._init_bounds(child) for child in node.children)
        self._bounds[node.id] = bound
        return bound

    def _base_case(self, q: TreeNode, r: TreeNode) -> None:
        sq = pairwise_sq_distances(self._X[q.indices], self._C[r.indices])
        self._evaluations += sq.size
        # r.indices is sorted, so argmin already prefers the lower centroid index
        local = np.argmin(sq, axis=1)
        cand_sq = sq[np.arange(len(q.indices)), local]
        cand = r.indices[local]

        cur_sq = self._best_sq[q.indices]
        cur = self._best[q.indices]
        better = (cand_sq < cur_sq) | ((cand_sq == cur_sq) & (cand < cur))
        if better.any():
            idx = q.indices[better]
            self._best[idx] = cand[better]
            self._best_sq[idx] = cand_sq[better]
            self._upper[idx] = np.sqrt(cand_sq[better])
        self._bounds[q.id] = float(self._upper[q.indices].max())

    def _traverse(self, q: TreeNode, r: TreeNode) -> None:
        if certainly_below(self._bounds[q.id], q.min_distance(r)):
            self.pruned += 1
            return

        if q.is_leaf and r.is_leaf:
            self._base_case(q, r)
        elif q.is_leaf or (not r.is_leaf and r.size >= q.size):
            # Closest centroid subtrees first, so bounds shrink before the far ones are scored
            for child in sorted(r.children, key=q.min_distance):
                self._traverse(q, child)
        else:
            for child in q.children:
                self._traverse(child, r)
            self._bounds[q.id] = max(self._bounds[child.id] for child in q.children)


class DualTreeKDStrategy(DualTreeStrategy):
    """Dual-tree assignment over kd-trees."""

    name = "dualtree"

    def __init__(self, leaf_size: int = 8):
        self.leaf_size = leaf_size
        super().__init__(lambda data: KDTree(data, leaf_size=leaf_size))

    def __repr__(self) -> str:
        return f"DualTreeKDStrategy(leaf_size={self.leaf_size})"


class DualTreeCoverStrategy(DualTreeStrategy):
    """Dual-tree assignment over cover trees."""

    name = "dualtree-covertree"

    def __init__(self):
        super().__init__(CoverTree)
