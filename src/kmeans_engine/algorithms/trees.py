"""
Spatial trees for dual-tree assignment.

Both trees expose the same node interface: ``id``, ``indices`` (all
descendant rows, sorted ascending), ``children``, ``is_leaf`` and
``min_distance(other)``, a lower bound on the distance between any row under
one node and any row under the other. ``KDTree`` bounds nodes with
axis-aligned boxes over a ``scipy.spatial.KDTree`` partition, ``CoverTree``
with metric balls around a centre row.
"""

from __future__ import annotations

from typing import List, Optional
import numpy as np
from scipy.spatial import KDTree as ScipyKDTree

from .point_set import row_sq_distances

Array2D = np.ndarray


class TreeNode:
    """Common node bookkeeping shared by both tree types."""

    def __init__(self, node_id: int, indices: np.ndarray):
        self.id = node_id
        self.indices = indices
        self.children: List["TreeNode"] = []

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def size(self) -> int:
        return len(self.indices)

    def min_distance(self, other: "TreeNode") -> float:
        raise NotImplementedError

    def iter_nodes(self):
        """Yield this node and every descendant, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class SpaceTree:
    """Base class holding the root and node count."""

    def __init__(self, data: Array2D):
        self.data = np.asarray(data, dtype=np.float64)
        self.n_nodes = 0
        self.root: Optional[TreeNode] = None

    def _next_id(self) -> int:
        node_id = self.n_nodes
        self.n_nodes += 1
        return node_id

    def leaves(self) -> List[TreeNode]:
        return [node for node in self.root.iter_nodes() if node.is_leaf]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n_rows={len(self.data)}, n_nodes={self.n_nodes})"


# ------------------------------------------------------------------
# kd-tree (axis-aligned boxes)
# ------------------------------------------------------------------

class KDNode(TreeNode):
    """kd-tree node bounded by the tight box around its rows."""

    def __init__(self, node_id: int, indices: np.ndarray, lo: np.ndarray, hi: np.ndarray):
        super().__init__(node_id, indices)
        self.lo = lo
        self.hi = hi

    def min_distance(self, other: "KDNode") -> float:
        gap = np.maximum(0.0, np.maximum(other.lo - self.hi, self.lo - other.hi))
        return float(np.sqrt(np.dot(gap, gap)))


class KDTree(SpaceTree):
    """
    Axis-aligned space-partitioning tree.

    The partition comes from ``scipy.spatial.KDTree`` (leaves hold at most
    ``leaf_size`` rows unless they coincide); each scipy node is wrapped in a
    ``KDNode`` whose box is the tight bounding box of its rows.
    """

    def __init__(self, data: Array2D, leaf_size: int = 8):
        super().__init__(data)
        if leaf_size < 1:
            raise ValueError(f"leaf_size must be >= 1, got {leaf_size}")
        self.leaf_size = leaf_size
        self.index = ScipyKDTree(self.data, leafsize=leaf_size)
        self.root = self._wrap(self.index.tree)

    def _wrap(self, node) -> Optional[KDNode]:
        if isinstance(node, ScipyKDTree.innernode):
            children = [c for c in (self._wrap(node.less), self._wrap(node.greater)) if c is not None]
            if not children:
                return None
            if len(children) == 1:
                return children[0]
            indices = np.sort(np.concatenate([c.indices for c in children]))
        else:
            indices = np.sort(np.asarray(node.idx, dtype=np.int64))
            children = []
            if indices.size == 0:
                return None

        lo = np.minimum.reduce([c.lo for c in children]) if children else self.data[indices].min(axis=0)
        hi = np.maximum.reduce([c.hi for c in children]) if children else self.data[indices].max(axis=0)
        kd = KDNode(self._next_id(), indices, lo, hi)
        kd.children = children
        return kd


# ------------------------------------------------------------------
# Cover tree (metric balls)
# ------------------------------------------------------------------

class CoverNode(TreeNode):
    """Cover-tree node: a centre row and the radius covering its descendants."""

    def __init__(self, node_id: int, indices: np.ndarray, center: np.ndarray, radius: float, scale: Optional[int]):
        super().__init__(node_id, indices)
        self.center = center
        self.radius = radius
        self.scale = scale

    def min_distance(self, other: "CoverNode") -> float:
        diff = self.center - other.center
        between = float(np.sqrt(np.dot(diff, diff)))
        return max(0.0, between - self.radius - other.radius)


class CoverTree(SpaceTree):
    """
    Cover tree built in batch.

    A node at scale ``s`` covers its rows within ``2**s`` of its centre. Its
    children are a greedy ``2**(s-1)`` net over those rows, and the first
    child always keeps the parent's centre. Nodes whose rows all coincide
    with the centre are leaves.
    """

    def __init__(self, data: Array2D, leaf_size: int = 1):
        super().__init__(data)
        if leaf_size < 1:
            raise ValueError(f"leaf_size must be >= 1, got {leaf_size}")
        self.leaf_size = leaf_size
        indices = np.arange(len(self.data))
        self.root = self._build(0, indices)

    def _dist_to(self, center: int, indices: np.ndarray) -> np.ndarray:
        rows = self.data[indices]
        return np.sqrt(row_sq_distances(rows, np.broadcast_to(self.data[center], rows.shape)))

    def _build(self, center: int, indices: np.ndarray) -> CoverNode:
        dist = self._dist_to(center, indices)
        radius = float(dist.max())
        if radius == 0.0 or len(indices) <= self.leaf_size:
            return CoverNode(self._next_id(), np.sort(indices), self.data[center], radius, None)

        scale = int(np.ceil(np.log2(radius)))
        node = CoverNode(self._next_id(), np.sort(indices), self.data[center], radius, scale)
        child_cover = 2.0 ** (scale - 1)

        # The centre goes first so it becomes the self-child
        order = np.argsort(dist, kind="stable")
        pending = indices[order]
        pending = np.concatenate(([center], pending[pending != center]))
        while pending.size:
            child_center = int(pending[0])
            d = self._dist_to(child_center, pending)
            members = d <= child_cover
            node.children.append(self._build(child_center, pending[members]))
            pending = pending[~members]
        return node
