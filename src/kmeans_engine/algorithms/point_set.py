"""
Point storage and exact distance kernels.

Every assignment strategy computes exact distances through the kernels in
this module, so a given (point, centroid) pair produces the same
floating-point value no matter which strategy asks for it.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union
import numpy as np
import pandas as pd

from ..errors import InvalidDatasetError

Array2D = np.ndarray
DataIn = Union[np.ndarray, pd.DataFrame, List[List[float]]]


def pairwise_sq_distances(X: Array2D, C: Array2D) -> Array2D:
    """
    Squared Euclidean distances between every row of *X* and every row of *C*.

    Accumulates one dimension at a time, so each entry depends only on the
    two rows involved and not on the shapes of *X* and *C*.

    Args:
        X: (n, d) points
        C: (k, d) centroids

    Returns:
        (n, k) array of squared distances
    """
    out = np.zeros((X.shape[0], C.shape[0]), dtype=np.float64)
    for j in range(X.shape[1]):
        diff = X[:, j, None] - C[None, :, j]
        out += diff * diff
    return out


def row_sq_distances(X: Array2D, Y: Array2D) -> np.ndarray:
    """Squared distances between matching rows of *X* and *Y* (same shape)."""
    out = np.zeros(X.shape[0], dtype=np.float64)
    for j in range(X.shape[1]):
        diff = X[:, j] - Y[:, j]
        out += diff * diff
    return out


def as_matrix(data: Any, name: str = "dataset") -> Array2D:
    """
    Coerce *data* into a finite (n, d) float64 array.

    Accepts numpy arrays, pandas DataFrames and nested sequences.

    Raises:
        InvalidDatasetError: If the data is empty, not 2-D, or non-finite
    """
    try:
        if isinstance(data, pd.DataFrame):
            X = data.to_numpy(dtype=np.float64)
        else:
            X = np.asarray(data, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidDatasetError(f"{name} is not numeric: {e}") from e

    if X.ndim != 2:
        raise InvalidDatasetError(f"{name} must be 2-D (n, d); got shape {X.shape}")
    if X.shape[0] < 1 or X.shape[1] < 1:
        raise InvalidDatasetError(f"{name} must have at least one row and column; got shape {X.shape}")
    if not np.all(np.isfinite(X)):
        raise InvalidDatasetError(f"{name} contains NaN or infinite values")
    return X


class PointSet:
    """
    Immutable view over N points of dimension D.

    The underlying array is a private float64 copy marked read-only, so no
    strategy can modify the data it clusters.
    """

    def __init__(self, data: DataIn, columns: Optional[List[str]] = None):
        X = np.array(as_matrix(data), dtype=np.float64, copy=True)
        X.flags.writeable = False
        self._data = X
        if columns is None and isinstance(data, pd.DataFrame):
            columns = list(data.columns)
        self.columns = columns

    @property
    def data(self) -> Array2D:
        return self._data

    @property
    def n_points(self) -> int:
        return self._data.shape[0]

    @property
    def n_dims(self) -> int:
        return self._data.shape[1]

    @property
    def shape(self) -> tuple:
        return self._data.shape

    def __len__(self) -> int:
        return self.n_points

    def __getitem__(self, idx) -> np.ndarray:
        return self._data[idx]

    def sq_distances_to(self, centroids: Array2D, idx=None) -> Array2D:
        """Squared distances from the points (or the subset *idx*) to *centroids*."""
        X = self._data if idx is None else self._data[idx]
        return pairwise_sq_distances(X, centroids)

    def distortion(self, centroids: Array2D, labels: np.ndarray) -> float:
        """Sum of squared distances from each point to its assigned centroid."""
        return float(np.sum(row_sq_distances(self._data, centroids[labels])))

    def __repr__(self) -> str:
        return f"PointSet(n_points={self.n_points}, n_dims={self.n_dims})"
