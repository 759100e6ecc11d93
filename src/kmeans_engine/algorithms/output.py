"""
Result shaping.

Turns the final labels and centroids into the tables handed back to the
caller: the dataset plus a label column (full mode), the label column alone
(labels-only mode), or the caller's own DataFrame or array with the label column
appended (in-place mode). Centroids are always returned as a separate table.
"""

from __future__ import annotations

from typing import Any, List, Optional, Union
import numpy as np
import pandas as pd

from ..errors import InPlaceUnsupportedError
from ..utils.logging_config import get_logger
from .point_set import PointSet

logger = get_logger(__name__)

Table = Union[np.ndarray, pd.DataFrame]


def _unique_column(df: pd.DataFrame, name: str) -> str:
    if name not in df.columns:
        return name
    suffix = 1
    while f"{name}_{suffix}" in df.columns:
        suffix += 1
    return f"{name}_{suffix}"


class OutputFormatter:
    """
    Shapes clustering results for the caller.

    Args:
        labels_only: Return only the label column
        in_place: Append the label column to the caller's DataFrame or array
        label_column: Name of the label column for DataFrame output
    """

    def __init__(self, labels_only: bool = False, in_place: bool = False, label_column: str = "label"):
        self.labels_only = labels_only
        self.in_place = in_place
        self.label_column = label_column

    def check_dataset(self, dataset: Any) -> None:
        """
        Fail early when in-place output cannot be honoured for *dataset*.

        DataFrames always qualify. A numpy array qualifies when it is 2-D,
        C-contiguous, writeable and owns its buffer, so it can be resized.

        Raises:
            InPlaceUnsupportedError: If in_place is set and *dataset* cannot grow a column
        """
        if not self.in_place or isinstance(dataset, pd.DataFrame):
            return
        if not isinstance(dataset, np.ndarray):
            raise InPlaceUnsupportedError(
                "In-place output needs a pandas DataFrame or a numpy array that owns its data; "
                f"got {type(dataset).__name__}"
            )
        flags = dataset.flags
        if dataset.ndim != 2 or not (flags.owndata and flags.c_contiguous and flags.writeable):
            raise InPlaceUnsupportedError(
                "In-place output on a numpy array needs a writeable 2-D C-contiguous array "
                "that owns its data; pass a copy or a DataFrame"
            )

    @staticmethod
    def _append_column(dataset: np.ndarray, labels: np.ndarray) -> np.ndarray:
        n, d = dataset.shape
        values = dataset.copy()
        # Growing the last axis reflows the buffer, so the rows are written back
        dataset.resize((n, d + 1), refcheck=False)
        dataset[:, :d] = values
        dataset[:, d] = labels
        return dataset

    def format_output(self, dataset: Any, points: PointSet, labels: np.ndarray) -> Table:
        """
        Build the labels-only, full or in-place output table.

        Args:
            dataset: The caller's original dataset object
            points: The PointSet built from *dataset*
            labels: (n,) final cluster labels

        Returns:
            Array or DataFrame with n rows
        """
        labels = np.asarray(labels, dtype=np.int64)

        if self.in_place:
            self.check_dataset(dataset)
            if self.labels_only:
                logger.warning("labels_only is ignored when in_place is set")
            if isinstance(dataset, np.ndarray):
                return self._append_column(dataset, labels)
            column = _unique_column(dataset, self.label_column)
            dataset[column] = labels
            return dataset

        if isinstance(dataset, pd.DataFrame):
            if self.labels_only:
                return pd.DataFrame({self.label_column: labels}, index=dataset.index)
            out = dataset.copy()
            out[_unique_column(out, self.label_column)] = labels
            return out

        if self.labels_only:
            return labels.reshape(-1, 1)
        return np.column_stack([points.data, labels.astype(np.float64)])

    def format_centroids(self, centroids: np.ndarray, columns: Optional[List[str]] = None) -> Table:
        """Return centroids as a (k, d) array, or a DataFrame when column names are known."""
        centroids = np.array(centroids, dtype=np.float64, copy=True)
        if columns is not None:
            return pd.DataFrame(centroids, columns=columns)
        return centroids
