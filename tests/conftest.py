"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import numpy as np
import pandas as pd
import pytest

from kmeans_engine.algorithms.point_set import PointSet


@pytest.fixture
def random_data():
    """100 x 4 uniform random points, matching the cross-strategy check."""
    rng = np.random.default_rng(42)
    return rng.random((100, 4))


@pytest.fixture
def small_data():
    """10 x 4 uniform random points."""
    rng = np.random.default_rng(7)
    return rng.random((10, 4))


@pytest.fixture
def blob_data():
    """
    Three well-separated Gaussian blobs.

    Returns:
        Tuple of (X of shape (90, 3), true labels of shape (90,))
    """
    rng = np.random.default_rng(0)
    centers = np.array([[0.0, 0.0, 0.0], [10.0, 10.0, 0.0], [0.0, 10.0, 10.0]])
    X = np.vstack([c + rng.standard_normal((30, 3)) * 0.3 for c in centers])
    truth = np.repeat(np.arange(3), 30)
    return X, truth


@pytest.fixture
def random_points(random_data):
    return PointSet(random_data)


@pytest.fixture
def small_frame(small_data):
    """10 x 4 DataFrame with named columns."""
    return pd.DataFrame(small_data, columns=["a", "b", "c", "d"])
