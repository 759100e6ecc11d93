"""
Tests for the k-means iteration loop.
"""

import numpy as np
import pytest

from kmeans_engine.algorithms.clustering import adjusted_rand_index
from kmeans_engine.algorithms.empty_clusters import AllowEmptyPolicy, KillEmptyPolicy
from kmeans_engine.algorithms.engine import EngineState, KMeansEngine, validate_cluster_count
from kmeans_engine.algorithms.initialization import GivenCentroids, RefinedStart
from kmeans_engine.algorithms.point_set import PointSet
from kmeans_engine.algorithms.strategies import NaiveStrategy, create_strategy, get_available_strategies
from kmeans_engine.errors import DegenerateInitError, InvalidClusterCountError

ALGORITHMS = get_available_strategies()


# ------------------------------------------------------------------
# validate_cluster_count
# ------------------------------------------------------------------


@pytest.mark.parametrize("bad", [0, -1, 11, 2.5, True, "3", None])
def test_validate_cluster_count_rejects(bad):
    with pytest.raises(InvalidClusterCountError):
        validate_cluster_count(bad, 10)


@pytest.mark.parametrize("good", [1, 10, np.int64(4)])
def test_validate_cluster_count_accepts(good):
    assert validate_cluster_count(good, 10) == int(good)


# ------------------------------------------------------------------
# Run lifecycle
# ------------------------------------------------------------------


def test_engine_recovers_blobs(blob_data):
    """Starting from one point per blob, the engine finds the blobs."""
    X, truth = blob_data
    engine = KMeansEngine(initializer=GivenCentroids(X[[0, 30, 60]]))

    result = engine.run(PointSet(X), 3)

    assert result.state == EngineState.CONVERGED
    assert result.converged
    assert engine.state == EngineState.CONVERGED
    assert result.n_clusters == 3
    assert adjusted_rand_index(result.labels, truth) == pytest.approx(1.0)
    np.testing.assert_array_equal(result.cluster_ids, [0, 1, 2])


def test_engine_result_shapes(random_points):
    result = KMeansEngine(seed=0).run(random_points, 5)

    assert result.labels.shape == (100,)
    assert result.labels.dtype == np.int64
    assert result.centroids.shape == (5, 4)
    assert len(result.distortion_history) == result.n_iter
    assert result.state.is_success


def test_converged_labels_are_nearest_centroid(random_points):
    """At convergence one more assignment pass changes nothing."""
    for algorithm in ALGORITHMS:
        engine = KMeansEngine(strategy=create_strategy(algorithm), seed=1, max_iterations=0)
        result = engine.run(random_points, 5)

        assert result.state == EngineState.CONVERGED
        again = NaiveStrategy().assign(random_points, result.centroids)
        np.testing.assert_array_equal(again.labels, result.labels)
        assert result.distortion == pytest.approx(again.distortion)


def test_iteration_limit(random_points):
    """A cap of one pass stops before convergence can be observed."""
    engine = KMeansEngine(max_iterations=1, seed=0)
    result = engine.run(random_points, 5)

    assert result.n_iter == 1
    assert result.state == EngineState.ITERATION_LIMIT_REACHED
    assert not result.converged
    assert result.state.is_success


@pytest.mark.parametrize("cap", [1, 2])
def test_iteration_limit_labels_match_final_centroids(random_points, cap):
    """Stopping at the cap still leaves every point on its nearest returned centroid."""
    result = KMeansEngine(max_iterations=cap, seed=0).run(random_points, 5)

    assert result.state == EngineState.ITERATION_LIMIT_REACHED
    assert result.n_iter == cap
    assert len(result.distortion_history) == cap
    nearest = NaiveStrategy().assign(random_points, result.centroids)
    np.testing.assert_array_equal(result.labels, nearest.labels)
    assert result.distortion == pytest.approx(nearest.distortion)


@pytest.mark.parametrize("cap", [2, 3, 5])
def test_iteration_count_never_exceeds_cap(random_points, cap):
    result = KMeansEngine(max_iterations=cap, seed=2).run(random_points, 6)
    assert result.n_iter <= cap
    if result.state == EngineState.ITERATION_LIMIT_REACHED:
        assert result.n_iter == cap


def test_zero_max_iterations_means_no_limit(random_points):
    result = KMeansEngine(max_iterations=0, seed=3).run(random_points, 5)
    assert result.state == EngineState.CONVERGED


def test_distortion_never_increases(random_points):
    result = KMeansEngine(seed=4, max_iterations=0).run(random_points, 8)
    history = np.array(result.distortion_history)
    assert np.all(np.diff(history) <= 1e-9 * history[:-1])


def test_same_seed_same_result(random_points):
    a = KMeansEngine(seed=7).run(random_points, 4)
    b = KMeansEngine(seed=7).run(random_points, 4)
    np.testing.assert_array_equal(a.labels, b.labels)
    np.testing.assert_array_equal(a.centroids, b.centroids)


def test_refined_start_run(random_points):
    engine = KMeansEngine(initializer=RefinedStart(percentage=0.3, samplings=5), seed=0)
    result = engine.run(random_points, 4)
    assert result.state.is_success
    assert result.n_clusters == 4


def test_strategy_reused_across_runs(random_points):
    """A second run with the same engine starts from cold strategy state."""
    engine = KMeansEngine(strategy=create_strategy("elkan"), seed=5)
    first = engine.run(random_points, 5)
    second = engine.run(random_points, 5)
    np.testing.assert_array_equal(first.labels, second.labels)


# ------------------------------------------------------------------
# Failures
# ------------------------------------------------------------------


@pytest.mark.parametrize("bad", [0, -1, 101, 2.5])
def test_invalid_cluster_count_fails_engine(random_points, bad):
    engine = KMeansEngine()
    with pytest.raises(InvalidClusterCountError):
        engine.run(random_points, bad)
    assert engine.state == EngineState.FAILED


def test_bad_initial_centroids_fail_engine(random_points):
    engine = KMeansEngine(initializer=GivenCentroids(np.zeros((2, 3))))
    with pytest.raises(DegenerateInitError):
        engine.run(random_points, 2)
    assert engine.state == EngineState.FAILED


def test_negative_max_iterations():
    with pytest.raises(ValueError, match="max_iterations"):
        KMeansEngine(max_iterations=-1)


# ------------------------------------------------------------------
# Empty clusters
# ------------------------------------------------------------------


@pytest.fixture
def stacked_start():
    """95 identical initial centroids over 100 points: most clusters start empty."""
    return GivenCentroids(np.ones((95, 4)))


def test_default_policy_revives_every_cluster(random_points, stacked_start):
    engine = KMeansEngine(initializer=stacked_start, max_iterations=0)
    result = engine.run(random_points, 95)

    assert result.n_clusters == 95
    assert len(np.unique(result.labels)) == 95


def test_allow_empty_keeps_all_centroids(random_points, stacked_start):
    engine = KMeansEngine(initializer=stacked_start, empty_policy=AllowEmptyPolicy(), max_iterations=100)
    result = engine.run(random_points, 95)

    assert result.n_clusters == 95
    assert len(np.unique(result.labels)) < 95


def test_kill_empty_removes_clusters(random_points, stacked_start):
    engine = KMeansEngine(initializer=stacked_start, empty_policy=KillEmptyPolicy(), max_iterations=100)
    result = engine.run(random_points, 95)

    assert result.state == EngineState.CONVERGED
    assert result.n_clusters == 1
    np.testing.assert_array_equal(result.cluster_ids, [0])
    np.testing.assert_array_equal(result.labels, np.zeros(100, dtype=np.int64))
    np.testing.assert_allclose(result.centroids[0], random_points.data.mean(axis=0))


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_empty_cluster_handling_is_strategy_independent(random_points, stacked_start, algorithm):
    reference = KMeansEngine(initializer=stacked_start, max_iterations=100).run(random_points, 95)
    result = KMeansEngine(
        strategy=create_strategy(algorithm), initializer=stacked_start, max_iterations=100
    ).run(random_points, 95)
    np.testing.assert_array_equal(result.labels, reference.labels)
