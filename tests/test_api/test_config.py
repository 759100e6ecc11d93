"""
Tests for environment configuration, run options and logging setup.
"""

import logging
import subprocess
import sys
from pathlib import Path

import pytest

from kmeans_engine.algorithms.options import ClusterOptions, build_engine
from kmeans_engine.algorithms.initialization import GivenCentroids, RefinedStart
from kmeans_engine.algorithms.empty_clusters import KillEmptyPolicy
from kmeans_engine.algorithms.strategies import HamerlyStrategy
import kmeans_engine.config as config_module
from kmeans_engine.config import Config, EngineConfig, get_config
from kmeans_engine.utils.logging_config import PACKAGE_LOGGER, get_logger, setup_logging

ENV_VARS = [
    "KMEANS_ALGORITHM",
    "KMEANS_INITIALIZER",
    "KMEANS_MAX_ITERATIONS",
    "KMEANS_PERCENTAGE",
    "KMEANS_SAMPLINGS",
    "KMEANS_EMPTY_CLUSTER_POLICY",
    "KMEANS_SEED",
    "KMEANS_LEAF_SIZE",
    "KMEANS_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# ------------------------------------------------------------------
# Config
# ------------------------------------------------------------------


def test_config_defaults(clean_env):
    """Test defaults when no variables are set."""
    cfg = Config()

    assert cfg.engine.algorithm == "naive"
    assert cfg.engine.initializer == "random"
    assert cfg.engine.max_iterations == 1000
    assert cfg.engine.refined_percentage == 0.02
    assert cfg.engine.refined_samplings == 100
    assert cfg.engine.empty_cluster_policy == "default"
    assert cfg.engine.seed is None
    assert cfg.engine.leaf_size == 8
    assert cfg.log_level == "WARNING"


def test_config_from_environment(clean_env):
    """Test variables are parsed into engine defaults."""
    clean_env.setenv("KMEANS_ALGORITHM", " Elkan ")
    clean_env.setenv("KMEANS_INITIALIZER", "refined")
    clean_env.setenv("KMEANS_MAX_ITERATIONS", "0")
    clean_env.setenv("KMEANS_PERCENTAGE", "0.1")
    clean_env.setenv("KMEANS_SAMPLINGS", "7")
    clean_env.setenv("KMEANS_EMPTY_CLUSTER_POLICY", "kill")
    clean_env.setenv("KMEANS_SEED", "42")
    clean_env.setenv("KMEANS_LEAF_SIZE", "16")
    clean_env.setenv("KMEANS_LOG_LEVEL", "debug")

    cfg = Config()

    assert cfg.engine == EngineConfig(
        algorithm="elkan",
        initializer="refined",
        max_iterations=0,
        refined_percentage=0.1,
        refined_samplings=7,
        empty_cluster_policy="kill",
        seed=42,
        leaf_size=16,
    )
    assert cfg.log_level == "DEBUG"


@pytest.mark.parametrize(
    "name,value",
    [("KMEANS_MAX_ITERATIONS", "ten"), ("KMEANS_PERCENTAGE", "half"), ("KMEANS_SEED", "1.5")],
)
def test_config_rejects_malformed_numbers(clean_env, name, value):
    clean_env.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        Config()


@pytest.fixture
def fresh_config(monkeypatch):
    """Drop the cached global config so the next get_config() re-reads the environment."""
    monkeypatch.setattr(config_module, "_config", None)


def test_get_config_is_cached(clean_env, fresh_config):
    first = get_config()
    clean_env.setenv("KMEANS_ALGORITHM", "elkan")
    assert get_config() is first
    assert first.engine.algorithm == "naive"


def test_malformed_env_fails_on_first_use(clean_env, fresh_config, small_data):
    """A bad variable surfaces from the first call that needs configuration."""
    from kmeans_engine import cluster

    clean_env.setenv("KMEANS_MAX_ITERATIONS", "ten")

    with pytest.raises(ValueError, match="KMEANS_MAX_ITERATIONS"):
        ClusterOptions.from_config()
    with pytest.raises(ValueError, match="KMEANS_MAX_ITERATIONS"):
        cluster(small_data, 2)


def test_import_succeeds_with_malformed_env(clean_env):
    import kmeans_engine

    clean_env.setenv("KMEANS_SEED", "1.5")
    clean_env.setenv("PYTHONPATH", str(Path(kmeans_engine.__file__).parent.parent))
    proc = subprocess.run(
        [sys.executable, "-c", "import kmeans_engine; print(kmeans_engine.__version__)"],
        capture_output=True,
        text=True,
    )
    assert proc.returncode == 0, proc.stderr


@pytest.mark.parametrize(
    "kwargs", [{"max_iterations": -1}, {"refined_samplings": 0}, {"leaf_size": 0}]
)
def test_engine_config_validation(kwargs):
    with pytest.raises(ValueError):
        EngineConfig(**kwargs)


# ------------------------------------------------------------------
# ClusterOptions / build_engine
# ------------------------------------------------------------------


def test_options_from_config(clean_env):
    clean_env.setenv("KMEANS_ALGORITHM", "hamerly")
    clean_env.setenv("KMEANS_SEED", "5")

    opts = ClusterOptions.from_config(Config(), max_iterations=3)

    assert opts.algorithm == "hamerly"
    assert opts.seed == 5
    assert opts.max_iterations == 3


def test_options_unknown_override():
    with pytest.raises(ValueError, match="Unknown option"):
        ClusterOptions().with_overrides(colour="red")


def test_build_engine():
    opts = ClusterOptions(
        algorithm="hamerly",
        initializer="refined",
        refined_percentage=0.5,
        empty_cluster_policy="kill",
        max_iterations=12,
        seed=3,
    )
    engine = build_engine(opts)

    assert isinstance(engine.strategy, HamerlyStrategy)
    assert isinstance(engine.initializer, RefinedStart)
    assert engine.initializer.percentage == 0.5
    assert isinstance(engine.empty_policy, KillEmptyPolicy)
    assert engine.max_iterations == 12
    assert engine.seed == 3


def test_build_engine_with_initial_centroids():
    engine = build_engine(ClusterOptions(initial_centroids=[[0.0, 1.0]]))
    assert isinstance(engine.initializer, GivenCentroids)


# ------------------------------------------------------------------
# Logging
# ------------------------------------------------------------------


def test_get_logger_namespaces_under_package():
    assert get_logger("kmeans_engine.algorithms.engine").name == "kmeans_engine.algorithms.engine"
    assert get_logger("scripts.bench").name == f"{PACKAGE_LOGGER}.scripts.bench"


def test_setup_logging_is_idempotent():
    logger = setup_logging("DEBUG")
    setup_logging(logging.INFO)

    marked = [h for h in logger.handlers if getattr(h, "_kmeans_engine", False)]
    assert len(marked) == 1
    assert logger.level == logging.INFO


def test_setup_logging_unknown_level():
    with pytest.raises(ValueError, match="Unknown log level"):
        setup_logging("chatty")


def test_engine_logs_progress(caplog, random_data):
    from kmeans_engine import cluster

    with caplog.at_level(logging.INFO, logger=PACKAGE_LOGGER):
        cluster(random_data, 3, seed=0)

    assert any("[KMeans]" in record.getMessage() for record in caplog.records)
