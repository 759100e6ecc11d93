"""
Configuration management for kmeans_engine.

Loads engine defaults from environment variables (typically from a .env file).
Uses python-dotenv to load .env automatically.

Usage:
    from kmeans_engine.config import get_config

    # Defaults used when a ClusterOptions field is not given explicitly
    get_config().engine.algorithm
    get_config().engine.max_iterations

The environment is read on the first get_config() call, not at import.

Recognised variables:
    KMEANS_ALGORITHM             naive | elkan | hamerly | dualtree | dualtree-covertree
    KMEANS_INITIALIZER           random | refined | kmeans++
    KMEANS_MAX_ITERATIONS        int >= 0 (0 means no limit)
    KMEANS_PERCENTAGE            refined-start sample fraction
    KMEANS_SAMPLINGS             refined-start trial count
    KMEANS_EMPTY_CLUSTER_POLICY  default | allow | kill
    KMEANS_SEED                  int, unset for a random seed
    KMEANS_LEAF_SIZE             kd-tree leaf size for dual-tree strategies
    KMEANS_LOG_LEVEL             logging level name
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be a number, got {raw!r}") from e


@dataclass
class EngineConfig:
    """Default parameters for a clustering run."""
    algorithm: str = "naive"
    initializer: str = "random"
    max_iterations: int = 1000
    refined_percentage: float = 0.02
    refined_samplings: int = 100
    empty_cluster_policy: str = "default"
    seed: Optional[int] = None
    leaf_size: int = 8

    def __post_init__(self):
        """Validate ranges that do not depend on the dataset."""
        if self.max_iterations < 0:
            raise ValueError(
                f"max_iterations must be >= 0, got {self.max_iterations}"
            )
        if self.refined_samplings < 1:
            raise ValueError(
                f"refined_samplings must be >= 1, got {self.refined_samplings}"
            )
        if self.leaf_size < 1:
            raise ValueError(f"leaf_size must be >= 1, got {self.leaf_size}")


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    3. In a container/deployment environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.engine = EngineConfig(
            algorithm=os.getenv("KMEANS_ALGORITHM", "naive").strip().lower(),
            initializer=os.getenv("KMEANS_INITIALIZER", "random").strip().lower(),
            max_iterations=_env_int("KMEANS_MAX_ITERATIONS", 1000),
            refined_percentage=_env_float("KMEANS_PERCENTAGE", 0.02),
            refined_samplings=_env_int("KMEANS_SAMPLINGS", 100),
            empty_cluster_policy=os.getenv(
                "KMEANS_EMPTY_CLUSTER_POLICY", "default"
            ).strip().lower(),
            seed=_env_int("KMEANS_SEED", None),
            leaf_size=_env_int("KMEANS_LEAF_SIZE", 8),
        )
        self.log_level = os.getenv("KMEANS_LOG_LEVEL", "WARNING").strip().upper()


# Global config instance, created on first use
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Return the global configuration, reading the environment on first use.

    Raises:
        ValueError: If a numeric variable is malformed
    """
    global _config
    if _config is None:
        _config = Config()
    return _config
