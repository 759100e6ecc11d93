"""
Strategy Factory - Creates assignment strategy instances by name.

This factory enables strategy selection from configuration without the
caller importing strategy classes directly. A new instance is returned on
every call, so independent runs never share bounds or trees.
"""

from typing import Dict, List, Type

from .base import AssignmentStrategy
from .dual_tree import DualTreeCoverStrategy, DualTreeKDStrategy
from .elkan import ElkanStrategy
from .hamerly import HamerlyStrategy
from .naive import NaiveStrategy

_STRATEGIES: Dict[str, Type[AssignmentStrategy]] = {
    "naive": NaiveStrategy,
    "elkan": ElkanStrategy,
    "hamerly": HamerlyStrategy,
    "dualtree": DualTreeKDStrategy,
    "dualtree-covertree": DualTreeCoverStrategy,
}

_ALIASES = {
    "dual-tree": "dualtree",
    "dualtree-kd": "dualtree",
    "dualtreecover": "dualtree-covertree",
    "dualtree-cover": "dualtree-covertree",
}


def get_available_strategies() -> List[str]:
    """Return the canonical names accepted by ``create_strategy``."""
    return list(_STRATEGIES)


def create_strategy(name: str, *, leaf_size: int = 8) -> AssignmentStrategy:
    """
    Create an assignment strategy by name.

    Args:
        name: One of ``get_available_strategies()`` (case-insensitive)
        leaf_size: Leaf size for the kd-tree dual-tree strategy

    Returns:
        A fresh AssignmentStrategy instance

    Raises:
        ValueError: If name is unknown
    """
    key = name.strip().lower().replace("_", "-")
    key = _ALIASES.get(key, key)
    if key not in _STRATEGIES:
        raise ValueError(
            f"Unknown algorithm: {name}. "
            f"Available algorithms: {', '.join(get_available_strategies())}"
        )
    if key == "dualtree":
        return DualTreeKDStrategy(leaf_size=leaf_size)
    return _STRATEGIES[key]()
