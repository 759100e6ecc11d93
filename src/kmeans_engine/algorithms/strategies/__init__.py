"""
Assignment strategies.

All strategies implement ``AssignmentStrategy.assign`` and return the same
labels as ``NaiveStrategy``; they differ only in the work they skip.
"""

from .base import AssignmentResult, AssignmentStrategy
from .dual_tree import DualTreeCoverStrategy, DualTreeKDStrategy, DualTreeStrategy
from .elkan import ElkanStrategy
from .factory import create_strategy, get_available_strategies
from .hamerly import HamerlyStrategy
from .naive import NaiveStrategy

__all__ = [
    "AssignmentResult",
    "AssignmentStrategy",
    "NaiveStrategy",
    "ElkanStrategy",
    "HamerlyStrategy",
    "DualTreeStrategy",
    "DualTreeKDStrategy",
    "DualTreeCoverStrategy",
    "create_strategy",
    "get_available_strategies",
]
