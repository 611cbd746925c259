"""Reward planning engine."""

from .planner import Planner, PlanMode, goal_threshold, size_penalty
from .search import SearchEngine, SearchNotStartedError, natural_order, reverse_order
from .state import PlanState

__all__ = [
    "PlanMode",
    "PlanState",
    "Planner",
    "SearchEngine",
    "SearchNotStartedError",
    "goal_threshold",
    "natural_order",
    "reverse_order",
    "size_penalty",
]
