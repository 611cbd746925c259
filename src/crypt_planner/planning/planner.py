"""Plans which crypt monsters to defeat to reach a reward target.

Only the items handed to the planner are offered as candidates. Brothers the
player still intends to defeat belong in the start state given to ``reset``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from enum import Enum

from crypt_planner.models import ABSOLUTE_CAP, ItemType, Target

from .search import SearchEngine, reverse_order
from .state import PlanState


class PlanMode(str, Enum):
    # get as close as possible to the goal without going over
    NEAREST = "nearest"
    # anything that reaches the goal will do
    ANY = "any"

    @classmethod
    def for_target(cls, target: Target) -> PlanMode:
        return cls.NEAREST if target.is_bounded else cls.ANY


def goal_threshold(target: Target, mode: PlanMode, cap: int = ABSOLUTE_CAP) -> int:
    if mode is PlanMode.NEAREST:
        if target.max_value is None:
            return cap
        return min(cap, target.max_value)
    return target.min_value


def size_penalty(size_gap: int, tolerance: int) -> int:
    """Logarithmic penalty for a plan ``size_gap`` steps longer than the best one.

    best 874 (size 8), neighbor 876 (size 9), tolerance 3:
    log(9 - 8 + 3) / log(1.5) * 3 = 10.26, so 11 comes off the bigger plan.
    """
    return math.ceil((math.log(size_gap + tolerance) / math.log(1.5)) * tolerance)


class Planner:
    """A* specialization over :class:`PlanState` nodes with integer goals."""

    def __init__(
        self,
        target_item_types: Iterable[ItemType],
        *,
        size_tolerance: int = 0,
        mode: PlanMode = PlanMode.NEAREST,
        logger: logging.Logger | None = None,
    ) -> None:
        if size_tolerance < 0:
            raise ValueError(f"size_tolerance must be non-negative, got {size_tolerance}")

        self._target_items = tuple(dict.fromkeys(target_item_types))
        self._size_tolerance = size_tolerance
        self._mode = mode
        self._logger = logger or logging.getLogger("crypt_planner.planning.planner")
        # inverse sort simplifies the math a bit
        self._engine: SearchEngine[PlanState, int] = SearchEngine(
            heuristic=self.heuristic,
            edge_weight=self.edge_weight,
            is_goal=self.is_goal,
            neighbors=self.neighbors,
            adjust_edge_cost=self.adjust_edge_cost,
            comparator=reverse_order,
            infinite=-math.inf,
            logger=self._logger.getChild("engine"),
        )

    @property
    def target_items(self) -> tuple[ItemType, ...]:
        return self._target_items

    @property
    def size_tolerance(self) -> int:
        return self._size_tolerance

    @property
    def mode(self) -> PlanMode:
        return self._mode

    @staticmethod
    def heuristic(state: PlanState, goal: int) -> int:
        return state.score

    @staticmethod
    def edge_weight(current: PlanState, neighbor: PlanState) -> int:
        return neighbor.score - current.score

    @staticmethod
    def is_goal(state: PlanState, goal: int) -> bool:
        return state.score >= goal

    def neighbors(self, state: PlanState, goal: int) -> list[PlanState]:
        neighbors = [
            state.append(item)
            for item in self._target_items
            if item.is_primary and not state.contains(item)
        ]
        if neighbors:
            # Brothers first, otherwise small monsters could overshoot the target.
            return neighbors

        for item in self._target_items:
            if item.is_primary:
                continue
            if self._mode is PlanMode.NEAREST and state.score + item.base_value > goal:
                continue
            neighbors.append(state.append(item))
        return neighbors

    def adjust_edge_cost(self, best: PlanState, neighbor: PlanState, goal: int, cost: float) -> float:
        tolerance = self._size_tolerance
        if tolerance <= 0:
            return cost

        i = best.size()
        j = neighbor.size()
        if j > i and abs(self.heuristic(neighbor, goal) - self.heuristic(best, goal)) < tolerance:
            return cost - size_penalty(j - i, tolerance)
        return cost

    def reset(self, start: PlanState, goal: int) -> None:
        self._engine.reset(start, goal)

    def step(self) -> PlanState | None:
        return self._engine.search()

    def take_best(self) -> PlanState:
        return self._engine.take_best()

    def search(self, max_iterations: int | None = None) -> PlanState:
        """Step until a plan reaches the goal, falling back to the best partial plan.

        ``max_iterations=None`` keeps going until the search space is exhausted.
        """
        plan: PlanState | None = None
        iterations = 0
        while max_iterations is None or iterations < max_iterations:
            plan = self.step()
            if plan is not None:
                break
            iterations += 1

        self._logger.debug("planner_iterations", extra={"iterations": iterations, "max_iterations": max_iterations})

        if plan is None:
            self._logger.debug("planner_partial_plan")
            plan = self.take_best()
        return plan
