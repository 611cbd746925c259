"""Generic anytime best-first (A*-family) search."""

from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Callable, Hashable, Iterable
from functools import cmp_to_key
from typing import Any, Generic, TypeVar

NodeT = TypeVar("NodeT", bound=Hashable)
GoalT = TypeVar("GoalT")

Comparator = Callable[[Any, Any], int]

_REMOVED = object()


class SearchNotStartedError(RuntimeError):
    """Raised when the engine is used before ``reset`` seeded a problem."""


def natural_order(lhs: Any, rhs: Any) -> int:
    return (lhs > rhs) - (lhs < rhs)


def reverse_order(lhs: Any, rhs: Any) -> int:
    return (lhs < rhs) - (lhs > rhs)


class SearchEngine(Generic[NodeT, GoalT]):
    """Anytime best-first search over caller supplied strategy functions.

    Each call to :meth:`search` expands a single node. ``None`` means no
    terminal result yet. A goal node is returned as soon as it is popped, and
    once the frontier runs dry the best node seen so far is returned on every
    call. Scores are ordered by ``comparator``: values that sort first are
    better, so ``reverse_order`` turns the search into a maximization.

    The open set is a binary heap with lazy deletion. A score change pushes a
    fresh entry and invalidates the old one. Equal priorities pop in insertion
    order.
    """

    def __init__(
        self,
        *,
        heuristic: Callable[[NodeT, GoalT], float],
        edge_weight: Callable[[NodeT, NodeT], float],
        is_goal: Callable[[NodeT, GoalT], bool],
        neighbors: Callable[[NodeT, GoalT], Iterable[NodeT]],
        comparator: Comparator,
        infinite: float,
        adjust_edge_cost: Callable[[NodeT, NodeT, GoalT, float], float] | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._heuristic = heuristic
        self._edge_weight = edge_weight
        self._is_goal = is_goal
        self._neighbors = neighbors
        self._adjust_edge_cost = adjust_edge_cost or (lambda best, neighbor, goal, cost: cost)
        self._comparator = comparator
        self._sort_key = cmp_to_key(comparator)
        self._infinite = infinite
        self._logger = logger or logging.getLogger("crypt_planner.planning.search")

        self._open: list[list[Any]] = []
        self._entries: dict[NodeT, list[Any]] = {}
        self._sequence = itertools.count()
        self._g_score: dict[NodeT, float] = {}
        self._h_score: dict[NodeT, float] = {}
        self._f_score: dict[NodeT, float] = {}

        self._goal: GoalT | None = None
        self._best: NodeT | None = None

    def reset(self, start: NodeT, goal: GoalT) -> None:
        """Forget any previous problem and seed the search from ``start``."""
        if start is None or goal is None:
            raise ValueError("start and goal are required")

        self._open.clear()
        self._entries.clear()
        self._g_score.clear()
        self._h_score.clear()
        self._f_score.clear()

        score = self._heuristic(start, goal)
        self._g_score[start] = 0
        self._h_score[start] = score
        self._f_score[start] = score
        self._push(start)

        self._goal = goal
        self._best = start
        self._logger.debug("search_reset", extra={"goal": goal, "start_h": score})

    def search(self) -> NodeT | None:
        """Run one expansion step."""
        goal, best = self._require_started()

        current = self._pop()
        if current is None:
            # Frontier exhausted, nothing left to improve on.
            return best

        if self._is_goal(current, goal):
            return current

        # Keep the best partial result so callers can stop at any point.
        candidate = self._adjust_edge_cost(best, current, goal, self._h_score[current])
        if self._is_better(candidate, self._h_score[best]):
            self._best = best = current

        for neighbor in self._neighbors(current, goal):
            tentative = self._g_score[current] + self._edge_weight(current, neighbor)
            tentative = self._adjust_edge_cost(best, neighbor, goal, tentative)

            if not self._is_better(tentative, self._g_score.get(neighbor, self._infinite)):
                continue

            h_score = self._heuristic(neighbor, goal)
            self._g_score[neighbor] = tentative
            self._h_score[neighbor] = h_score
            self._f_score[neighbor] = tentative + h_score
            self._push(neighbor)

        return None

    def take_best(self) -> NodeT:
        _, best = self._require_started()
        return best

    def cost(self, node: NodeT) -> float | None:
        """Best known cost to reach ``node`` in the current problem."""
        return self._g_score.get(node)

    @property
    def open_count(self) -> int:
        return len(self._entries)

    def _is_better(self, lhs: float, rhs: float) -> bool:
        return self._comparator(lhs, rhs) < 0

    def _push(self, node: NodeT) -> None:
        stale = self._entries.pop(node, None)
        if stale is not None:
            stale[-1] = _REMOVED
        entry = [self._sort_key(self._f_score[node]), next(self._sequence), node]
        self._entries[node] = entry
        heapq.heappush(self._open, entry)

    def _pop(self) -> NodeT | None:
        while self._open:
            *_, node = heapq.heappop(self._open)
            if node is not _REMOVED:
                del self._entries[node]
                return node
        return None

    def _require_started(self) -> tuple[GoalT, NodeT]:
        if self._goal is None or self._best is None:
            raise SearchNotStartedError("reset() must be called before searching")
        return self._goal, self._best
