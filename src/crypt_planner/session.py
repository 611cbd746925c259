"""Turns a crypt snapshot and the player's preferences into a kill plan."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from crypt_planner.catalog import DEFAULT_CATALOG, Catalog, target_by_name
from crypt_planner.config import Settings
from crypt_planner.game_state import CryptSnapshot
from crypt_planner.models import ItemType, Target
from crypt_planner.planning import Planner, PlanMode, PlanState, goal_threshold
from crypt_planner.telemetry import NullTelemetry, Telemetry


@dataclass(frozen=True, slots=True)
class PlanPreferences:
    target: Target
    wanted: tuple[ItemType, ...]
    size_tolerance: int = 0
    max_iterations: int | None = 20
    highlight_npcs: bool = True
    highlight_optimal: bool = True


@dataclass(slots=True)
class PlanOutcome:
    target: Target
    mode: PlanMode
    goal: int
    start: PlanState
    plan: PlanState | None = None
    target_met: bool = False
    meets_minimum: bool = True
    highlight: list[ItemType] = field(default_factory=list)

    @property
    def planned_value(self) -> int:
        return (self.plan or self.start).score

    @property
    def exact(self) -> bool:
        return self.plan is not None and self.plan.score >= self.goal

    @property
    def additions(self) -> dict[ItemType, int]:
        """Monsters the plan adds on top of the start state."""
        if self.plan is None:
            return {}
        return {
            item: count - self.start.count(item)
            for item, count in self.plan.counts.items()
            if count > self.start.count(item)
        }

    def as_dict(self) -> dict:
        return {
            "target": self.target.display_name,
            "mode": self.mode.value,
            "goal": self.goal,
            "start_value": self.start.score,
            "planned_value": self.planned_value,
            "target_met": self.target_met,
            "exact": self.exact,
            "meets_minimum": self.meets_minimum,
            "plan": {item.display_name: count for item, count in self.plan.counts.items()} if self.plan else {},
            "additions": {item.display_name: count for item, count in self.additions.items()},
            "highlight": [item.display_name for item in self.highlight],
        }


class PlanCoordinator:
    """Runs one planning session per update, each with a fresh planner."""

    def __init__(
        self,
        preferences: PlanPreferences,
        *,
        catalog: Catalog = DEFAULT_CATALOG,
        telemetry: Telemetry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._preferences = preferences
        self._catalog = catalog
        self._telemetry = telemetry or NullTelemetry()
        self._logger = logger or logging.getLogger("crypt_planner.session")

    @property
    def preferences(self) -> PlanPreferences:
        return self._preferences

    def update_preferences(self, preferences: PlanPreferences) -> None:
        # Picked up by the next update, sessions never share a planner.
        self._preferences = preferences

    def start_state(self, snapshot: CryptSnapshot) -> PlanState:
        """Brothers still to defeat, seeded with the potential already earned."""
        defeated = set(snapshot.defeated_items(self._catalog))
        pending = [item for item in self._preferences.wanted if item.is_primary and item not in defeated]
        pending_value = sum(item.effective_value for item in pending)
        return PlanState.from_items(pending, score=snapshot.baseline_score(self._catalog) + pending_value)

    def update(self, snapshot: CryptSnapshot) -> PlanOutcome:
        prefs = self._preferences
        target = prefs.target
        mode = PlanMode.for_target(target)
        goal = goal_threshold(target, mode)
        start = self.start_state(snapshot)

        self._logger.debug(
            "plan_update_started",
            extra={"target": target.name, "mode": mode.value, "goal": goal, "start_value": start.score},
        )

        outcome = PlanOutcome(target=target, mode=mode, goal=goal, start=start)
        if start.score >= goal:
            outcome.target_met = True
            self._emit(outcome)
            return outcome

        if prefs.highlight_npcs:
            outcome.highlight = [
                item
                for item in prefs.wanted
                if not item.is_primary
                and (target.max_value is None or start.score + item.base_value <= target.max_value)
            ]

        if prefs.highlight_optimal:
            defeated = set(snapshot.defeated_items(self._catalog))
            candidates = [item for item in prefs.wanted if item not in defeated]
            planner = Planner(candidates, size_tolerance=prefs.size_tolerance, mode=mode)
            planner.reset(start, goal)
            outcome.plan = planner.search(prefs.max_iterations)

            if outcome.plan.score < target.min_value:
                outcome.meets_minimum = False
                self._logger.warning(
                    "plan_below_target",
                    extra={"planned_value": outcome.plan.score, "min_value": target.min_value},
                )

        self._emit(outcome)
        return outcome

    def _emit(self, outcome: PlanOutcome) -> None:
        self._telemetry.emit("plan_updated", outcome.as_dict())


def preferences_from_settings(settings: Settings, catalog: Catalog = DEFAULT_CATALOG) -> PlanPreferences:
    return PlanPreferences(
        target=target_by_name(settings.reward_target),
        wanted=tuple(catalog.resolve(settings.reward_plan)),
        size_tolerance=settings.smaller_plan_tolerance,
        max_iterations=settings.planner_iterations_max,
        highlight_npcs=settings.highlight_npcs,
        highlight_optimal=settings.highlight_optimal,
    )
