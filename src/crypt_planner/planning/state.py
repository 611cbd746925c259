"""Immutable plan states used as search nodes."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import ClassVar

from crypt_planner.models import ItemType


def _derived_score(counts: Mapping[ItemType, int]) -> int:
    return sum(count * item.effective_value for item, count in counts.items())


class PlanState:
    """A multiset of items to defeat plus the reward potential it adds up to.

    ``score`` usually equals the sum of the effective values of ``counts``.
    When a state is seeded from a partially observed run (monsters defeated
    earlier are not tracked individually) the score is passed in directly and
    may be higher.

    Equality and hashing only look at ``counts`` so that the same multiset
    reached along different paths collapses to one search node.
    """

    __slots__ = ("_counts", "_score", "_key")

    EMPTY: ClassVar[PlanState]

    def __init__(self, counts: Mapping[ItemType, int] | None = None, score: int | None = None) -> None:
        frozen = dict(counts or {})
        for item, count in frozen.items():
            if count <= 0:
                raise ValueError(f"Item count must be positive, got {count} for {item.id}")
        self._counts = MappingProxyType(frozen)
        self._score = _derived_score(frozen) if score is None else score
        self._key = frozenset(frozen.items())

    @classmethod
    def from_items(cls, items: Iterable[ItemType], score: int | None = None) -> PlanState:
        counts: dict[ItemType, int] = {}
        for item in items:
            counts[item] = counts.get(item, 0) + 1
        return cls(counts, score)

    @classmethod
    def of(cls, *items: ItemType) -> PlanState:
        return cls.from_items(items)

    @property
    def counts(self) -> Mapping[ItemType, int]:
        return self._counts

    @property
    def score(self) -> int:
        return self._score

    @property
    def untracked_score(self) -> int:
        """Portion of ``score`` not explained by ``counts``."""
        return self._score - _derived_score(self._counts)

    def size(self) -> int:
        return sum(self._counts.values())

    def count(self, item: ItemType) -> int:
        return self._counts.get(item, 0)

    def contains(self, item: ItemType) -> bool:
        return item in self._counts

    def is_empty(self) -> bool:
        return not self._counts

    def append(self, item: ItemType) -> PlanState:
        counts = dict(self._counts)
        counts[item] = counts.get(item, 0) + 1
        return PlanState(counts, self._score + item.effective_value)

    def insert(self, items: Iterable[ItemType]) -> PlanState:
        """Add each of ``items`` once if missing, keeping the untracked score."""
        untracked = self.untracked_score
        counts = dict(self._counts)
        for item in items:
            counts.setdefault(item, 1)
        return PlanState(counts, _derived_score(counts) + untracked)

    def __contains__(self, item: object) -> bool:
        return item in self._counts

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PlanState):
            return NotImplemented
        return self._key == other._key

    def __hash__(self) -> int:
        return hash(self._key)

    def __repr__(self) -> str:
        parts = ", ".join(f"{item.id}x{count}" for item, count in self._counts.items())
        return f"PlanState({{{parts}}}, score={self._score})"


PlanState.EMPTY = PlanState()
