from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

# The game adds this much potential for every brother defeated.
FIXED_BONUS = 2

# Highest reward potential the game keeps track of.
ABSOLUTE_CAP = 1012


class ItemCategory(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True, slots=True)
class ItemType:
    """A plannable monster and the reward potential it is worth."""

    id: str
    display_name: str
    base_value: int
    category: ItemCategory

    @property
    def is_primary(self) -> bool:
        return self.category is ItemCategory.PRIMARY

    @property
    def effective_value(self) -> int:
        if self.is_primary:
            return self.base_value + FIXED_BONUS
        return self.base_value

    def __str__(self) -> str:
        return self.display_name


@dataclass(frozen=True, slots=True)
class Target:
    """Reward band a plan should land in. ``max_value=None`` means unbounded."""

    name: str
    display_name: str
    min_value: int
    max_value: int | None = None

    @property
    def is_bounded(self) -> bool:
        return self.max_value is not None

    def contains(self, score: int) -> bool:
        if score < self.min_value:
            return False
        return self.max_value is None or score <= self.max_value

    def __str__(self) -> str:
        return self.display_name
