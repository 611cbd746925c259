"""World snapshot handed to the planner by the host client."""

from __future__ import annotations

from dataclasses import dataclass, field

from crypt_planner.catalog import DEFAULT_CATALOG, Catalog
from crypt_planner.models import FIXED_BONUS, ItemType


@dataclass(frozen=True, slots=True)
class CryptSnapshot:
    reward_potential: int = 0
    defeated: frozenset[str] = field(default_factory=frozenset)
    in_crypt: bool = True

    def defeated_items(self, catalog: Catalog = DEFAULT_CATALOG) -> list[ItemType]:
        return [item for item in catalog.resolve(self.defeated) if item.is_primary]

    def baseline_score(self, catalog: Catalog = DEFAULT_CATALOG) -> int:
        # The raw counter leaves out the bonus each defeated brother is worth.
        return self.reward_potential + FIXED_BONUS * len(self.defeated_items(catalog))
