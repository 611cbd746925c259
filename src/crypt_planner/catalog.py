"""Static item and reward target tables."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from .models import ItemCategory, ItemType, Target


class UnknownItemError(KeyError):
    """Raised when an item id or name is not part of the catalog."""


class UnknownTargetError(KeyError):
    """Raised when a reward target name is not known."""


def _key(name: str) -> str:
    return name.strip().lower().replace(" ", "_").replace("-", "_")


ITEM_TABLE: tuple[ItemType, ...] = (
    # Brothers
    ItemType("ahrim", "Ahrim the Blighted", 98, ItemCategory.PRIMARY),
    ItemType("dharok", "Dharok the Wretched", 115, ItemCategory.PRIMARY),
    ItemType("guthan", "Guthan the Infested", 115, ItemCategory.PRIMARY),
    ItemType("karil", "Karil the Tainted", 98, ItemCategory.PRIMARY),
    ItemType("torag", "Torag the Corrupted", 115, ItemCategory.PRIMARY),
    ItemType("verac", "Verac the Defiled", 115, ItemCategory.PRIMARY),
    # Crypt monsters
    ItemType("crypt_rat", "Crypt rat", 43, ItemCategory.SECONDARY),
    ItemType("bloodworm", "Bloodworm", 52, ItemCategory.SECONDARY),
    ItemType("crypt_spider", "Crypt spider", 56, ItemCategory.SECONDARY),
    ItemType("giant_crypt_rat", "Giant crypt rat", 76, ItemCategory.SECONDARY),
    ItemType("skeleton", "Skeleton", 77, ItemCategory.SECONDARY),
    ItemType("giant_crypt_spider", "Giant crypt spider", 79, ItemCategory.SECONDARY),
)

TARGET_TABLE: tuple[Target, ...] = (
    Target("coins", "Coins", 1, 380),
    Target("mind_rune", "Mind Rune", 381, 505),
    Target("chaos_rune", "Chaos Rune", 506, 630),
    Target("death_rune", "Death Rune", 631, 755),
    Target("blood_rune", "Blood Rune", 756, 880),
    Target("bolt_rack", "Bolt Rack", 881, 1005),
    # The bands on these are so narrow that a capped search could fail.
    Target("crystal_key", "Crystal Key", 1006, None),
    Target("dragon_med_helm", "Dragon Med Helm", 1012, None),
)


class Catalog:
    """Read-only view over an item table, preserving table order."""

    def __init__(self, items: Iterable[ItemType]) -> None:
        self._items = tuple(dict.fromkeys(items))
        self._by_key: dict[str, ItemType] = {}
        for item in self._items:
            self._by_key[_key(item.id)] = item
            self._by_key[_key(item.display_name)] = item

    def __iter__(self) -> Iterator[ItemType]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    @property
    def items(self) -> tuple[ItemType, ...]:
        return self._items

    def get(self, name: str) -> ItemType:
        try:
            return self._by_key[_key(name)]
        except KeyError:
            raise UnknownItemError(f"Unknown item: {name}") from None

    def resolve(self, names: Iterable[str]) -> list[ItemType]:
        """Look up ``names`` and return the matches in catalog order."""
        wanted = {self.get(name) for name in names}
        return [item for item in self._items if item in wanted]

    def primaries(self) -> list[ItemType]:
        return [item for item in self._items if item.is_primary]

    def secondaries(self) -> list[ItemType]:
        return [item for item in self._items if not item.is_primary]


DEFAULT_CATALOG = Catalog(ITEM_TABLE)

_TARGETS_BY_KEY = {_key(target.name): target for target in TARGET_TABLE}
_TARGETS_BY_KEY.update({_key(target.display_name): target for target in TARGET_TABLE})


def target_by_name(name: str) -> Target:
    try:
        return _TARGETS_BY_KEY[_key(name)]
    except KeyError:
        raise UnknownTargetError(f"Unknown reward target: {name}") from None
