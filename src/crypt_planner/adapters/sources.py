"""Snapshot sources usable outside of a live game client.

The JSON source lets the CLI and tests plan against an exported state file,
e.g. ``{"reward_potential": 412, "defeated": ["ahrim", "karil"]}``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from crypt_planner.adapters.snapshot_source import SnapshotSource
from crypt_planner.game_state import CryptSnapshot


class SnapshotUnavailableError(RuntimeError):
    """Raised when a snapshot cannot be read or parsed."""


@dataclass(slots=True)
class StaticSnapshotSource(SnapshotSource):
    """Serves a fixed snapshot, replaced explicitly via ``update``."""

    current: CryptSnapshot = field(default_factory=CryptSnapshot)

    def snapshot(self) -> CryptSnapshot:
        return self.current

    def update(self, snapshot: CryptSnapshot) -> None:
        self.current = snapshot


@dataclass(slots=True)
class JsonSnapshotSource(SnapshotSource):
    """Reads a snapshot exported as a JSON document."""

    path: Path

    def snapshot(self) -> CryptSnapshot:
        if not self.path.exists():
            raise SnapshotUnavailableError(f"Snapshot file does not exist: {self.path}")

        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SnapshotUnavailableError(f"Snapshot file is not valid JSON: {self.path}") from exc

        if not isinstance(payload, dict):
            raise SnapshotUnavailableError(f"Snapshot must be a JSON object: {self.path}")

        try:
            return CryptSnapshot(
                reward_potential=int(payload.get("reward_potential", 0)),
                defeated=frozenset(str(name) for name in payload.get("defeated", [])),
                in_crypt=bool(payload.get("in_crypt", True)),
            )
        except (TypeError, ValueError) as exc:
            raise SnapshotUnavailableError(f"Malformed snapshot in {self.path}: {exc}") from exc
