"""Boundary for obtaining world snapshots from the host client."""

from typing import Protocol

from crypt_planner.game_state import CryptSnapshot


class SnapshotSource(Protocol):
    """Interface to read the current crypt state from the running client."""

    def snapshot(self) -> CryptSnapshot:
        """Return the latest known crypt state."""
