"""Snapshot adapters (host client, exported files)."""

from .snapshot_source import SnapshotSource
from .sources import JsonSnapshotSource, SnapshotUnavailableError, StaticSnapshotSource

__all__ = [
    "JsonSnapshotSource",
    "SnapshotSource",
    "SnapshotUnavailableError",
    "StaticSnapshotSource",
]
