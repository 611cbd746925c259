"""Contract for planner telemetry and the logging-backed sink."""

from __future__ import annotations

import logging
from typing import Protocol


class Telemetry(Protocol):
    """Reports planning events and outcomes."""

    def emit(self, event_name: str, payload: dict) -> None:
        """Publish telemetry event to the configured sink."""


class LoggerTelemetry:
    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("crypt_planner.telemetry")
        self._level = level

    def emit(self, event_name: str, payload: dict) -> None:
        self._logger.log(self._level, event_name, extra={"payload": payload})


class NullTelemetry:
    def emit(self, event_name: str, payload: dict) -> None:
        return None
