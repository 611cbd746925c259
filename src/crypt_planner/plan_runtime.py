"""Asynchronous runtime that coalesces plan update requests."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from crypt_planner.adapters import SnapshotSource
from crypt_planner.session import PlanCoordinator, PlanOutcome


class PlanUpdateStatus(str, Enum):
    """Lifecycle states for a plan update."""

    SUCCEEDED = "succeeded"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(slots=True)
class PlanUpdate:
    """Record of a single processed update."""

    reasons: tuple[str, ...]
    requested_at: datetime
    status: PlanUpdateStatus
    finished_at: datetime | None = None
    outcome: PlanOutcome | None = None
    error: str | None = None


class PlanUpdateRuntime:
    """Single worker that re-plans whenever the game state or config changes.

    Bursts of requests (a brother kill changes several counters at once)
    collapse into one pending update. ``stop`` drops whatever is pending.
    """

    def __init__(
        self,
        coordinator: PlanCoordinator,
        source: SnapshotSource,
        *,
        max_history: int = 100,
        logger: logging.Logger | None = None,
    ) -> None:
        self._coordinator = coordinator
        self._source = source
        self._logger = logger or logging.getLogger("crypt_planner.plan_runtime")

        self._history: deque[PlanUpdate] = deque(maxlen=max_history)
        self._queue: asyncio.Queue[datetime] = asyncio.Queue(maxsize=1)
        self._pending_reasons: list[str] = []
        self._worker_task: asyncio.Task[None] | None = None

    @property
    def latest(self) -> PlanOutcome | None:
        for update in self._history:
            if update.outcome is not None:
                return update.outcome
        return None

    @property
    def update_queued(self) -> bool:
        return not self._queue.empty()

    async def start(self) -> None:
        """Start the worker loop once for this runtime."""
        if self._worker_task and not self._worker_task.done():
            return

        self._worker_task = asyncio.create_task(self._worker_loop(), name="plan-update-worker")
        self._logger.info("plan_runtime_started")

    async def stop(self) -> None:
        """Stop the worker and discard pending updates."""
        if not self._worker_task:
            return

        self._worker_task.cancel()
        try:
            await self._worker_task
        except asyncio.CancelledError:
            pass
        finally:
            self._worker_task = None

        while not self._queue.empty():
            self._queue.get_nowait()
            self._queue.task_done()
        self._pending_reasons.clear()
        self._logger.info("plan_runtime_stopped")

    def request_update(self, reason: str) -> bool:
        """Queue an update unless one is already pending. Returns True if queued."""
        self._pending_reasons.append(reason)
        if self.update_queued:
            self._logger.debug("plan_update_coalesced", extra={"reason": reason})
            return False

        self._queue.put_nowait(datetime.now(timezone.utc))
        self._logger.debug("plan_update_queued", extra={"reason": reason})
        return True

    def list_recent_updates(self, limit: int = 20) -> list[PlanUpdate]:
        return list(self._history)[:limit]

    async def join(self) -> None:
        await self._queue.join()

    async def _worker_loop(self) -> None:
        while True:
            requested_at = await self._queue.get()
            reasons = tuple(self._pending_reasons)
            self._pending_reasons.clear()
            try:
                # Snapshot reads and uncapped searches block, keep them off the loop.
                update = await asyncio.to_thread(self._run_update, requested_at, reasons)
                self._history.appendleft(update)
                self._logger.info(
                    "plan_update_finished", extra={"status": update.status.value, "reasons": reasons}
                )
            finally:
                self._queue.task_done()

    def _run_update(self, requested_at: datetime, reasons: tuple[str, ...]) -> PlanUpdate:
        update = PlanUpdate(reasons=reasons, requested_at=requested_at, status=PlanUpdateStatus.SUCCEEDED)

        try:
            snapshot = self._source.snapshot()
            if not snapshot.in_crypt:
                update.status = PlanUpdateStatus.SKIPPED
            else:
                update.outcome = self._coordinator.update(snapshot)
        except Exception as exc:  # noqa: BLE001 - a failed update must not kill the worker.
            update.status = PlanUpdateStatus.FAILED
            update.error = f"{type(exc).__name__}: {exc}"
            self._logger.exception("plan_update_failed", extra={"reasons": reasons})

        update.finished_at = datetime.now(timezone.utc)
        return update
