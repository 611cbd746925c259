from __future__ import annotations

import asyncio
import threading

from crypt_planner.adapters import StaticSnapshotSource
from crypt_planner.catalog import DEFAULT_CATALOG, target_by_name
from crypt_planner.game_state import CryptSnapshot
from crypt_planner.plan_runtime import PlanUpdateRuntime, PlanUpdateStatus
from crypt_planner.session import PlanCoordinator, PlanPreferences


class FailingSource:
    def snapshot(self) -> CryptSnapshot:
        raise RuntimeError("client not ready")


class ThreadRecordingSource:
    def __init__(self) -> None:
        self.threads: list[int] = []

    def snapshot(self) -> CryptSnapshot:
        self.threads.append(threading.get_ident())
        return CryptSnapshot()


def _coordinator() -> PlanCoordinator:
    return PlanCoordinator(PlanPreferences(target=target_by_name("blood_rune"), wanted=DEFAULT_CATALOG.items))


def test_runtime_coalesces_bursts_into_one_update() -> None:
    async def _run():
        runtime = PlanUpdateRuntime(_coordinator(), StaticSnapshotSource())
        queued = [
            runtime.request_update("reward_potential_changed"),
            runtime.request_update("brother_defeated"),
        ]
        await runtime.start()
        await asyncio.wait_for(runtime.join(), timeout=1)
        updates = runtime.list_recent_updates()
        latest = runtime.latest
        await runtime.stop()
        return queued, updates, latest

    queued, updates, latest = asyncio.run(_run())
    assert queued == [True, False]
    assert len(updates) == 1
    assert updates[0].status == PlanUpdateStatus.SUCCEEDED
    assert updates[0].reasons == ("reward_potential_changed", "brother_defeated")
    assert latest is not None
    assert latest.planned_value == 880


def test_runtime_picks_up_new_snapshot() -> None:
    async def _run():
        source = StaticSnapshotSource()
        runtime = PlanUpdateRuntime(_coordinator(), source)
        await runtime.start()
        runtime.request_update("entered_crypt")
        await asyncio.wait_for(runtime.join(), timeout=1)

        defeated = frozenset(item.id for item in DEFAULT_CATALOG.primaries())
        source.update(CryptSnapshot(reward_potential=870, defeated=defeated))
        runtime.request_update("reward_potential_changed")
        await asyncio.wait_for(runtime.join(), timeout=1)
        latest = runtime.latest
        count = len(runtime.list_recent_updates())
        await runtime.stop()
        return latest, count

    latest, count = asyncio.run(_run())
    assert count == 2
    assert latest is not None and latest.target_met


def test_runtime_skips_outside_crypt_and_records_failures() -> None:
    async def _run():
        outside = PlanUpdateRuntime(_coordinator(), StaticSnapshotSource(CryptSnapshot(in_crypt=False)))
        failing = PlanUpdateRuntime(_coordinator(), FailingSource())
        for runtime in (outside, failing):
            await runtime.start()
            runtime.request_update("config_changed")
            await asyncio.wait_for(runtime.join(), timeout=1)
            await runtime.stop()
        return outside.list_recent_updates()[0], failing.list_recent_updates()[0]

    skipped, failed = asyncio.run(_run())
    assert skipped.status == PlanUpdateStatus.SKIPPED
    assert skipped.outcome is None
    assert failed.status == PlanUpdateStatus.FAILED
    assert "client not ready" in (failed.error or "")


def test_stop_discards_pending_update() -> None:
    async def _run():
        runtime = PlanUpdateRuntime(_coordinator(), StaticSnapshotSource())
        await runtime.start()
        await runtime.stop()
        runtime.request_update("config_changed")
        queued_before = runtime.update_queued
        await runtime.start()
        await runtime.stop()
        return queued_before, runtime.update_queued

    queued_before, queued_after = asyncio.run(_run())
    assert queued_before is True
    assert queued_after is False


def test_updates_run_off_the_event_loop_thread() -> None:
    source = ThreadRecordingSource()

    async def _run():
        runtime = PlanUpdateRuntime(_coordinator(), source)
        await runtime.start()
        runtime.request_update("entered_crypt")
        await asyncio.wait_for(runtime.join(), timeout=5)
        latest = runtime.latest
        await runtime.stop()
        return threading.get_ident(), latest

    loop_thread, latest = asyncio.run(_run())
    assert len(source.threads) == 1
    assert source.threads[0] != loop_thread
    assert latest is not None and latest.planned_value == 880
