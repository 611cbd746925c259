"""CLI startup entrypoint for the crypt planner."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from pathlib import Path

import typer
from pydantic import ValidationError
from rich import print

from crypt_planner.adapters import JsonSnapshotSource, SnapshotUnavailableError
from crypt_planner.catalog import DEFAULT_CATALOG, TARGET_TABLE, UnknownItemError, UnknownTargetError, target_by_name
from crypt_planner.config import Settings, settings
from crypt_planner.game_state import CryptSnapshot
from crypt_planner.plan_runtime import PlanUpdate, PlanUpdateRuntime
from crypt_planner.session import PlanCoordinator, PlanPreferences, preferences_from_settings
from crypt_planner.telemetry import LoggerTelemetry

app = typer.Typer(help="Barrows crypt reward planner")
logger = logging.getLogger("crypt_planner.main")


@app.callback()
def main() -> None:
    logging.basicConfig(level=settings.log_level.upper(), format="[%(levelname)s] %(name)s: %(message)s")


@app.command()
def start() -> None:
    """Show runtime configuration."""
    print(
        {
            "app_name": settings.app_name,
            "reward_target": settings.reward_target,
            "reward_plan": settings.reward_plan,
            "smaller_plan_tolerance": settings.smaller_plan_tolerance,
            "planner_iterations_max": settings.planner_iterations_max,
            "snapshot_path": settings.snapshot_path,
        }
    )


@app.command()
def targets() -> None:
    """List the reward targets and their potential bands."""
    print(
        [
            {
                "name": target.name,
                "display_name": target.display_name,
                "min_value": target.min_value,
                "max_value": target.max_value,
            }
            for target in TARGET_TABLE
        ]
    )


@app.command()
def catalog() -> None:
    """List plannable monsters."""
    print(
        [
            {
                "id": item.id,
                "display_name": item.display_name,
                "category": item.category.value,
                "reward_potential": item.effective_value,
            }
            for item in DEFAULT_CATALOG
        ]
    )


def _load_snapshot(snapshot_file: str | None, reward_potential: int, defeated: list[str]) -> CryptSnapshot:
    path = snapshot_file or settings.snapshot_path
    if path:
        try:
            return JsonSnapshotSource(Path(path).expanduser()).snapshot()
        except SnapshotUnavailableError as exc:
            raise typer.BadParameter(str(exc)) from exc
    return CryptSnapshot(reward_potential=reward_potential, defeated=frozenset(defeated))


def _settings_preferences() -> PlanPreferences:
    try:
        return preferences_from_settings(settings)
    except (UnknownItemError, UnknownTargetError) as exc:
        raise typer.BadParameter(exc.args[0]) from exc


@app.command()
def plan(
    target: str = typer.Option(None, help="Reward target, e.g. blood_rune"),
    reward_potential: int = typer.Option(0, help="Current reward potential counter"),
    defeated: list[str] = typer.Option(None, "--defeated", help="Brother already defeated (repeatable)"),
    item: list[str] = typer.Option(None, "--item", help="Monster to plan around (repeatable)"),
    tolerance: int = typer.Option(None, min=0, help="Prefer smaller plans within this score window"),
    iterations: int = typer.Option(None, min=1, help="Planner iteration cap"),
    exhaustive: bool = typer.Option(False, help="Search without an iteration cap"),
    snapshot_file: str = typer.Option(None, help="JSON snapshot exported from the client"),
) -> None:
    """Plan which monsters to defeat to reach the reward target."""
    overrides: dict = {"highlight_optimal": True}
    try:
        if target:
            overrides["target"] = target_by_name(target)
        if item:
            overrides["wanted"] = tuple(DEFAULT_CATALOG.resolve(item))
    except (UnknownItemError, UnknownTargetError) as exc:
        raise typer.BadParameter(exc.args[0]) from exc
    if tolerance is not None:
        overrides["size_tolerance"] = tolerance
    if iterations is not None:
        overrides["max_iterations"] = iterations
    if exhaustive:
        overrides["max_iterations"] = None
    preferences = replace(_settings_preferences(), **overrides)

    snapshot = _load_snapshot(snapshot_file, reward_potential, list(defeated or []))
    try:
        snapshot.defeated_items(DEFAULT_CATALOG)
    except UnknownItemError as exc:
        raise typer.BadParameter(exc.args[0]) from exc

    coordinator = PlanCoordinator(preferences, telemetry=LoggerTelemetry(level=logging.DEBUG))
    outcome = coordinator.update(snapshot)

    print(outcome.as_dict())
    if not outcome.meets_minimum:
        raise typer.Exit(code=1)


def _mtime(path: Path) -> int | None:
    return path.stat().st_mtime_ns if path.exists() else None


def _reloaded_preferences() -> PlanPreferences | None:
    try:
        return preferences_from_settings(Settings())
    except (UnknownItemError, UnknownTargetError, ValidationError) as exc:
        logger.warning("config_invalid", extra={"error": str(exc)})
        return None


def _print_update(update: PlanUpdate) -> None:
    payload = {"status": update.status.value, "reasons": list(update.reasons)}
    if update.outcome is not None:
        payload.update(update.outcome.as_dict())
    if update.error:
        payload["error"] = update.error
    print(payload)


@app.command()
def watch(
    snapshot_file: str = typer.Option(None, help="JSON snapshot exported from the client"),
    interval: float = typer.Option(1.0, min=0.0, help="Seconds between checks of the snapshot and config"),
    max_updates: int = typer.Option(0, min=0, help="Stop after this many plan updates (0 runs until interrupted)"),
) -> None:
    """Re-plan whenever the exported snapshot or the configuration changes."""
    path = snapshot_file or settings.snapshot_path
    if not path:
        raise typer.BadParameter("Provide --snapshot-file or set CRYPT_PLANNER_SNAPSHOT_PATH")

    source = JsonSnapshotSource(Path(path).expanduser())
    coordinator = PlanCoordinator(_settings_preferences(), telemetry=LoggerTelemetry(level=logging.DEBUG))

    async def _run() -> int:
        runtime = PlanUpdateRuntime(coordinator, source)
        await runtime.start()
        runtime.request_update("watch_started")
        pending = True
        processed = 0
        last_mtime = _mtime(source.path)
        try:
            while True:
                if pending:
                    await runtime.join()
                    _print_update(runtime.list_recent_updates(limit=1)[0])
                    processed += 1
                    pending = False
                    if max_updates and processed >= max_updates:
                        return processed

                await asyncio.sleep(interval)

                mtime = _mtime(source.path)
                if mtime != last_mtime:
                    last_mtime = mtime
                    runtime.request_update("snapshot_changed")
                    pending = True

                fresh = _reloaded_preferences()
                if fresh is not None and fresh != coordinator.preferences:
                    coordinator.update_preferences(fresh)
                    runtime.request_update("config_changed")
                    pending = True
        finally:
            await runtime.stop()

    processed = asyncio.run(_run())
    logger.info("watch_finished", extra={"updates": processed})


if __name__ == "__main__":
    app()
