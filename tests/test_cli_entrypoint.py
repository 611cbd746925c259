from __future__ import annotations

import importlib
import json
from pathlib import Path

import pytest


def test_console_entrypoint_exposes_app() -> None:
    pytest.importorskip("typer")

    module = importlib.import_module("crypt_planner.main")

    assert hasattr(module, "app")
    assert module.app is not None


def test_plan_command_prints_outcome(tmp_path: Path) -> None:
    pytest.importorskip("typer")
    from typer.testing import CliRunner

    from crypt_planner.main import app

    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(json.dumps({"reward_potential": 0, "defeated": []}), encoding="utf-8")

    result = CliRunner().invoke(
        app,
        ["plan", "--target", "blood_rune", "--snapshot-file", str(snapshot), "--exhaustive", "--tolerance", "0"],
    )

    assert result.exit_code == 0, result.output
    assert "880" in result.output
    assert "Giant crypt spider" in result.output


def test_plan_command_rejects_unknown_target() -> None:
    pytest.importorskip("typer")
    from typer.testing import CliRunner

    from crypt_planner.main import app

    result = CliRunner().invoke(app, ["plan", "--target", "rune_platebody"])

    assert result.exit_code != 0


def test_watch_command_plans_from_snapshot_file(tmp_path: Path) -> None:
    pytest.importorskip("typer")
    from typer.testing import CliRunner

    from crypt_planner.main import app

    snapshot = tmp_path / "snapshot.json"
    snapshot.write_text(json.dumps({"reward_potential": 0, "defeated": []}), encoding="utf-8")

    result = CliRunner().invoke(
        app, ["watch", "--snapshot-file", str(snapshot), "--max-updates", "1", "--interval", "0"]
    )

    assert result.exit_code == 0, result.output
    assert "watch_started" in result.output
    assert "succeeded" in result.output
    assert "880" in result.output


def test_watch_command_requires_snapshot_path(monkeypatch: pytest.MonkeyPatch) -> None:
    pytest.importorskip("typer")
    from typer.testing import CliRunner

    from crypt_planner import main

    monkeypatch.setattr(main.settings, "snapshot_path", None)

    result = CliRunner().invoke(main.app, ["watch"])

    assert result.exit_code != 0
