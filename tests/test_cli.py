"""
Tests for the termsnap command-line interface (CLI).

We use `typer.testing.CliRunner` to invoke the app in-process against
calendar and entities files written to a temporary directory. ``--at`` pins
the reference instant so that every assertion is deterministic.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from termsnap import cli
from termsnap.cli import app

CALENDAR = [
    {
        "id": "2025",
        "name": "2025",
        "start": "2025-01-01",
        "end": "2026-01-01",
        "periods": [
            {"id": "2025-T1", "container_id": "2025", "name": "Term 1",
             "start": "2025-01-06", "end": "2025-04-04"},
            {"id": "2025-T2", "container_id": "2025", "name": "Term 2",
             "start": "2025-04-22", "end": "2025-08-01"},
            {"id": "2025-T3", "container_id": "2025", "name": "Term 3",
             "start": "2025-09-01", "end": "2025-12-05"},
        ],
    }
]

ENTITIES = {
    "entities": [
        {"id": "p1", "attributes": {"class_id": "P5"}},
        {"id": "p2", "attributes": {"class_id": "P6"}},
    ]
}


@pytest.fixture(autouse=True)
def _wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep rich from wrapping table cells and messages mid-assertion."""
    monkeypatch.setattr(cli.console, "width", 200)


@pytest.fixture
def runner() -> CliRunner:
    """Create a fresh CliRunner for each test."""
    return CliRunner()


@pytest.fixture
def base_args(tmp_path: Path) -> list[str]:
    cal = tmp_path / "calendar.json"
    ents = tmp_path / "entities.json"
    cal.write_text(json.dumps(CALENDAR), encoding="utf-8")
    ents.write_text(json.dumps(ENTITIES), encoding="utf-8")
    return [
        "--calendar", str(cal),
        "--entities", str(ents),
        "--store-dir", str(tmp_path / "store"),
    ]


def test_cli_help_shows_usage(runner: CliRunner) -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0, f"Help failed: {result.output}"
    assert "status" in result.output
    assert "repair" in result.output


def test_status_in_session(runner: CliRunner, base_args: list[str]) -> None:
    result = runner.invoke(app, [*base_args, "--at", "2025-06-15", "status"])
    assert result.exit_code == 0, result.output
    assert "Currently in Term 2" in result.output


def test_display_and_recess(runner: CliRunner, base_args: list[str]) -> None:
    shown = runner.invoke(app, [*base_args, "--at", "2025-04-10", "display"])
    assert shown.exit_code == 0, shown.output
    assert "Term 1" in shown.output and "recess" in shown.output

    listed = runner.invoke(app, [*base_args, "recess"])
    assert listed.exit_code == 0, listed.output
    assert "End of year recess" in listed.output


def test_validate_repair_cycle(runner: CliRunner, base_args: list[str]) -> None:
    at = ["--at", "2025-12-20"]

    failing = runner.invoke(app, [*base_args, *at, "validate"])
    assert failing.exit_code == 1
    assert "Incomplete" in failing.output

    accurate = runner.invoke(app, [*base_args, *at, "repair"])
    assert accurate.exit_code == 1
    assert "reconstruction_required" in accurate.output

    forced = runner.invoke(app, [*base_args, *at, "repair", "--force"])
    assert forced.exit_code == 0, forced.output
    assert "Created 6" in forced.output

    passing = runner.invoke(app, [*base_args, *at, "validate"])
    assert passing.exit_code == 0, passing.output
    assert "Complete" in passing.output

    stats = runner.invoke(app, [*base_args, *at, "stats"])
    assert stats.exit_code == 0
    assert "6" in stats.output


def test_show_and_coverage(runner: CliRunner, base_args: list[str]) -> None:
    shown = runner.invoke(app, [*base_args, "--at", "2025-06-15", "show", "p1", "2025-T2"])
    assert shown.exit_code == 0, shown.output
    assert "live" in shown.output and "P5" in shown.output

    missing = runner.invoke(app, [*base_args, "--at", "2025-06-15", "show", "ghost", "2025-T1"])
    assert missing.exit_code == 1
    assert "not found" in missing.output

    coverage = runner.invoke(app, [*base_args, "--at", "2025-06-15", "coverage"])
    assert coverage.exit_code == 0
    assert "Expected 2" in coverage.output


def test_maintain_and_cleanup(runner: CliRunner, base_args: list[str]) -> None:
    maintained = runner.invoke(app, [*base_args, "--at", "2025-12-08", "maintain"])
    assert maintained.exit_code == 0, maintained.output
    assert "2 snapshots created" in maintained.output

    cleaned = runner.invoke(app, [*base_args, "--at", "2025-12-08", "cleanup"])
    assert cleaned.exit_code == 0
    assert "Deleted 0" in cleaned.output


def test_missing_calendar_fails(runner: CliRunner) -> None:
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 1
    assert "No calendar file" in result.output
