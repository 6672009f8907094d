"""CLI wiring tests ensuring Typer commands integrate with the engine.

What:
  Validate ``decide``, ``plan``, ``next`` and ``validate`` end to end, covering
  success paths, schedule errors and configuration failures.

How:
  Use :class:`typer.testing.CliRunner` with explicit ``--now`` instants so no
  test depends on the wall clock; the canned configuration is provided by the
  autouse fixture in ``tests/conftest.py``.
"""
from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from sleepcron.cli import app


runner = CliRunner()


def _json(result) -> dict:
    return json.loads(result.stdout.strip().splitlines()[-1])


def test_decide_due_verdict() -> None:
    """``sleepcron decide`` prints the verdict as JSON."""

    result = runner.invoke(app, ["decide", "6 * * * *", "10 * * * *", "--now", "2021-03-23T20:05:59Z"])

    assert result.exit_code == 0, result.output
    payload = _json(result)
    assert payload["is_due"] is True
    assert payload["next_target"] == "2021-03-23T20:10:00+00:00"
    assert payload["scheduled_time"] == "2021-03-23T20:06:00+00:00"
    assert payload["wait_for_s"] == 241.0


def test_decide_with_last_fired() -> None:
    result = runner.invoke(
        app,
        [
            "decide",
            "6 * * * *",
            "6 * * * *",
            "--now",
            "2021-03-23T20:06:00+00:00",
            "--last-fired",
            "2021-03-23T19:06:01Z",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = _json(result)
    assert payload["next_target"] == "2021-03-23T21:06:00+00:00"
    assert payload["wait_for_s"] == 3600.0


def test_decide_invalid_schedule_exits_with_error() -> None:
    result = runner.invoke(app, ["decide", "* * * *", "10 * * * *", "--now", "2021-03-23T20:05:59Z"])

    assert result.exit_code == 1
    assert "current schedule not valid: expected exactly 5 fields, found 4" in result.output


def test_decide_rejects_malformed_instant() -> None:
    result = runner.invoke(app, ["decide", "6 * * * *", "10 * * * *", "--now", "yesterday"])

    assert result.exit_code != 0
    assert "ISO-8601" in result.output


def test_decide_verbose_emits_engine_record() -> None:
    result = runner.invoke(
        app,
        ["decide", "6 * * * *", "10 * * * *", "--now", "2021-03-23T20:05:59Z", "--verbose"],
    )

    assert result.exit_code == 0, result.output
    assert "schedule_decided" in result.output


def test_plan_from_configuration() -> None:
    result = runner.invoke(
        app,
        ["plan", "working-hours", "--now", "2021-03-23T20:00:00Z"],
    )

    assert result.exit_code == 0, result.output
    payload = _json(result)
    assert payload["name"] == "working-hours"
    assert payload["operation"] == "sleep"
    assert payload["next_operation"] == "wake_up"
    assert payload["is_due"] is True
    assert payload["next_target"] == "2021-03-24T08:00:00+00:00"


def test_plan_after_sleep_waits_for_wake_up() -> None:
    result = runner.invoke(
        app,
        [
            "plan",
            "working-hours",
            "--last-operation",
            "sleep",
            "--last-fired",
            "2021-03-23T20:00:00Z",
            "--now",
            "2021-03-23T21:00:00Z",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = _json(result)
    assert payload["operation"] == "wake_up"
    assert payload["is_due"] is False
    assert payload["wait_for_s"] == 11 * 3600.0


def test_plan_unknown_name_fails() -> None:
    result = runner.invoke(app, ["plan", "missing", "--now", "2021-03-23T20:00:00Z"])

    assert result.exit_code == 1
    assert "unknown sleep_info: missing" in result.output


def test_plan_with_broken_config_fails(tmp_path) -> None:
    broken = tmp_path / "config.yaml"
    broken.write_text("sleep_infos:\n  - name: a\n")

    result = runner.invoke(app, ["plan", "a", "--config", str(broken)])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_next_lists_occurrences() -> None:
    result = runner.invoke(app, ["next", "*/20 * * * *", "--count", "3", "--after", "2021-03-23T20:00:00Z"])

    assert result.exit_code == 0, result.output
    assert result.stdout.split() == [
        "2021-03-23T20:20:00+00:00",
        "2021-03-23T20:40:00+00:00",
        "2021-03-23T21:00:00+00:00",
    ]


def test_next_invalid_expression_fails() -> None:
    result = runner.invoke(app, ["next", "* * *"])

    assert result.exit_code == 1
    assert "expected exactly 5 fields, found 3" in result.output


def test_validate_canned_config() -> None:
    result = runner.invoke(app, ["validate"])

    assert result.exit_code == 0, result.output
    assert "ok: 2 sleep_info(s) valid" in result.output


@pytest.mark.parametrize(
    "document, fragment",
    [
        ("sleep_infos:\n  - name: bad\n    weekdays: '9'\n    sleep_at: '20:00'\n", "bad:"),
        ("sleep_infos: {}\n", "Invalid configuration"),
    ],
)
def test_validate_reports_invalid_config(tmp_path, document, fragment) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(document)

    result = runner.invoke(app, ["validate", "--config", str(config)])

    assert result.exit_code == 1
    assert fragment in result.output
