"""sleepcron command-line interface.

What:
  Provide a Typer-based entry point for evaluating schedules from shell
  scripts, cron wrappers and operators' terminals. The module exposes the
  ``decide``, ``plan``, ``next`` and ``validate`` commands.

Why:
  Reconcile loops embed the library directly, but operators need a way to ask
  "would this fire now, and when is the next checkpoint?" against the same
  semantics, and to lint configuration before rolling it out.

How:
  Parse instants from ISO-8601 options (defaulting to the current UTC wall
  clock, the only place the clock is read), call the engine or planner, and
  print one JSON document per invocation. ``--verbose`` routes the engine's
  structured records to stderr.

Interfaces:
  ``app`` (Typer application), ``decide_cmd``, ``plan_cmd``, ``next_cmd``,
  ``validate``.

Invariants & Safety:
  - Exit codes follow shell expectations (``0`` success, ``1`` failure).
  - Invalid schedules or configuration never print a partial verdict.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import typer

from .config.loader import ConfigLoadError, load_runtime_config
from .schedule.cron import ScheduleFormatError, as_utc, iter_occurrences
from .schedule.engine import ScheduleSpec, decide
from .schedule.sleepinfo import Operation, plan
from .utils.logging import JsonLogger


app = typer.Typer(help="Dual-phase cron schedule evaluation")

LOGGER = logging.getLogger("sleepcron.cli")


def _parse_instant(value: Optional[str], *, name: str) -> Optional[datetime]:
    """Parse an ISO-8601 option into an aware UTC datetime (``Z`` accepted)."""

    if value is None:
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError as exc:
        raise typer.BadParameter(f"{name} must be an ISO-8601 instant, got {value!r}") from exc


def _resolve_now(value: Optional[str]) -> datetime:
    return _parse_instant(value, name="--now") or datetime.now(timezone.utc)


def _engine_logger(verbose: bool) -> Optional[JsonLogger]:
    if not verbose:
        return None
    return JsonLogger(stream=sys.stderr, component="sleepcron.engine")


def _emit(payload: dict) -> None:
    typer.echo(json.dumps(payload, sort_keys=True))


@app.command("decide")
def decide_cmd(
    current: str = typer.Argument(..., help="Cron expression of the current operation"),
    next_schedule: str = typer.Argument(..., metavar="NEXT", help="Cron expression of the next operation"),
    last_fired: Optional[str] = typer.Option(None, "--last-fired", help="Instant the current operation last fired"),
    now: Optional[str] = typer.Option(None, "--now", help="Evaluate at this instant instead of the wall clock"),
    verbose: bool = typer.Option(False, "--verbose", help="Write engine records to stderr"),
) -> None:
    """Print the verdict for a pair of cron schedules."""

    spec = ScheduleSpec(
        current_expr=current,
        next_expr=next_schedule,
        last_fired=_parse_instant(last_fired, name="--last-fired"),
    )
    verdict = decide(spec, _resolve_now(now), logger=_engine_logger(verbose))
    if not verdict.ok:
        LOGGER.error("decide_failed error=%s", verdict.error)
        typer.echo(str(verdict.error), err=True)
        raise typer.Exit(code=1)
    _emit(verdict.as_dict())


@app.command("plan")
def plan_cmd(
    name: str = typer.Argument(..., help="SleepInfo name from the configuration"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to config.yaml"),
    last_operation: Optional[Operation] = typer.Option(
        None,
        "--last-operation",
        case_sensitive=False,
        help="Operation performed last",
    ),
    last_fired: Optional[str] = typer.Option(None, "--last-fired", help="Instant the last operation fired"),
    now: Optional[str] = typer.Option(None, "--now", help="Evaluate at this instant instead of the wall clock"),
    verbose: bool = typer.Option(False, "--verbose", help="Write engine records to stderr"),
) -> None:
    """Print the pending operation of a configured SleepInfo and its verdict."""

    try:
        runtime = load_runtime_config(config)
        sleep_info = runtime.sleep_info(name)
        result = plan(
            sleep_info,
            _resolve_now(now),
            last_operation=last_operation,
            last_fired=_parse_instant(last_fired, name="--last-fired"),
            tolerance=runtime.engine.tolerance,
            logger=_engine_logger(verbose),
        )
    except ConfigLoadError as exc:
        LOGGER.error("config_load_failed: %s", exc)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    except KeyError as exc:
        LOGGER.error("sleep_info_unknown name=%s", name)
        typer.echo(f"unknown sleep_info: {name}", err=True)
        raise typer.Exit(code=1) from exc
    except ScheduleFormatError as exc:
        LOGGER.error("plan_failed name=%s error=%s", name, exc)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    if not result.verdict.ok:
        LOGGER.error("plan_failed name=%s error=%s", name, result.verdict.error)
        typer.echo(str(result.verdict.error), err=True)
        raise typer.Exit(code=1)
    payload = result.as_dict()
    payload["name"] = name
    _emit(payload)


@app.command("next")
def next_cmd(
    expr: str = typer.Argument(..., help="Cron expression"),
    count: int = typer.Option(5, "--count", min=1, help="Number of occurrences to print"),
    after: Optional[str] = typer.Option(None, "--after", help="Exclusive lower bound (defaults to now)"),
) -> None:
    """Print the next occurrences of a cron expression."""

    start = _resolve_now(after)
    try:
        occurrences = list(iter_occurrences(expr, start, count))
    except ScheduleFormatError as exc:
        LOGGER.error("next_failed expr=%s error=%s", expr, exc)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc
    for occurrence in occurrences:
        typer.echo(occurrence.isoformat())


@app.command("validate")
def validate(
    config: Optional[str] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Validate the configuration and every schedule it defines."""

    try:
        runtime = load_runtime_config(config, reload=True)
    except ConfigLoadError as exc:
        LOGGER.error("config_load_failed: %s", exc)
        typer.echo(str(exc), err=True)
        raise typer.Exit(code=1) from exc

    epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
    for item in runtime.sleep_infos:
        sleep_info = item.to_sleep_info()
        for expr in filter(None, (sleep_info.sleep_schedule(), sleep_info.wake_up_schedule())):
            try:
                list(iter_occurrences(expr, epoch, 1))
            except ScheduleFormatError as exc:
                LOGGER.error("schedule_invalid name=%s expr=%s error=%s", item.name, expr, exc)
                typer.echo(f"{item.name}: {exc}", err=True)
                raise typer.Exit(code=1) from exc
    typer.echo(f"ok: {len(runtime.sleep_infos)} sleep_info(s) valid")


def main() -> None:
    """Execute the Typer application entry point."""

    app()


if __name__ == "__main__":  # pragma: no cover
    main()
