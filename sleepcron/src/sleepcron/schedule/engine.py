"""sleepcron.schedule.engine

What:
  Decide, for a pair of cron schedules and the instant the last operation
  fired, whether the "current" operation is due now, which instant is the next
  meaningful checkpoint, and how long a reconcile loop should wait before
  asking again.

Why:
  Control loops sample wall-clock time imprecisely: a tick rarely lands on the
  exact minute a cron field matches. The engine reconciles the discrete grid
  with that sampling through a symmetric tolerance window, and it must keep
  making forward progress when both schedules coincide.

How:
  - Parse both expressions fresh on every call through a pluggable
    :class:`~sleepcron.schedule.cron.CronEvaluator`.
  - Search for the first grid point of the current schedule inside or after
    the tolerance window around ``now``; a ``last_fired`` inside that window
    pushes the search past the grid point that already fired.
  - When due, anchor the next schedule on the fired grid point (never on
    ``now``) so coincident schedules always land a full period later.

Interfaces:
  - :class:`ScheduleSpec` and :class:`Verdict` value objects.
  - :func:`decide` transition function.
  - :func:`is_time_in_delta` tolerance comparator.
  - :data:`TOLERANCE_WINDOW` default window.

Invariants & Safety:
  - ``decide`` is a pure function of its inputs; wall-clock time is never read.
  - ``Verdict.wait_for`` is never negative.
  - Parse failures are reported through ``Verdict.error``; ``decide`` does not
    raise for malformed schedules.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from ..utils.logging import JsonLogger
from .cron import DEFAULT_EVALUATOR, CronEvaluator, ScheduleFormatError, as_utc


TOLERANCE_WINDOW = timedelta(seconds=1)
GRID_STEP = timedelta(minutes=1)

# Smallest datetime increment; the search starts just before the window opens.
_RESOLUTION = timedelta(microseconds=1)

_SCHEDULE_LABELS = {
    "current": "current schedule not valid",
    "next": "next op schedule not valid",
}


@dataclass(frozen=True)
class ScheduleSpec:
    """Immutable input for a single :func:`decide` call.

    Attributes:
      current_expr: Cron expression firing the current operation.
      next_expr: Cron expression firing the complementary operation.
      last_fired: Instant the current operation last fired, ``None`` if never.
    """

    current_expr: str
    next_expr: str
    last_fired: Optional[datetime] = None


@dataclass(frozen=True)
class Verdict:
    """Outcome of :func:`decide`.

    What:
      Report due-ness, the next checkpoint and the recommended re-check delay.

    How:
      ``scheduled_time`` is the grid point of the current schedule the verdict
      was computed against; when ``is_due`` it is the instant that just fired
      and callers should persist it as the new ``last_fired``. When ``error`` is
      set every other field holds its zero value and must be ignored.
    """

    is_due: bool
    next_target: Optional[datetime]
    wait_for: timedelta
    scheduled_time: Optional[datetime] = None
    error: Optional[ScheduleFormatError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: ScheduleFormatError) -> "Verdict":
        return cls(is_due=False, next_target=None, wait_for=timedelta(0), error=error)

    def as_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly mapping of the verdict."""

        return {
            "ok": self.ok,
            "is_due": self.is_due,
            "next_target": self.next_target.isoformat() if self.next_target else None,
            "scheduled_time": self.scheduled_time.isoformat() if self.scheduled_time else None,
            "wait_for_s": self.wait_for.total_seconds(),
            "error": str(self.error) if self.error else None,
        }


def is_time_in_delta(t1: datetime, t2: datetime, delta: timedelta) -> bool:
    """Return ``True`` when ``|t1 - t2| <= delta`` (inclusive, symmetric)."""

    return abs(t1 - t2) <= delta


def _parse(evaluator: CronEvaluator, expr: str, schedule: str):
    try:
        return evaluator.parse(expr)
    except ScheduleFormatError as exc:
        raise ScheduleFormatError(
            f"{_SCHEDULE_LABELS[schedule]}: {exc.detail}",
            detail=exc.detail,
            schedule=schedule,
        ) from exc


def _next(evaluator: CronEvaluator, parsed: Any, reference: datetime, schedule: str) -> datetime:
    try:
        return as_utc(evaluator.next_after(parsed, reference))
    except ScheduleFormatError as exc:
        raise ScheduleFormatError(
            f"{_SCHEDULE_LABELS[schedule]}: {exc.detail}",
            detail=exc.detail,
            schedule=schedule,
        ) from exc


def decide(
    spec: ScheduleSpec,
    now: datetime,
    *,
    evaluator: Optional[CronEvaluator] = None,
    tolerance: timedelta = TOLERANCE_WINDOW,
    logger: Optional[JsonLogger] = None,
) -> Verdict:
    """Compute the verdict for ``spec`` at instant ``now``.

    What:
      Determine whether the current operation is due, the next target instant
      and the wait before the next evaluation.

    Why:
      The reconcile loop owns the two-phase state (awaiting current trigger,
      awaiting next trigger); ``is_due`` tells it which boundary was crossed and
      ``wait_for`` when to look again.

    How:
      1. Parse both schedules; failures become ``Verdict.error`` with a prefix
         naming the schedule.
      2. The due window is ``[now - tolerance, now + tolerance]``. Search the
         current schedule from just before the window opens, or from
         ``last_fired`` when it falls later. Any older ``last_fired`` produces
         the same verdict as none, so missed occurrences are not replayed.
      3. Due: target the next schedule strictly after the fired grid point.
         Not due: target the grid point itself, clamping the wait at zero.

    Args:
      spec: Schedules and last fired instant.
      now: Sampled current instant; naive values are read as UTC.
      evaluator: Cron grammar; defaults to the croniter evaluator.
      tolerance: Symmetric due window, shorter than the one-minute grid step.
      logger: Optional structured logger receiving one record per call.

    Returns:
      The computed :class:`Verdict`.

    Raises:
      ValueError: If ``tolerance`` is negative or not shorter than a minute.
    """

    if tolerance < timedelta(0) or tolerance >= GRID_STEP:
        raise ValueError(f"tolerance must be within [0s, {GRID_STEP.total_seconds():.0f}s): {tolerance}")

    active = evaluator or DEFAULT_EVALUATOR
    now = as_utc(now)
    try:
        current = _parse(active, spec.current_expr, "current")
        upcoming = _parse(active, spec.next_expr, "next")

        reference = now - tolerance - _RESOLUTION
        if spec.last_fired is not None:
            reference = max(reference, as_utc(spec.last_fired))

        scheduled_time = _next(active, current, reference, "current")
        is_due = is_time_in_delta(now, scheduled_time, tolerance)
        if is_due:
            next_target = _next(active, upcoming, scheduled_time, "next")
            wait_for = next_target - now
        else:
            next_target = scheduled_time
            wait_for = max(scheduled_time - now, timedelta(0))
    except ScheduleFormatError as exc:
        if logger is not None:
            logger.error("schedule_invalid", schedule=exc.schedule, error=exc, now=now)
        return Verdict.failed(exc)

    verdict = Verdict(
        is_due=is_due,
        next_target=next_target,
        wait_for=wait_for,
        scheduled_time=scheduled_time,
    )
    if logger is not None:
        logger.debug(
            "schedule_decided",
            now=now,
            is_due=is_due,
            scheduled_time=scheduled_time,
            next_target=next_target,
            wait_for=wait_for,
        )
    return verdict
