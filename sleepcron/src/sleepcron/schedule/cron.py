"""Cron evaluation primitives for sleepcron schedules.

What:
  Parse standard five-field cron expressions (minute, hour, day-of-month,
  month, day-of-week) and compute the next matching instant strictly after a
  reference timestamp.

Why:
  The decision engine compares sampled wall-clock time against a discrete
  minute grid. Keeping the grid arithmetic behind a small evaluator protocol
  lets the engine stay pure and allows alternative cron grammars to be plugged
  in without touching the decision logic.

How:
  Wrap :mod:`croniter` with UTC defaults. Field-count validation happens
  up-front so the diagnostics match the classic ``expected exactly 5 fields``
  wording; every field-level failure keeps croniter's message verbatim.
  References are floored to the whole minute before being handed to croniter,
  which makes the lower bound exclusive regardless of sub-minute components.

Interfaces:
  - :class:`ScheduleFormatError`: permanent input error for malformed schedules.
  - :class:`ParsedSchedule`: validated expression.
  - :class:`CronEvaluator`: protocol implemented by evaluators.
  - :class:`CroniterEvaluator`: default croniter-backed evaluator.
  - :func:`parse`, :func:`next_after`, :func:`iter_occurrences`: helpers bound
    to the default evaluator.

Invariants:
  - Returned instants are timezone-aware UTC with zero seconds/microseconds.
  - ``next_after(parsed, ref) > ref`` for every reference.
  - Naive datetimes are interpreted as UTC.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, Optional, Protocol, Tuple

from croniter import CroniterError, croniter


CRON_FIELDS: Tuple[str, ...] = ("minute", "hour", "day-of-month", "month", "day-of-week")


class ScheduleFormatError(ValueError):
    """Raised when a cron expression cannot be parsed or never matches.

    What:
      Carry the human-readable message alongside the untouched ``detail`` from
      the underlying field validation.

    Why:
      Operators need actionable diagnostics; callers prefix the message with the
      schedule that failed while the original detail remains available for
      display or assertions.

    How:
      Subclass :class:`ValueError` and store ``detail`` and ``schedule`` (which
      schedule failed, when known) as attributes.
    """

    def __init__(self, message: str, *, detail: Optional[str] = None, schedule: Optional[str] = None) -> None:
        super().__init__(message)
        self.detail = message if detail is None else detail
        self.schedule = schedule


@dataclass(frozen=True)
class ParsedSchedule:
    """Validated cron expression split into its five fields."""

    expr: str
    fields: Tuple[str, ...]

    def field(self, name: str) -> str:
        """Return the raw text of the named field (see :data:`CRON_FIELDS`)."""

        return self.fields[CRON_FIELDS.index(name)]


class CronEvaluator(Protocol):
    """Capability required by the decision engine from a cron grammar."""

    def parse(self, expr: str) -> ParsedSchedule:
        ...

    def next_after(self, parsed: ParsedSchedule, reference: datetime) -> datetime:
        ...


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime, reading naive values as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CroniterEvaluator:
    """Default :class:`CronEvaluator` backed by :mod:`croniter`.

    What:
      Validate expressions and compute next occurrences on the minute grid.

    Why:
      croniter implements the standard cron semantics (``*`` wildcards, ranges,
      steps, names, and the day-of-month/day-of-week OR convention) so the
      project does not maintain its own field matcher.

    How:
      :meth:`parse` checks the field count and lets croniter expand the fields,
      converting :class:`croniter.CroniterError` into
      :class:`ScheduleFormatError`. :meth:`next_after` anchors a fresh iterator
      on the reference floored to the minute; croniter skips an anchor that
      itself matches, which yields the exclusive lower bound.

    The evaluator holds no mutable state and is safe to share between threads.
    """

    def parse(self, expr: str) -> ParsedSchedule:
        fields = tuple(expr.split())
        if not fields:
            raise ScheduleFormatError("empty spec string")
        if len(fields) != len(CRON_FIELDS):
            raise ScheduleFormatError(
                f"expected exactly {len(CRON_FIELDS)} fields, found {len(fields)}: [{expr}]"
            )
        normalised = " ".join(fields)
        try:
            croniter(normalised)
        except (CroniterError, ValueError, KeyError) as exc:
            raise ScheduleFormatError(str(exc)) from exc
        return ParsedSchedule(expr=normalised, fields=fields)

    def next_after(self, parsed: ParsedSchedule, reference: datetime) -> datetime:
        anchor = as_utc(reference).replace(second=0, microsecond=0)
        try:
            next_time = croniter(parsed.expr, anchor).get_next(datetime)
        except (CroniterError, ValueError) as exc:
            raise ScheduleFormatError(str(exc)) from exc
        # NOTE: croniter returns a float when the anchor is not a datetime.
        if not isinstance(next_time, datetime):
            next_time = datetime.fromtimestamp(next_time, timezone.utc)
        return as_utc(next_time).replace(second=0, microsecond=0)


DEFAULT_EVALUATOR = CroniterEvaluator()


def parse(expr: str) -> ParsedSchedule:
    """Parse ``expr`` with the default evaluator."""

    return DEFAULT_EVALUATOR.parse(expr)


def next_after(parsed: ParsedSchedule, reference: datetime) -> datetime:
    """Return the first occurrence of ``parsed`` strictly after ``reference``."""

    return DEFAULT_EVALUATOR.next_after(parsed, reference)


def iter_occurrences(
    expr: str,
    after: datetime,
    count: int,
    *,
    evaluator: Optional[CronEvaluator] = None,
) -> Iterator[datetime]:
    """Yield the next ``count`` occurrences of ``expr`` after ``after``.

    Args:
      expr: Five-field cron expression.
      after: Exclusive lower bound for the first occurrence.
      count: Number of occurrences to produce; non-positive values yield nothing.
      evaluator: Optional evaluator overriding the croniter default.

    Raises:
      ScheduleFormatError: If ``expr`` is malformed.
    """

    active = evaluator or DEFAULT_EVALUATOR
    parsed = active.parse(expr)
    cursor = after
    for _ in range(max(count, 0)):
        cursor = active.next_after(parsed, cursor)
        yield cursor
