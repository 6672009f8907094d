"""Sleep/wake-up planning on top of the decision engine.

What:
  Translate a SleepInfo definition (weekdays, sleep time and optional wake-up
  time) plus the last performed operation into the :class:`ScheduleSpec` the
  engine expects, and report which operation a due verdict stands for.

Why:
  Operators describe downtime windows as wall-clock times, not cron
  expressions. The two-phase alternation between sleeping and waking up lives
  in the caller's state; this module keeps that bookkeeping in one place.

How:
  ``HH:MM`` values become ``"<MM> <HH> * * <weekdays>"`` expressions. The
  operation that ran last selects which expression is "current" and which is
  "next". Without a wake-up time both roles use the sleep expression, which is
  the coincident-schedule case handled by the engine.

Interfaces:
  :class:`Operation`, :class:`SleepInfo`, :class:`Plan`, :func:`time_to_cron`,
  :func:`current_operation`, :func:`build_spec`, :func:`plan`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, Optional

from ..utils.logging import JsonLogger
from .cron import CronEvaluator, ScheduleFormatError
from .engine import TOLERANCE_WINDOW, ScheduleSpec, Verdict, decide


_TIME_PATTERN = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class Operation(str, Enum):
    """Operations alternated by a SleepInfo."""

    SLEEP = "sleep"
    WAKE_UP = "wake_up"


def time_to_cron(hhmm: str, weekdays: str) -> str:
    """Return the cron expression firing at ``hhmm`` on ``weekdays``.

    Raises:
      ScheduleFormatError: If ``hhmm`` is not a 24h ``HH:MM`` value.
    """

    match = _TIME_PATTERN.match(hhmm.strip()) if isinstance(hhmm, str) else None
    if match is None:
        raise ScheduleFormatError(f"time should be of format HH:mm, actual: {hhmm}")
    hour, minute = match.groups()
    return f"{int(minute)} {int(hour)} * * {weekdays}"


@dataclass(frozen=True)
class SleepInfo:
    """Downtime window definition.

    Attributes:
      weekdays: Cron day-of-week field (``"1-5"``, ``"*"``, ``"mon,wed"``...).
      sleep_at: ``HH:MM`` time of the sleep operation.
      wake_up_at: ``HH:MM`` time of the wake-up operation, ``None`` to only
        sleep.
    """

    weekdays: str
    sleep_at: str
    wake_up_at: Optional[str] = None

    def sleep_schedule(self) -> str:
        return time_to_cron(self.sleep_at, self.weekdays)

    def wake_up_schedule(self) -> Optional[str]:
        if self.wake_up_at is None:
            return None
        return time_to_cron(self.wake_up_at, self.weekdays)


@dataclass(frozen=True)
class Plan:
    """Verdict annotated with the operations it refers to.

    ``operation`` is what the caller performs when ``verdict.is_due``;
    ``next_operation`` is what ``verdict.next_target`` fires once that happened.
    """

    operation: Operation
    next_operation: Operation
    verdict: Verdict

    def as_dict(self) -> Dict[str, Any]:
        payload = {"operation": self.operation.value, "next_operation": self.next_operation.value}
        payload.update(self.verdict.as_dict())
        return payload


def current_operation(sleep_info: SleepInfo, last_operation: Optional[Operation]) -> Operation:
    """Return the operation fired by the current schedule."""

    if sleep_info.wake_up_at is None:
        return Operation.SLEEP
    if last_operation is Operation.SLEEP:
        return Operation.WAKE_UP
    return Operation.SLEEP


def _opposite(sleep_info: SleepInfo, operation: Operation) -> Operation:
    if sleep_info.wake_up_at is None:
        return Operation.SLEEP
    return Operation.WAKE_UP if operation is Operation.SLEEP else Operation.SLEEP


def _schedule_for(sleep_info: SleepInfo, operation: Operation) -> str:
    if operation is Operation.WAKE_UP and sleep_info.wake_up_at is not None:
        return time_to_cron(sleep_info.wake_up_at, sleep_info.weekdays)
    return sleep_info.sleep_schedule()


def build_spec(
    sleep_info: SleepInfo,
    last_operation: Optional[Operation] = None,
    last_fired: Optional[datetime] = None,
) -> ScheduleSpec:
    """Build the engine input for the phase following ``last_operation``.

    Raises:
      ScheduleFormatError: If a configured time is malformed.
    """

    operation = current_operation(sleep_info, last_operation)
    return ScheduleSpec(
        current_expr=_schedule_for(sleep_info, operation),
        next_expr=_schedule_for(sleep_info, _opposite(sleep_info, operation)),
        last_fired=last_fired,
    )


def plan(
    sleep_info: SleepInfo,
    now: datetime,
    *,
    last_operation: Optional[Operation] = None,
    last_fired: Optional[datetime] = None,
    evaluator: Optional[CronEvaluator] = None,
    tolerance: timedelta = TOLERANCE_WINDOW,
    logger: Optional[JsonLogger] = None,
) -> Plan:
    """Decide whether the SleepInfo's pending operation is due at ``now``.

    What:
      Combine :func:`build_spec` and :func:`~sleepcron.schedule.engine.decide`.

    How:
      The returned plan names the operation to perform when due and the one
      the next target refers to. After performing a due operation the caller
      stores ``plan.operation`` as ``last_operation`` and
      ``plan.verdict.scheduled_time`` as ``last_fired``.

    Raises:
      ScheduleFormatError: If ``sleep_at`` or ``wake_up_at`` is malformed.
        Invalid weekdays surface through ``plan.verdict.error``.
    """

    operation = current_operation(sleep_info, last_operation)
    spec = build_spec(sleep_info, last_operation, last_fired)
    verdict = decide(spec, now, evaluator=evaluator, tolerance=tolerance, logger=logger)
    result = Plan(
        operation=operation,
        next_operation=_opposite(sleep_info, operation),
        verdict=verdict,
    )
    if logger is not None and verdict.is_due:
        logger.info(
            "operation_due",
            operation=result.operation,
            next_operation=result.next_operation,
            next_target=verdict.next_target,
        )
    return result
