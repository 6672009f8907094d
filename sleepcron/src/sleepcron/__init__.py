"""
Module: sleepcron.__init__

What:
  Expose the dual-phase cron schedule engine: the decision function, its value
  objects, the cron evaluator error type and the SleepInfo planner.

Why:
  Reconcile loops embed the engine directly; a flat import surface keeps those
  call sites stable while the internal layout evolves.

Interfaces:
  - decide / ScheduleSpec / Verdict / is_time_in_delta / TOLERANCE_WINDOW
  - ScheduleFormatError / CronEvaluator / CroniterEvaluator
  - plan / SleepInfo / Operation / Plan
  - config, schedule, utils subpackages.
"""

from .schedule import (
    TOLERANCE_WINDOW,
    CronEvaluator,
    CroniterEvaluator,
    Operation,
    Plan,
    ScheduleFormatError,
    ScheduleSpec,
    SleepInfo,
    Verdict,
    decide,
    is_time_in_delta,
    plan,
)

__all__ = [
    "TOLERANCE_WINDOW",
    "CronEvaluator",
    "CroniterEvaluator",
    "Operation",
    "Plan",
    "ScheduleFormatError",
    "ScheduleSpec",
    "SleepInfo",
    "Verdict",
    "decide",
    "is_time_in_delta",
    "plan",
]
