"""Schedule evaluation package.

Re-exports the cron evaluator, the decision engine and the SleepInfo planner so
callers do not depend on the module layout.
"""

from .cron import (
    CronEvaluator,
    CroniterEvaluator,
    ParsedSchedule,
    ScheduleFormatError,
    iter_occurrences,
    next_after,
    parse,
)
from .engine import TOLERANCE_WINDOW, ScheduleSpec, Verdict, decide, is_time_in_delta
from .sleepinfo import Operation, Plan, SleepInfo, build_spec, current_operation, plan, time_to_cron

__all__ = [
    "CronEvaluator",
    "CroniterEvaluator",
    "ParsedSchedule",
    "ScheduleFormatError",
    "iter_occurrences",
    "next_after",
    "parse",
    "TOLERANCE_WINDOW",
    "ScheduleSpec",
    "Verdict",
    "decide",
    "is_time_in_delta",
    "Operation",
    "Plan",
    "SleepInfo",
    "build_spec",
    "current_operation",
    "plan",
    "time_to_cron",
]
