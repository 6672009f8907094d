"""Pydantic models describing the sleepcron configuration document."""
from __future__ import annotations

from datetime import timedelta
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..schedule.sleepinfo import SleepInfo, time_to_cron
from ..schedule.cron import ScheduleFormatError


class ValidationError(ValueError):
    """Raised when configuration data does not satisfy the schema."""


class EngineSettings(BaseModel):
    """Decision engine tuning."""

    model_config = ConfigDict(extra="forbid")

    tolerance_seconds: float = Field(default=1.0, ge=0, lt=60)

    @property
    def tolerance(self) -> timedelta:
        return timedelta(seconds=self.tolerance_seconds)


class SleepInfoConfig(BaseModel):
    """A named downtime window."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1)
    weekdays: str = "*"
    sleep_at: str
    wake_up_at: Optional[str] = None

    @field_validator("sleep_at", "wake_up_at")
    @classmethod
    def _validate_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            time_to_cron(value, "*")
        except ScheduleFormatError as exc:
            raise ValidationError(str(exc)) from exc
        return value.strip()

    @field_validator("weekdays")
    @classmethod
    def _validate_weekdays(cls, value: str) -> str:
        value = value.strip()
        if not value or len(value.split()) != 1:
            raise ValidationError("weekdays must be a single cron day-of-week field")
        return value

    def to_sleep_info(self) -> SleepInfo:
        return SleepInfo(weekdays=self.weekdays, sleep_at=self.sleep_at, wake_up_at=self.wake_up_at)


class RuntimeConfig(BaseModel):
    """Root configuration loaded from ``config.yaml``."""

    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = 1
    engine: EngineSettings = Field(default_factory=EngineSettings)
    sleep_infos: List[SleepInfoConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> "RuntimeConfig":
        seen: set[str] = set()
        for item in self.sleep_infos:
            if item.name in seen:
                raise ValidationError(f"duplicate sleep_info name '{item.name}'")
            seen.add(item.name)
        return self

    def sleep_info(self, name: str) -> SleepInfo:
        """Return the planner :class:`SleepInfo` registered under ``name``.

        Raises:
          KeyError: If no SleepInfo uses ``name``.
        """

        for item in self.sleep_infos:
            if item.name == name:
                return item.to_sleep_info()
        raise KeyError(name)
