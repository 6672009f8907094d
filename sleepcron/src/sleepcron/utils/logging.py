"""Structured JSON logging for sleepcron components.

What:
  Offer a small facade over text streams so schedule decisions can be emitted
  as single-line JSON records with a stable set of fields.

Why:
  Reconcile loops call the engine on every tick; grepping or indexing those
  decisions is only practical when every record shares the same layout and
  timestamps are rendered consistently.

How:
  Provide a :class:`JsonLogger` dataclass bound to a stream and a component
  label. ``extra`` values are normalised (datetimes to ISO-8601, timedeltas to
  seconds, nested mappings recursively) before ``json.dump`` writes them.

Interfaces:
  :class:`JsonLogger`, :func:`get_logger`.

Invariants & Safety:
  - Every record includes ``ts``, ``lvl``, ``msg`` and ``component``.
  - Streams are flushed after every write.
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Optional


@dataclass
class JsonLogger:
    """Structured JSON logger writing one record per line.

    What:
      Emit log entries that include a timestamp, severity, component tag and
      optional structured context.

    Why:
      Centralising the record layout keeps engine, planner and CLI output
      uniform for log pipelines and test assertions.

    How:
      Store the destination stream and component label, expose severity
      helpers (:meth:`debug`, :meth:`info`, :meth:`warning`, :meth:`error`) that
      merge a canonical payload with normalised extras.
    """

    stream: Any = field(default_factory=lambda: sys.stdout)
    component: str = "sleepcron"

    def log(self, level: str, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        """Emit a structured JSON log entry.

        Args:
          level: Human-readable severity (e.g., ``"info"`` or ``"error"``).
          message: Core log message.
          extra: Optional context dictionary merged into the record.
        """

        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "lvl": level.upper(),
            "msg": message,
            "component": self.component,
        }
        if extra:
            payload.update(self._normalise(extra))
        json.dump(payload, self.stream, separators=(",", ":"))
        self.stream.write("\n")
        self.stream.flush()

    def debug(self, message: str, **kwargs: Any) -> None:
        self.log("DEBUG", message, extra=kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self.log("INFO", message, extra=kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self.log("WARN", message, extra=kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self.log("ERROR", message, extra=kwargs)

    @staticmethod
    def _normalise(data: Dict[str, Any]) -> Dict[str, Any]:
        """Convert values json cannot encode into stable representations.

        What:
          Produce a copy of ``data`` where datetimes become ISO-8601 strings,
          timedeltas become float seconds, enums their values and exceptions
          their messages.

        How:
          Walk the mapping, recursing into nested dictionaries so the structure
          is preserved for downstream parsing.
        """

        result: Dict[str, Any] = {}
        for key, value in data.items():
            if isinstance(value, dict):
                result[key] = JsonLogger._normalise(value)
            elif isinstance(value, datetime):
                result[key] = value.isoformat()
            elif isinstance(value, timedelta):
                result[key] = value.total_seconds()
            elif isinstance(value, Enum):
                result[key] = value.value
            elif isinstance(value, BaseException):
                result[key] = str(value)
            else:
                result[key] = value
        return result


def get_logger(component: str) -> JsonLogger:
    """Construct a :class:`JsonLogger` bound to ``component`` on ``stdout``."""

    return JsonLogger(component=component)
