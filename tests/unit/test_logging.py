"""Tests for the structured JSON logger."""

import io
import json
from datetime import datetime, timedelta, timezone

from sleepcron.schedule.sleepinfo import Operation
from sleepcron.utils.logging import JsonLogger, get_logger


def test_record_layout_and_normalisation():
    stream = io.StringIO()
    logger = JsonLogger(stream=stream, component="engine")

    logger.warning(
        "late_tick",
        at=datetime(2021, 3, 23, 20, 6, tzinfo=timezone.utc),
        lag=timedelta(seconds=5),
        operation=Operation.WAKE_UP,
        nested={"error": ValueError("boom"), "count": 2},
    )

    record = json.loads(stream.getvalue())
    assert record["lvl"] == "WARN"
    assert record["msg"] == "late_tick"
    assert record["component"] == "engine"
    assert record["at"] == "2021-03-23T20:06:00+00:00"
    assert record["lag"] == 5.0
    assert record["operation"] == "wake_up"
    assert record["nested"] == {"error": "boom", "count": 2}
    assert "ts" in record


def test_one_line_per_record():
    stream = io.StringIO()
    logger = JsonLogger(stream=stream)
    logger.info("first")
    logger.error("second")
    lines = stream.getvalue().splitlines()
    assert [json.loads(line)["lvl"] for line in lines] == ["INFO", "ERROR"]


def test_get_logger_binds_component():
    assert get_logger("planner").component == "planner"
