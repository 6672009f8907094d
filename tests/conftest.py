"""Pytest configuration shared by every suite.

What:
  Make the ``sleepcron/src`` tree importable and keep the runtime
  configuration cache deterministic between tests.

How:
  Prepend the source directory to ``sys.path`` when present and point
  ``SLEEPCRON_CONFIG_PATH`` at the canned ``tests/data/config.yaml`` while
  resetting the loader cache before and after each test.
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "sleepcron" / "src"
if SRC_DIR.exists():
    sys.path.insert(0, str(SRC_DIR))

import pytest

from sleepcron.config.loader import reset_runtime_config

CONFIG_PATH = Path(__file__).resolve().parent / "data" / "config.yaml"


@pytest.fixture(autouse=True)
def runtime_config(monkeypatch: pytest.MonkeyPatch):
    """Apply the canned configuration file for every test."""

    monkeypatch.setenv("SLEEPCRON_CONFIG_PATH", str(CONFIG_PATH))
    reset_runtime_config()
    try:
        yield
    finally:
        reset_runtime_config()
