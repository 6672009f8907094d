"""sleepcron configuration package.

What:
  Provide the import surface for configuration loading and the Pydantic schema
  types.

Interfaces:
  - load_runtime_config / get_runtime_config / reset_runtime_config /
    parse_runtime_config: resolve and validate ``config.yaml``.
  - RuntimeConfig / EngineSettings / SleepInfoConfig: schema models.
  - ConfigLoadError / RuntimeConfigError / ValidationError: error types.
"""

from .loader import (
    ConfigLoadError,
    RuntimeConfigError,
    get_runtime_config,
    load_runtime_config,
    parse_runtime_config,
    reset_runtime_config,
)
from .schema import EngineSettings, RuntimeConfig, SleepInfoConfig, ValidationError

__all__ = [
    "ConfigLoadError",
    "RuntimeConfigError",
    "get_runtime_config",
    "load_runtime_config",
    "parse_runtime_config",
    "reset_runtime_config",
    "EngineSettings",
    "RuntimeConfig",
    "SleepInfoConfig",
    "ValidationError",
]
