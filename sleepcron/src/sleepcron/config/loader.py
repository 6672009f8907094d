"""Strict loader for the sleepcron runtime configuration.

What:
  Locate, parse and validate ``config.yaml`` and cache the resulting
  :class:`~sleepcron.config.schema.RuntimeConfig`.

Why:
  SleepInfo definitions live outside the package and can be malformed.
  Centralising the parsing enforces one validation path and one set of error
  messages for every caller (CLI, embedding services, tests).

How:
  Resolve candidate paths from an explicit argument, the
  ``SLEEPCRON_CONFIG_PATH`` environment variable and well-known defaults. Parse
  YAML with :func:`yaml.safe_load` and validate with Pydantic, converting every
  failure into :class:`RuntimeConfigError` with path context.

Interfaces:
  - :func:`load_runtime_config` / :func:`get_runtime_config` /
    :func:`reset_runtime_config`: manage discovery and caching.
  - :func:`parse_runtime_config`: validate an in-memory YAML document.
  - :class:`ConfigLoadError`, :class:`RuntimeConfigError`: error hierarchy.

Invariants:
  - Payloads pass strict Pydantic validation before being returned.
  - The cache honours explicit reload requests and the candidate precedence.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterable, Optional, Tuple

import yaml
from pydantic import ValidationError as _PydanticValidationError

from .schema import RuntimeConfig


class ConfigLoadError(Exception):
    """Base error for configuration parsing or validation failures."""


class RuntimeConfigError(ConfigLoadError):
    """Error raised when ``config.yaml`` cannot be located, parsed or validated."""


CONFIG_ENV = "SLEEPCRON_CONFIG_PATH"
_DEFAULT_LOCATIONS: Tuple[Path, ...] = (
    Path("config.yaml"),
    Path("/etc/sleepcron/config.yaml"),
)
_RUNTIME_CACHE: Optional[Tuple[Path, RuntimeConfig]] = None


def _candidate_paths(path: Optional[Path]) -> Iterable[Path]:
    """Yield configuration file locations in priority order.

    The explicit argument comes first, then ``SLEEPCRON_CONFIG_PATH``, then the
    default locations. Paths are expanded and deduplicated.
    """

    seen: set[Path] = set()
    candidates = []
    if path is not None:
        candidates.append(path)
    env_path = os.environ.get(CONFIG_ENV)
    if env_path:
        candidates.append(Path(env_path))
    candidates.extend(_DEFAULT_LOCATIONS)
    for candidate in candidates:
        candidate = candidate.expanduser()
        # NOTE: Deduplicate while preserving the user-visible precedence order.
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def _parse_config_payload(text: str, source: Any) -> dict[str, Any]:
    try:
        payload = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise RuntimeConfigError(f"Invalid YAML in {source}: {exc}") from exc
    if not isinstance(payload, dict):
        raise RuntimeConfigError(f"{source} must contain a mapping at the top-level")
    return payload


def parse_runtime_config(text: str, source: Any = "<string>") -> RuntimeConfig:
    """Validate a YAML document into a :class:`RuntimeConfig`.

    Args:
      text: Raw YAML contents.
      source: Label used in error messages (usually the file path).

    Raises:
      RuntimeConfigError: If parsing or validation fails.
    """

    payload = _parse_config_payload(text, source)
    try:
        return RuntimeConfig.model_validate(payload)
    except _PydanticValidationError as exc:
        raise RuntimeConfigError(f"Invalid configuration in {source}: {exc}") from exc


def _load_runtime_from_path(path: Path) -> RuntimeConfig:
    try:
        text = path.read_text()
    except FileNotFoundError as exc:
        raise RuntimeConfigError(f"Configuration file missing: {path}") from exc
    except OSError as exc:  # pragma: no cover - filesystem surface
        raise RuntimeConfigError(f"Unable to read configuration file {path}: {exc}") from exc
    return parse_runtime_config(text, path)


def load_runtime_config(
    path: Optional[Path | str] = None,
    *,
    reload: bool = False,
) -> RuntimeConfig:
    """Resolve, parse, and cache the runtime configuration.

    What:
      Locate ``config.yaml`` using the precedence chain, parse it, and return a
      validated :class:`RuntimeConfig`.

    How:
      Serve the cached result unless ``reload`` is set or a different explicit
      path is requested; otherwise walk the candidate paths until one exists and
      cache it.

    Args:
      path: Optional explicit location of ``config.yaml``.
      reload: When ``True`` forces a fresh load bypassing the cache.

    Raises:
      RuntimeConfigError: If no configuration can be located or validated.
    """

    global _RUNTIME_CACHE

    requested_path = Path(path).expanduser() if isinstance(path, (str, Path)) else None
    if not reload and _RUNTIME_CACHE is not None:
        cached_path, cached_config = _RUNTIME_CACHE
        if requested_path is None or cached_path == requested_path:
            return cached_config

    searched: list[str] = []
    for candidate in _candidate_paths(requested_path):
        if not candidate.exists():
            searched.append(str(candidate))
            continue
        config = _load_runtime_from_path(candidate)
        _RUNTIME_CACHE = (candidate, config)
        return config

    raise RuntimeConfigError(f"Unable to locate config.yaml (searched: {', '.join(searched) or '<none>'})")


def get_runtime_config() -> RuntimeConfig:
    """Return the cached runtime configuration, loading it on demand."""

    return load_runtime_config()


def reset_runtime_config() -> None:
    """Clear the runtime configuration cache."""

    global _RUNTIME_CACHE
    _RUNTIME_CACHE = None
