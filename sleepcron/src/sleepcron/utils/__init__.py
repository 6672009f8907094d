"""Shared helpers for sleepcron components."""

from .logging import JsonLogger, get_logger

__all__ = ["JsonLogger", "get_logger"]
