"""Centralized logging helpers.

Every module logs through ``logging.getLogger(__name__)``; this module only
wires the root handler once and offers small helpers for structured DEBUG
traces (``extra_context``) and timing (``Timer``).
"""
from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any, Dict, Optional

from constants import Constants

_HANDLER_NAME = "gemstall-console"


def configure_logging(level: Optional[str] = None) -> None:
    """Install the console handler on the root logger.

    The level comes from ``level`` if given, otherwise from the
    GEMSTALL_LOG_LEVEL environment variable, defaulting to INFO. Calling this
    more than once replaces the handler instead of stacking a new one.
    """
    name = (level or os.environ.get(Constants.ENV_LOG_LEVEL) or "INFO").upper()
    value = getattr(logging, name, None)
    if not isinstance(value, int):
        value = logging.INFO

    root = logging.getLogger()
    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(Constants.LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(value)


def is_debug_enabled(logger: logging.Logger) -> bool:
    """Return True when DEBUG records from ``logger`` would be emitted."""
    return logger.isEnabledFor(logging.DEBUG)


def extra_context(**fields: Any) -> Dict[str, Any]:
    """Build an ``extra=`` mapping for structured log records.

    None values are dropped so formatters never see empty keys.
    """
    return {key: value for key, value in fields.items() if value is not None}


class Timer:
    """Context manager measuring elapsed wall time."""

    def __init__(self) -> None:
        self._start = 0.0
        self._end: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, *exc: Any) -> None:
        self._end = time.perf_counter()

    def duration_ms(self) -> int:
        """Elapsed milliseconds; measured up to now while still running."""
        end = self._end if self._end is not None else time.perf_counter()
        return int((end - self._start) * 1000)
