"""Environment-variable configuration for the CLI and REPL.

AVII_LOG_LEVEL       logging level name for the root handler (default WARNING)
AVII_DEBUG_PY_TRACE  print Python tracebacks alongside Avii errors (1/true/yes/on)
AVII_RECURSION_LIMIT Python recursion limit raised before evaluating (default 5000)
"""
from __future__ import annotations

import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "AVII_LOG_LEVEL"
PY_TRACE_ENV = "AVII_DEBUG_PY_TRACE"
RECURSION_LIMIT_ENV = "AVII_RECURSION_LIMIT"

_TRUTHY = {"1", "true", "yes", "on"}
DEFAULT_RECURSION_LIMIT = 5000
LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def debug_py_trace_enabled() -> bool:
    return _flag(PY_TRACE_ENV)


def set_debug_py_trace(enabled: bool) -> None:
    if enabled:
        os.environ[PY_TRACE_ENV] = "1"
    else:
        os.environ.pop(PY_TRACE_ENV, None)


def log_level(default: str = "WARNING") -> int:
    raw = os.getenv(LOG_LEVEL_ENV, default).strip().upper()
    level = logging.getLevelName(raw)
    if isinstance(level, int):
        return level

    return logging.getLevelName(default)


def configure_logging(level: Optional[int] = None) -> None:
    """Install a stderr handler at `level` (or AVII_LOG_LEVEL)."""
    logging.basicConfig(level=level if level is not None else log_level(), format=LOG_FORMAT)


def recursion_limit() -> int:
    raw = os.getenv(RECURSION_LIMIT_ENV, "").strip()
    if raw.isdigit() and int(raw) > 0:
        return int(raw)

    return DEFAULT_RECURSION_LIMIT
