"""Logging helpers for the scoreboard bridge.

All subsystems log through named loggers under ``scoreboard``.  Hosts that
embed the bridge usually own the logging setup already; standalone callers
(the CLI) invoke :func:`configure_logging` once during start-up.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable

__all__ = ["configure_logging", "get_logger"]

_ROOT_NAME = "scoreboard"


class _StructuredFormatter(logging.Formatter):
    """Render records as ``key=value`` pairs."""

    default_time_format = "%Y-%m-%dT%H:%M:%S"
    default_msec_format = "%s.%03d"

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()
        parts = [
            f"ts={self.formatTime(record, self.datefmt)}",
            f"level={record.levelname}",
            f"logger={record.name}",
        ]
        if record.message:
            parts.append(f"msg={record.message}")
        if record.exc_info:
            parts.append(self.formatException(record.exc_info))
        return " ".join(parts)


def _resolve_level(default_level: int) -> int:
    verbose = os.getenv("LOG_VERBOSE")
    if verbose in {"1", "true", "TRUE", "yes", "on"}:
        return logging.DEBUG
    return default_level


def configure_logging(
    *,
    default_level: int = logging.INFO,
    structured: bool = True,
    extra_loggers: Iterable[str] | None = None,
) -> None:
    """Install a stream handler on the root logger unless one exists.

    Parameters
    ----------
    default_level:
        Level used when ``LOG_VERBOSE`` is not enabled.
    structured:
        Use the key=value formatter instead of the plain one.
    extra_loggers:
        Logger names (e.g. ``urllib3``, ``httpx``) that should follow the
        configured level.
    """

    level = _resolve_level(default_level)
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level)
    else:
        handler = logging.StreamHandler()
        if structured:
            handler.setFormatter(_StructuredFormatter())
        else:
            handler.setFormatter(logging.Formatter("%(levelname)s:%(name)s:%(message)s"))
        root.addHandler(handler)
        root.setLevel(level)

    for name in extra_loggers or ():
        logging.getLogger(name).setLevel(level)

    logging.captureWarnings(True)


def get_logger(name: str) -> logging.Logger:
    """Return the ``scoreboard.<name>`` logger."""

    if name == _ROOT_NAME or name.startswith(_ROOT_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_ROOT_NAME}.{name}")
