"""Error reporting sink for failures that are handled rather than raised."""

from __future__ import annotations

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class ErrorReporter(Protocol):
    def report(self, message: str, *, level: str = "error", **info: Any) -> None: ...


class LoggingReporter:
    """Reports through the ``syncappend.reporting`` logger."""

    def report(self, message: str, *, level: str = "error", **info: Any) -> None:
        details = ", ".join(f"{key}={value}" for key, value in sorted(info.items()))
        logger.log(_LEVELS.get(level, logging.ERROR), "%s (%s)", message, details)
