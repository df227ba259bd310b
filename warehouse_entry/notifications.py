"""
User-facing notifications.

The host editor owns the actual toast/notifier UI; the widget only needs
something with `show(message, style)`. `LoggingNotifier` is the fallback when
the host injects nothing.
"""

from __future__ import annotations

import logging
from typing import List, Protocol, Tuple, runtime_checkable

from warehouse_entry.utils.logging import get_logger

STYLE_WARNING = "warning"
STYLE_ERROR = "error"

_LEVELS = {
    STYLE_WARNING: logging.WARNING,
    STYLE_ERROR: logging.ERROR,
}


@runtime_checkable
class Notifier(Protocol):
    def show(self, message: str, style: str = "") -> None:
        ...


class LoggingNotifier:
    """Route notifications to the package logger at a matching level."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or get_logger("warehouse_entry.notifications")

    def show(self, message: str, style: str = "") -> None:
        self._log.log(_LEVELS.get(style, logging.INFO), message, extra={"style": style or "info"})


class RecordingNotifier:
    """Keep every notification in memory; handy for hosts that batch them."""

    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []

    def show(self, message: str, style: str = "") -> None:
        self.messages.append((message, style))

    @property
    def styles(self) -> List[str]:
        return [style for _, style in self.messages]


__all__ = [
    "LoggingNotifier",
    "Notifier",
    "RecordingNotifier",
    "STYLE_ERROR",
    "STYLE_WARNING",
]
