"""
Transient user notifications.

The notes layer reports outcomes through a `Notifier`; front ends decide how
to show them (the CLI prints to the console, the default just logs).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol

LOGGER = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def info(self, message: str, *, action: Optional[str] = None) -> None: ...


class LoggingNotifier:
    def success(self, message: str) -> None:
        LOGGER.info(message)

    def error(self, message: str) -> None:
        LOGGER.error(message)

    def info(self, message: str, *, action: Optional[str] = None) -> None:
        if action:
            LOGGER.info("%s [%s]", message, action)
        else:
            LOGGER.info(message)


@dataclass(frozen=True)
class Notification:
    level: str
    message: str
    action: Optional[str] = None


class RecordingNotifier:
    """Keeps every notification in memory; handy for embedding and tests."""

    def __init__(self) -> None:
        self.items: List[Notification] = []

    def success(self, message: str) -> None:
        self.items.append(Notification("success", message))

    def error(self, message: str) -> None:
        self.items.append(Notification("error", message))

    def info(self, message: str, *, action: Optional[str] = None) -> None:
        self.items.append(Notification("info", message, action))

    @property
    def errors(self) -> List[str]:
        return [n.message for n in self.items if n.level == "error"]
