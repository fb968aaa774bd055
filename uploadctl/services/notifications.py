"""User-facing notifications raised by the orchestrator.

The orchestrator only calls ``notify(kind, message)``; how a notification
is shown is up to the presentation layer.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional, Protocol

from uploadctl.core.logging import NOTIFICATION_LOGGER_NAME


class NotificationKind(str, Enum):
    """Severity of a notification."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class Notifier(Protocol):
    """Receives notifications from the orchestrator."""

    def notify(self, kind: NotificationKind, message: str) -> None: ...


_LEVELS = {
    NotificationKind.SUCCESS: logging.INFO,
    NotificationKind.INFO: logging.INFO,
    NotificationKind.WARNING: logging.WARNING,
    NotificationKind.ERROR: logging.ERROR,
}


class LoggingNotifier:
    """Default notifier: writes notifications to the log."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(NOTIFICATION_LOGGER_NAME)

    def notify(self, kind: NotificationKind, message: str) -> None:
        self.logger.log(_LEVELS[kind], "%s: %s", kind.value, message)
