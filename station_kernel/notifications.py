"""
Notification sink -- operator-facing success/failure messages.

Services report the outcome of every write (the dashboard's toast) through
a ``NotificationSink``.  Delivery is fire-and-forget: a failing sink is
logged and never changes the outcome of the operation that triggered it.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TextIO

from station_kernel.logging_config import get_logger

logger = get_logger("notifications")


class NotificationKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


class NotificationSink(ABC):
    """Receives (kind, message) pairs; return value is never consumed."""

    @abstractmethod
    def notify(self, kind: NotificationKind, message: str) -> None:
        ...


class LoggingNotificationSink(NotificationSink):
    """Default sink: successes at INFO, errors at WARNING."""

    def notify(self, kind: NotificationKind, message: str) -> None:
        if kind == NotificationKind.ERROR:
            logger.warning("notification", extra={"kind": kind.value, "text": message})
        else:
            logger.info("notification", extra={"kind": kind.value, "text": message})


class ConsoleNotificationSink(NotificationSink):
    """Prints notifications for the operator CLI."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream

    def notify(self, kind: NotificationKind, message: str) -> None:
        label = "Error" if kind == NotificationKind.ERROR else "Success"
        print(f"  [{label}] {message}", file=self._stream)


def deliver(sink: NotificationSink, kind: NotificationKind, message: str) -> None:
    """Send one notification, logging (not raising) if the sink fails."""
    try:
        sink.notify(kind, message)
    except Exception:
        logger.error(
            "notification_delivery_failed",
            extra={"kind": kind.value, "text": message},
            exc_info=True,
        )
