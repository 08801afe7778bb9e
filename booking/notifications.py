"""
User-facing booking notifications.

The wizard never lets a saga failure escape as an exception; each outcome is
turned into exactly one Notification whose kind tells the presentation layer
which recovery action to offer.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from booking.models import BookingErrorKind

logger = logging.getLogger(__name__)


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class Notification:
    """
    One toast-style message.

    Attributes:
        level: success / error / warning
        message: Text shown to the traveler
        kind: Error kind for failures, None for success messages
        context: Tracking context (feature, ids, category)
    """

    level: NotificationLevel
    message: str
    kind: BookingErrorKind | None = None
    context: dict[str, Any] = field(default_factory=dict)


class Notifier:
    """Collects notifications emitted during a wizard's lifetime."""

    FEATURE = "booking_wizard"

    def __init__(self) -> None:
        self._notifications: list[Notification] = []

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    @property
    def last(self) -> Notification | None:
        return self._notifications[-1] if self._notifications else None

    def _emit(self, notification: Notification) -> Notification:
        self._notifications.append(notification)
        log = logger.info if notification.level == NotificationLevel.SUCCESS else logger.warning
        log(
            f"Notification [{notification.level.value}] {notification.message}",
            extra={"error_kind": notification.kind.value if notification.kind else None},
        )
        return notification

    def success(self, message: str, **context: Any) -> Notification:
        return self._emit(
            Notification(
                level=NotificationLevel.SUCCESS,
                message=message,
                context={"feature": self.FEATURE, "category": "success", **context},
            )
        )

    def error(
        self,
        kind: BookingErrorKind,
        message: str,
        level: NotificationLevel = NotificationLevel.ERROR,
        **context: Any,
    ) -> Notification:
        return self._emit(
            Notification(
                level=level,
                message=message,
                kind=kind,
                context={"feature": self.FEATURE, "error": kind.value, **context},
            )
        )

    def clear(self) -> None:
        self._notifications.clear()
