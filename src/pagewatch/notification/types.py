"""Type definitions for the notification module."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Protocol

from ..storage.types import TrackedTarget

NOTIFICATION_TITLE = "Website Changed!"


class NotificationError(Exception):
    """Base exception for notification-related errors."""

    pass


class NotifierFailure(NotificationError):
    """A notification could not be delivered."""

    pass


class NotificationSource(str, Enum):
    """Which path detected the change being notified."""

    SCHEDULED = "scheduled"
    REALTIME = "realtime"


@dataclass
class NotificationHandle:
    """Reference to a delivered notification."""

    handle_id: str
    target_id: str
    url: str
    channel: Optional[str] = None
    delivered_at: datetime = field(default_factory=datetime.utcnow)


class Notifier(Protocol):
    """Delivers user-visible change alerts."""

    async def notify(
        self, target: TrackedTarget, preview_text: str
    ) -> NotificationHandle:
        """Deliver an alert, raising NotifierFailure when delivery fails."""
        ...


def change_message(target: TrackedTarget) -> str:
    return f"Changes detected on {target.name or target.url}"
