"""User-facing change notifications.

This module provides:
- The cooldown policy shared by scheduled and realtime detection
- A rich console notifier
- A Slack notifier with "View Site" and "Dismiss" actions
"""

from .actions import NotificationActions, NotificationRecord
from .console import ConsoleNotifier
from .policy import NotificationPolicy
from .slack import SlackBoltManager, SlackMessageFormatter, SlackNotifier
from .types import (
    NOTIFICATION_TITLE,
    NotificationError,
    NotificationHandle,
    NotificationSource,
    Notifier,
    NotifierFailure,
    change_message,
)

__all__ = [
    "NOTIFICATION_TITLE",
    "NotificationError",
    "NotifierFailure",
    "NotificationHandle",
    "NotificationSource",
    "Notifier",
    "change_message",
    "NotificationPolicy",
    "NotificationActions",
    "NotificationRecord",
    "ConsoleNotifier",
    "SlackBoltManager",
    "SlackNotifier",
    "SlackMessageFormatter",
]
