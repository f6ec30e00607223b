"""Slack delivery of change alerts."""

from .app import SlackBoltManager, cleanup_slack_manager, get_slack_manager
from .delivery import SlackNotifier
from .formatting import DISMISS_ACTION, VIEW_SITE_ACTION, SlackMessageFormatter

__all__ = [
    "SlackBoltManager",
    "get_slack_manager",
    "cleanup_slack_manager",
    "SlackNotifier",
    "SlackMessageFormatter",
    "VIEW_SITE_ACTION",
    "DISMISS_ACTION",
]
