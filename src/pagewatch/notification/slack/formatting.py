"""Message formatting utilities for Slack notifications."""

from datetime import datetime
from typing import Any, Optional

from ...storage.types import TrackedTarget
from ..types import NOTIFICATION_TITLE, change_message

VIEW_SITE_ACTION = "view_site"
DISMISS_ACTION = "dismiss_notification"


class SlackMessageFormatter:
    """Formats change alerts for Slack delivery."""

    @staticmethod
    def format_change_alert(
        target: TrackedTarget,
        preview_text: str,
        detected_at: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """Format a change alert with "View Site" and "Dismiss" buttons."""
        detected_at = detected_at or datetime.utcnow()
        message = change_message(target)

        blocks = [
            {
                "type": "header",
                "text": {"type": "plain_text", "text": f"🔔 {NOTIFICATION_TITLE}"},
            },
            {
                "type": "section",
                "fields": [
                    {"type": "mrkdwn", "text": f"*Site:*\n{target.name or target.url}"},
                    {
                        "type": "mrkdwn",
                        "text": f"*URL:*\n<{target.url}|{target.url}>",
                    },
                    {
                        "type": "mrkdwn",
                        "text": f"*Detected:*\n{detected_at.strftime('%Y-%m-%d %H:%M:%S UTC')}",
                    },
                ],
            },
        ]

        if preview_text:
            blocks.append(
                {
                    "type": "section",
                    "text": {"type": "mrkdwn", "text": f"*Preview:*\n```{preview_text}```"},
                }
            )

        blocks.append(
            {
                "type": "actions",
                "elements": [
                    {
                        "type": "button",
                        "text": {"type": "plain_text", "text": "🔍 View Site"},
                        "style": "primary",
                        "action_id": VIEW_SITE_ACTION,
                        "url": target.url,
                        "value": target.id,
                    },
                    {
                        "type": "button",
                        "text": {"type": "plain_text", "text": "Dismiss"},
                        "action_id": DISMISS_ACTION,
                        "value": target.id,
                    },
                ],
            }
        )

        return {"text": f"{NOTIFICATION_TITLE} {message}", "blocks": blocks}
