"""Notification delivery system with retry logic and error handling."""

import asyncio
from typing import Optional

import aiohttp
from slack_sdk.errors import SlackApiError

from ...storage.types import TrackedTarget
from ...utils.async_utils import retry_async
from ...utils.logging import get_structured_logger
from ..actions import NotificationActions
from ..types import NotificationHandle, NotifierFailure
from .app import SlackBoltManager
from .formatting import SlackMessageFormatter

logger = get_structured_logger(__name__)


class SlackNotifier:
    """Posts change alerts to a Slack channel."""

    def __init__(
        self,
        manager: SlackBoltManager,
        channel: str,
        actions: Optional[NotificationActions] = None,
        max_retries: int = 3,
        retry_delay: float = 1.0,
    ):
        self.manager = manager
        self.channel = channel
        self.actions = actions if actions is not None else manager.actions
        self.formatter = SlackMessageFormatter()
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.delivery_stats = {"sent": 0, "failed": 0}

    async def notify(
        self, target: TrackedTarget, preview_text: str
    ) -> NotificationHandle:
        message_data = self.formatter.format_change_alert(target, preview_text)

        async def send_attempt():
            app = self.manager.get_app()
            return await app.client.chat_postMessage(
                channel=self.channel, **message_data
            )

        try:
            response = await retry_async(
                send_attempt,
                max_retries=self.max_retries,
                delay=self.retry_delay,
                backoff_factor=2.0,
                exceptions=(SlackApiError, aiohttp.ClientError, asyncio.TimeoutError),
            )
        except (
            SlackApiError,
            aiohttp.ClientError,
            asyncio.TimeoutError,
            RuntimeError,
        ) as e:
            self.delivery_stats["failed"] += 1
            logger.error(
                "Failed to send change alert after retries",
                target_id=target.id,
                channel=self.channel,
                error=str(e),
            )
            raise NotifierFailure(f"Slack delivery failed: {str(e)}") from e

        handle = NotificationHandle(
            handle_id=response["ts"],
            target_id=target.id,
            url=target.url,
            channel=response.get("channel", self.channel),
        )
        self.actions.remember(handle.handle_id, target.url, preview_text)
        self.delivery_stats["sent"] += 1

        logger.debug(
            "Change alert sent",
            target_id=target.id,
            channel=handle.channel,
            message_id=handle.handle_id,
        )
        return handle

    def get_delivery_stats(self) -> dict[str, int]:
        """Get delivery statistics."""
        return self.delivery_stats.copy()
