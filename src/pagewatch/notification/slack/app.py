"""Slack Bolt app initialization and configuration."""

from typing import Optional

from slack_bolt.async_app import AsyncApp
from slack_sdk.errors import SlackApiError

from ...config.settings import SlackSettings
from ...utils.async_utils import AsyncContextManager
from ...utils.logging import get_structured_logger
from ..actions import NotificationActions
from .formatting import DISMISS_ACTION, VIEW_SITE_ACTION

logger = get_structured_logger(__name__)


class SlackBoltManager(AsyncContextManager):
    """Manages Slack Bolt app initialization and lifecycle."""

    def __init__(
        self,
        settings: SlackSettings,
        actions: Optional[NotificationActions] = None,
    ):
        self.settings = settings
        self.actions = actions if actions is not None else NotificationActions()
        self.app: Optional[AsyncApp] = None
        self._initialized = False

    async def setup(self) -> None:
        """Initialize Slack Bolt app with configuration."""
        if self._initialized:
            return

        logger.info("Initializing Slack Bolt app")

        signing_secret = self.settings.signing_secret.get_secret_value()
        self.app = AsyncApp(
            token=self.settings.bot_token.get_secret_value(),
            signing_secret=signing_secret or None,
            process_before_response=True,
        )

        self._register_handlers()

        self._initialized = True
        logger.info("Slack Bolt app initialization complete")

    async def cleanup(self) -> None:
        """Clean up Slack app resources."""
        if self.app:
            logger.info("Cleaning up Slack Bolt app")
            self.app = None
            self._initialized = False

    def _register_handlers(self) -> None:
        """Register notification button handlers."""
        if not self.app:
            return

        @self.app.action(VIEW_SITE_ACTION)
        async def handle_view_site(ack, body):
            # the button carries the URL itself, Slack opens it client side
            await ack()
            self.actions.open_target(body["message"]["ts"])

        @self.app.action(DISMISS_ACTION)
        async def handle_dismiss(ack, body, client):
            await ack()
            await self.dismiss(client, body["channel"]["id"], body["message"]["ts"])

        logger.info("Slack action handlers registered")

    async def dismiss(self, client, channel: str, ts: str) -> None:
        """Clear a notification and remove its message."""
        self.actions.dismiss(ts)
        try:
            await client.chat_delete(channel=channel, ts=ts)
        except SlackApiError as e:
            logger.warning("Failed to delete dismissed alert", ts=ts, error=str(e))

    async def start_socket_mode(self) -> None:
        """Start the Slack app in socket mode."""
        if not self.app:
            raise RuntimeError("Slack app not initialized")

        from slack_bolt.adapter.socket_mode.async_handler import (
            AsyncSocketModeHandler,
        )

        logger.info("Starting Slack app in socket mode")
        handler = AsyncSocketModeHandler(
            self.app, self.settings.app_token.get_secret_value()
        )
        await handler.connect_async()

    def get_app(self) -> AsyncApp:
        """Get the Slack Bolt app instance."""
        if not self.app:
            raise RuntimeError("Slack app not initialized")
        return self.app

    async def health_check(self) -> bool:
        """Perform Slack app health check."""
        try:
            if not self.app:
                return False

            response = await self.app.client.auth_test()
            return response.get("ok", False)
        except SlackApiError as e:
            logger.error("Slack health check failed", error=str(e))
            return False


# Global Slack Bolt manager instance
_slack_manager: Optional[SlackBoltManager] = None


async def get_slack_manager(
    settings: Optional[SlackSettings] = None,
) -> SlackBoltManager:
    """Get or create the global Slack manager."""
    global _slack_manager

    if _slack_manager is None:
        if settings is None:
            from ...config import get_settings

            settings = get_settings().slack

        _slack_manager = SlackBoltManager(settings)
        await _slack_manager.setup()

    return _slack_manager


async def cleanup_slack_manager() -> None:
    """Clean up the global Slack manager."""
    global _slack_manager

    if _slack_manager:
        await _slack_manager.cleanup()
        _slack_manager = None
