"""Terminal notifier used when no Slack workspace is configured."""

import uuid
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from ..storage.types import TrackedTarget
from ..utils.logging import get_structured_logger
from .actions import NotificationActions
from .types import NOTIFICATION_TITLE, NotificationHandle, NotifierFailure, change_message

logger = get_structured_logger(__name__)


class ConsoleNotifier:
    """Prints change alerts as rich panels."""

    def __init__(
        self,
        console: Optional[Console] = None,
        actions: Optional[NotificationActions] = None,
    ):
        self.console = console or Console()
        self.actions = actions if actions is not None else NotificationActions()

    async def notify(
        self, target: TrackedTarget, preview_text: str
    ) -> NotificationHandle:
        handle = NotificationHandle(
            handle_id=uuid.uuid4().hex, target_id=target.id, url=target.url
        )

        body = f"{escape(change_message(target))}\n[link={target.url}]{escape(target.url)}[/link]"
        if preview_text:
            body += f"\n\n[dim]{escape(preview_text)}[/dim]"

        try:
            self.console.print(
                Panel(body, title=f"🔔 {NOTIFICATION_TITLE}", border_style="yellow")
            )
        except OSError as e:
            raise NotifierFailure(f"Console output failed: {str(e)}") from e

        self.actions.remember(handle.handle_id, target.url, preview_text)
        logger.debug("Console notification shown", target_id=target.id)
        return handle
