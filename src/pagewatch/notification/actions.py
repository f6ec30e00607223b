"""Routing of notification responses ("View Site", "Dismiss")."""

from dataclasses import dataclass
from typing import Optional

from ..utils.logging import get_structured_logger

logger = get_structured_logger(__name__)


@dataclass
class NotificationRecord:
    url: str
    preview: str = ""


class NotificationActions:
    """Maps notification handle ids to the page they announce."""

    def __init__(self):
        self._records: dict[str, NotificationRecord] = {}

    def remember(self, handle_id: str, url: str, preview: str = "") -> None:
        self._records[handle_id] = NotificationRecord(url=url, preview=preview)

    def lookup(self, handle_id: str) -> Optional[NotificationRecord]:
        return self._records.get(handle_id)

    def open_target(self, handle_id: str) -> Optional[str]:
        """Resolve the URL to open for a clicked notification and clear it."""
        record = self._records.pop(handle_id, None)
        if record is None:
            logger.debug("Unknown notification clicked", handle_id=handle_id)
            return None
        return record.url

    def dismiss(self, handle_id: str) -> bool:
        return self._records.pop(handle_id, None) is not None

    def __len__(self) -> int:
        return len(self._records)
