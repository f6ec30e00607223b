"""Cooldown policy deciding whether a detected change may notify."""

from datetime import datetime, timedelta

from ..storage.types import TrackedTarget
from ..utils.logging import get_structured_logger
from .types import NotificationSource

logger = get_structured_logger(__name__)

REALTIME_COOLDOWN_SECONDS = 60.0


class NotificationPolicy:
    """Allows a notification only once the target's cooldown has elapsed.

    Both paths compare against the same ``last_notified_at``, so a realtime
    signal arriving seconds after a scheduled notification (or the reverse)
    is suppressed.

    Scheduled detections are also subject to a cooldown
    (``scheduled_cooldown_seconds``, 60 s by default). Without it, a change
    already announced by a live signal would be announced again by the next
    scheduled check. Set it to 0 to notify on every scheduled change.
    """

    def __init__(
        self,
        realtime_cooldown_seconds: float = REALTIME_COOLDOWN_SECONDS,
        scheduled_cooldown_seconds: float = REALTIME_COOLDOWN_SECONDS,
    ):
        self.cooldowns = {
            NotificationSource.REALTIME: timedelta(seconds=realtime_cooldown_seconds),
            NotificationSource.SCHEDULED: timedelta(seconds=scheduled_cooldown_seconds),
        }

    def should_notify(
        self,
        target: TrackedTarget,
        now: datetime,
        source: NotificationSource = NotificationSource.SCHEDULED,
    ) -> bool:
        if target.last_notified_at is None:
            return True

        elapsed = now - target.last_notified_at
        allowed = elapsed > self.cooldowns[source]

        if not allowed:
            logger.info(
                "Notification suppressed by cooldown",
                target_id=target.id,
                source=source.value,
                seconds_since_last=elapsed.total_seconds(),
            )

        return allowed
