"""Type definitions for storage components."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional
from urllib.parse import urlparse

NETWORK_SCHEMES = ("http", "https")


class StorageError(Exception):
    """Base exception for storage-related errors."""

    pass


class RegistryInconsistency(StorageError):
    """A target disappeared from the registry while a check was in flight."""

    pass


def derive_name(url: str) -> str:
    """Default display name for a URL: its host, or the URL itself."""
    return urlparse(url).hostname or url


@dataclass
class TrackedTarget:
    """A registered page whose text content is monitored for change."""

    id: str
    url: str
    name: str = ""
    selector: Optional[str] = None
    active: bool = True
    interval: Optional[int] = None  # minutes; None uses the global cadence
    last_fingerprint: Optional[str] = None
    last_checked_at: Optional[datetime] = None
    last_notified_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        if not self.name:
            self.name = derive_name(self.url)
        if not self.selector:
            self.selector = None

    @property
    def is_seed(self) -> bool:
        return self.last_fingerprint is None

    @property
    def is_network_url(self) -> bool:
        return urlparse(self.url).scheme.lower() in NETWORK_SCHEMES

    def effective_interval(self, default_minutes: int) -> int:
        return self.interval or default_minutes

    def is_due(self, now: datetime, default_minutes: int) -> bool:
        """Whether the target's own cadence has elapsed since its last check."""
        if self.last_checked_at is None:
            return True
        elapsed = now - self.last_checked_at
        # 30s grace for scheduler jitter
        slack = timedelta(seconds=30)
        return elapsed + slack >= timedelta(
            minutes=self.effective_interval(default_minutes)
        )
