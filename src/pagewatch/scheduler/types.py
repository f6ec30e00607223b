"""Type definitions for the scheduler module."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class SchedulerError(Exception):
    """Base exception for scheduler-related errors."""

    pass


class ScheduleMode(str, Enum):
    """How check jobs are laid out in the scheduler."""

    GLOBAL = "global"
    PER_TARGET = "per_target"


class CheckStatus(str, Enum):
    """Outcome of one target check."""

    CHANGED = "changed"
    UNCHANGED = "unchanged"
    FIRST_OBSERVATION = "first_observation"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class CheckReport:
    """Result of checking a single target."""

    target_id: str
    status: CheckStatus
    url: Optional[str] = None
    strategy: Optional[str] = None
    fingerprint: Optional[str] = None
    notified: bool = False
    error: Optional[str] = None
    checked_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def succeeded(self) -> bool:
        return self.status not in (CheckStatus.FAILED, CheckStatus.SKIPPED)
