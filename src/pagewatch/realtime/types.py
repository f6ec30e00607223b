"""Type definitions for realtime change listening."""

from dataclasses import dataclass, field
from datetime import datetime


class RealtimeError(Exception):
    """Base exception for realtime listener errors."""

    pass


@dataclass
class ChangeSignal:
    """A live page reported meaningful new content."""

    url: str
    timestamp: datetime = field(default_factory=datetime.utcnow)


@dataclass
class MutationBatch:
    """Text lengths of the element nodes added by one observer callback."""

    url: str
    added_text_lengths: list[int] = field(default_factory=list)

    def is_meaningful(self, min_text_length: int = 10) -> bool:
        return any(length > min_text_length for length in self.added_text_lengths)
