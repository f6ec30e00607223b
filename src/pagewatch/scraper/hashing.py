"""Content fingerprinting and change detection."""

import hashlib
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import blake3

from ..utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

SUPPORTED_HASH_TYPES = ("sha256", "blake3")


@dataclass
class ContentHash:
    """Content hash with metadata."""

    hash_value: str
    hash_type: str
    content_length: int
    created_at: datetime


class ContentHasher:
    """Produces fixed-size digests of normalized page text.

    The digest is taken over the UTF-8 bytes of the text exactly as given;
    normalization is the extractors' job, so the same text always yields the
    same digest and any byte difference yields a different one.
    """

    def __init__(self, hash_type: str = "sha256"):
        if hash_type not in SUPPORTED_HASH_TYPES:
            raise ValueError(f"Unsupported hash type: {hash_type}")
        self.hash_type = hash_type

    def fingerprint(self, text: str) -> str:
        data = text.encode("utf-8")

        if self.hash_type == "blake3":
            hasher = blake3.blake3()
            hasher.update(data)
            return hasher.hexdigest()

        return hashlib.sha256(data).hexdigest()

    def hash_content(self, text: str) -> ContentHash:
        """Fingerprint ``text`` and keep the metadata alongside the digest."""
        return ContentHash(
            hash_value=self.fingerprint(text),
            hash_type=self.hash_type,
            content_length=len(text),
            created_at=datetime.utcnow(),
        )


_default_hasher = ContentHasher()


def fingerprint(text: str) -> str:
    """SHA-256 hex digest of ``text``."""
    return _default_hasher.fingerprint(text)


class ChangeKind(str, Enum):
    """Outcome of comparing a fresh fingerprint with the stored one."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    FIRST_OBSERVATION = "first_observation"


@dataclass
class ChangeDetectionResult:
    """Result of change detection for one successful extraction."""

    kind: ChangeKind
    previous_fingerprint: Optional[str]
    fingerprint: str
    checked_at: datetime

    @property
    def has_changed(self) -> bool:
        return self.kind == ChangeKind.CHANGED

    @property
    def state_update(self) -> dict[str, Any]:
        """Fields to write back, applied whatever the kind."""
        return {
            "last_fingerprint": self.fingerprint,
            "last_checked_at": self.checked_at,
        }


class ChangeDetector:
    """Decides changed / unchanged / first observation for a target."""

    def detect(
        self,
        last_fingerprint: Optional[str],
        new_fingerprint: str,
        now: Optional[datetime] = None,
    ) -> ChangeDetectionResult:
        if last_fingerprint is None:
            kind = ChangeKind.FIRST_OBSERVATION
        elif last_fingerprint != new_fingerprint:
            kind = ChangeKind.CHANGED
        else:
            kind = ChangeKind.UNCHANGED

        logger.debug(
            "Change detection complete",
            kind=kind.value,
            previous=last_fingerprint[:12] if last_fingerprint else None,
            current=new_fingerprint[:12],
        )

        return ChangeDetectionResult(
            kind=kind,
            previous_fingerprint=last_fingerprint,
            fingerprint=new_fingerprint,
            checked_at=now or datetime.utcnow(),
        )
