"""SQLAlchemy ORM models for tracked site records."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, declarative_base, mapped_column

from ..types import TrackedTarget

Base = declarative_base()


class TrackedSite(Base):
    """A monitored page and the state of its most recent check."""

    __tablename__ = "tracked_sites"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    url: Mapped[str] = mapped_column(String(2048), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    selector: Mapped[Optional[str]] = mapped_column(Text)

    # Monitoring configuration
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    interval_minutes: Mapped[Optional[int]] = mapped_column(Integer)

    # Check state
    last_fingerprint: Mapped[Optional[str]] = mapped_column(String(64))
    last_checked_at: Mapped[Optional[datetime]] = mapped_column(DateTime)
    last_notified_at: Mapped[Optional[datetime]] = mapped_column(DateTime)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("ix_tracked_sites_url", "url"),
        Index("ix_tracked_sites_is_active", "is_active"),
        Index("ix_tracked_sites_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<TrackedSite(id={self.id}, url={self.url}, name={self.name})>"

    def to_target(self) -> TrackedTarget:
        return TrackedTarget(
            id=self.id,
            url=self.url,
            name=self.name,
            selector=self.selector,
            active=bool(self.is_active),
            interval=self.interval_minutes,
            last_fingerprint=self.last_fingerprint,
            last_checked_at=self.last_checked_at,
            last_notified_at=self.last_notified_at,
            created_at=self.created_at,
        )

    def apply(self, target: TrackedTarget) -> None:
        """Copy every mutable field of ``target`` onto this row."""
        self.url = target.url
        self.name = target.name
        self.selector = target.selector
        self.is_active = target.active
        self.interval_minutes = target.interval
        self.last_fingerprint = target.last_fingerprint
        self.last_checked_at = target.last_checked_at
        self.last_notified_at = target.last_notified_at
        self.created_at = target.created_at
