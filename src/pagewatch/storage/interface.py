"""Registry interface for tracked targets."""

import asyncio
import uuid
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from ..utils.async_utils import AsyncContextManager
from ..utils.logging import get_structured_logger
from .types import TrackedTarget

logger = get_structured_logger(__name__)


class TargetRegistry(AsyncContextManager, ABC):
    """Persistence for tracked targets.

    Implementations provide the four record operations; each ``upsert_target``
    must be atomic for a single record. Callers performing read-modify-write
    cycles hold ``record_lock(target_id)`` so that scheduled checks, realtime
    signals and user edits of the same target never interleave.
    """

    def __init__(self):
        self._record_locks: dict[str, asyncio.Lock] = {}

    @abstractmethod
    async def list_targets(self) -> list[TrackedTarget]:
        """Return all targets in registration order."""
        ...

    @abstractmethod
    async def get_target(self, target_id: str) -> Optional[TrackedTarget]:
        ...

    @abstractmethod
    async def upsert_target(self, target: TrackedTarget) -> TrackedTarget:
        ...

    @abstractmethod
    async def remove_target(self, target_id: str) -> bool:
        ...

    @asynccontextmanager
    async def record_lock(self, target_id: str) -> AsyncIterator[None]:
        """Serialize read-modify-write access to one target record."""
        lock = self._record_locks.setdefault(target_id, asyncio.Lock())
        async with lock:
            yield

    async def register(
        self,
        url: str,
        name: Optional[str] = None,
        selector: Optional[str] = None,
        interval: Optional[int] = None,
        active: bool = True,
    ) -> TrackedTarget:
        """Create a new target in seed state."""
        target = TrackedTarget(
            id=uuid.uuid4().hex,
            url=url,
            name=name or "",
            selector=selector,
            active=active,
            interval=interval,
            created_at=datetime.utcnow(),
        )
        await self.upsert_target(target)
        logger.info("Target registered", target_id=target.id, url=url)
        return target

    async def find_by_url(self, url: str) -> Optional[TrackedTarget]:
        for target in await self.list_targets():
            if target.url == url:
                return target
        return None

    async def set_active(self, target_id: str, active: bool) -> Optional[TrackedTarget]:
        """Pause or resume a target."""
        async with self.record_lock(target_id):
            target = await self.get_target(target_id)
            if target is None:
                return None
            target.active = active
            await self.upsert_target(target)

        logger.info("Target active flag changed", target_id=target_id, active=active)
        return target

    async def delete(self, target_id: str) -> bool:
        """Remove a target, waiting for any in-flight update of it."""
        async with self.record_lock(target_id):
            removed = await self.remove_target(target_id)
        self._record_locks.pop(target_id, None)
        if removed:
            logger.info("Target removed", target_id=target_id)
        return removed
