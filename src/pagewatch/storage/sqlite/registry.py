"""SQLite-backed target registry."""

from typing import Optional

from sqlalchemy import delete, select

from ...config.settings import DatabaseSettings
from ...utils.logging import get_structured_logger
from ..interface import TargetRegistry
from ..types import TrackedTarget
from .database import DatabaseManager
from .models import TrackedSite

logger = get_structured_logger(__name__)


class SQLiteRegistry(TargetRegistry):
    """Target registry stored in the ``tracked_sites`` table.

    Every upsert runs in its own session and is committed as one unit, so a
    target's fingerprint, check time and notification time always land
    together.
    """

    def __init__(self, settings: DatabaseSettings):
        super().__init__()
        self.db_manager = DatabaseManager(settings)

    async def setup(self) -> None:
        await self.db_manager.setup()

    async def cleanup(self) -> None:
        await self.db_manager.cleanup()

    async def list_targets(self) -> list[TrackedTarget]:
        async with self.db_manager.get_session() as session:
            result = await session.execute(
                select(TrackedSite).order_by(TrackedSite.created_at, TrackedSite.id)
            )
            return [row.to_target() for row in result.scalars().all()]

    async def get_target(self, target_id: str) -> Optional[TrackedTarget]:
        async with self.db_manager.get_session() as session:
            row = await session.get(TrackedSite, target_id)
            return row.to_target() if row else None

    async def upsert_target(self, target: TrackedTarget) -> TrackedTarget:
        async with self.db_manager.get_session() as session:
            row = await session.get(TrackedSite, target.id)
            if row is None:
                row = TrackedSite(id=target.id)
                session.add(row)
            row.apply(target)

        logger.debug("Target stored", target_id=target.id)
        return target

    async def remove_target(self, target_id: str) -> bool:
        async with self.db_manager.get_session() as session:
            result = await session.execute(
                delete(TrackedSite).where(TrackedSite.id == target_id)
            )
            return result.rowcount > 0
