"""Storage module providing the tracked target registry."""

from typing import Optional

from ..config import get_settings
from .interface import TargetRegistry
from .memory import InMemoryRegistry
from .sqlite import DatabaseManager, SQLiteRegistry, TrackedSite
from .types import (
    RegistryInconsistency,
    StorageError,
    TrackedTarget,
    derive_name,
)

_registry: Optional[TargetRegistry] = None


async def get_registry() -> TargetRegistry:
    """Get or create the global SQLite-backed registry."""
    global _registry

    if _registry is None:
        registry = SQLiteRegistry(get_settings().database)
        await registry.setup()
        _registry = registry

    return _registry


async def cleanup_registry() -> None:
    """Clean up the global registry."""
    global _registry

    if _registry:
        await _registry.cleanup()
        _registry = None


__all__ = [
    "TargetRegistry",
    "InMemoryRegistry",
    "SQLiteRegistry",
    "DatabaseManager",
    "TrackedSite",
    "TrackedTarget",
    "StorageError",
    "RegistryInconsistency",
    "derive_name",
    "get_registry",
    "cleanup_registry",
]
