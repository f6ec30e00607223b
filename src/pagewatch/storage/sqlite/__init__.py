"""SQLite database storage module."""

from .database import DatabaseManager
from .models import Base, TrackedSite
from .registry import SQLiteRegistry

__all__ = [
    "DatabaseManager",
    "SQLiteRegistry",
    "Base",
    "TrackedSite",
]
