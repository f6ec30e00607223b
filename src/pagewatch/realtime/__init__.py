"""Realtime change listening on open pages."""

from .listener import (
    OBSERVER_SCRIPT,
    Debouncer,
    RealtimeChangeListener,
    RealtimeWatcher,
)
from .types import ChangeSignal, MutationBatch, RealtimeError

__all__ = [
    "ChangeSignal",
    "MutationBatch",
    "RealtimeError",
    "Debouncer",
    "RealtimeChangeListener",
    "RealtimeWatcher",
    "OBSERVER_SCRIPT",
]
