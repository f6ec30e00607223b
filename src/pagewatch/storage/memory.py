"""In-process registry used for ad-hoc checks and tests."""

from dataclasses import replace
from typing import Optional

from .interface import TargetRegistry
from .types import TrackedTarget


class InMemoryRegistry(TargetRegistry):
    """Registry keeping target records in a dict keyed by id.

    Records are copied on the way in and out, so callers never share a
    mutable object with the store.
    """

    def __init__(self, targets: Optional[list[TrackedTarget]] = None):
        super().__init__()
        self._targets: dict[str, TrackedTarget] = {}
        for target in targets or []:
            self._targets[target.id] = replace(target)

    async def list_targets(self) -> list[TrackedTarget]:
        return [replace(target) for target in self._targets.values()]

    async def get_target(self, target_id: str) -> Optional[TrackedTarget]:
        target = self._targets.get(target_id)
        return replace(target) if target else None

    async def upsert_target(self, target: TrackedTarget) -> TrackedTarget:
        self._targets[target.id] = replace(target)
        return target

    async def remove_target(self, target_id: str) -> bool:
        return self._targets.pop(target_id, None) is not None
