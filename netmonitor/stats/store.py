from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Mapping, Sequence

from netmonitor.domain.models import CycleResult, EntityRecord, StatsSnapshot
from netmonitor.domain.windows import StatsKeys


class SnapshotStore:
    """Owner of the latest StatsSnapshot for one stats family.

    Writers go through `writing()`, which admits one refresh cycle at a time
    and holds for the whole cycle. Each update swaps in a new snapshot object,
    so `read()` never blocks and never sees a half-applied field.
    """

    def __init__(self, keys: StatsKeys):
        self.keys = keys
        self._snapshot = StatsSnapshot.zero(keys)
        self._write_lock = asyncio.Lock()
        self.last_cycle: CycleResult | None = None

    def read(self) -> StatsSnapshot:
        return self._snapshot.model_copy(deep=True)

    @property
    def is_writing(self) -> bool:
        return self._write_lock.locked()

    @asynccontextmanager
    async def writing(self) -> AsyncIterator["SnapshotWriter"]:
        async with self._write_lock:
            yield SnapshotWriter(self)


class SnapshotWriter:
    """Field-level updates applied during one refresh cycle."""

    def __init__(self, store: SnapshotStore):
        self._store = store

    def merge_stats(self, stats: Mapping[str, Mapping[str, int]]) -> None:
        """Overwrite the given stat/window values, keeping all others."""
        current = self._store._snapshot
        merged = {name: dict(values) for name, values in current.stats.items()}
        for name, values in stats.items():
            merged.setdefault(name, {}).update(values)
        self._store._snapshot = current.model_copy(update={"stats": merged})

    def set_selection(self, label: str, accounts: Sequence[EntityRecord]) -> None:
        current = self._store._snapshot
        selected = dict(current.selected_accounts)
        selected[label] = [account.model_copy() for account in accounts]
        self._store._snapshot = current.model_copy(
            update={"selected_accounts": selected}
        )

    def record_cycle(self, result: CycleResult) -> None:
        self._store.last_cycle = result
