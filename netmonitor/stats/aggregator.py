"""Multi-window aggregation of user operations.

Every operation is bucketed into each configured rolling window it falls in.
Operation count and gas are plain counters; unique active accounts is the
size of a per-window set of senders. Gas per sender over the last 24 hours
is tallied separately for the top-consumer ranking.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import AsyncIterator, Awaitable, Callable, Iterable

from netmonitor.core.errors import DecodeError, MonitorError, TransportError
from netmonitor.core.logger import get_logger
from netmonitor.domain.models import OperationRecord
from netmonitor.domain.timestamps import parse_rfc3339
from netmonitor.domain.windows import StatName, StatsKeys, TimeWindow, duration_of
from netmonitor.infrastructure.http.pagination import Page
from netmonitor.metrics import RECORDS_SKIPPED_TOTAL

logger = get_logger("netmonitor.aggregator")

GAS_RANKING_WINDOW = timedelta(days=1)

# Stats that are incremented per operation; the unique count is derived at the end
_COUNTED_STATS = (StatName.USER_OPS, StatName.GAS_USED)


@dataclass
class DrainResult:
    pages: int = 0
    error: MonitorError | None = None


async def drain(
    pages: AsyncIterator[Page],
    consume: Callable[[Page], Awaitable[None] | None],
) -> DrainResult:
    """Feed every page to `consume` until the stream ends or a fetch fails.

    Fetch errors end the stream without discarding what was consumed.
    """
    result = DrainResult()
    try:
        async for page in pages:
            outcome = consume(page)
            if outcome is not None:
                await outcome
            result.pages += 1
    except (TransportError, DecodeError) as e:
        result.error = e
    return result


class WindowAggregator:
    def __init__(self, keys: StatsKeys, now: datetime):
        self.keys = keys
        self.now = now
        self.cutoffs: dict[TimeWindow, datetime] = {
            window: now - duration_of(window, now) for window in keys.time_windows
        }
        self.counters: dict[StatName, dict[TimeWindow, int]] = {
            stat: {window: 0 for window in self.cutoffs}
            for stat in _COUNTED_STATS
            if stat in keys.stat_names
        }
        self.unique_senders: dict[TimeWindow, set[str]] = {
            window: set() for window in self.cutoffs
        }
        self.gas_by_sender: dict[str, int] = defaultdict(int)
        self.records_seen = 0
        self.records_skipped = 0

    def add(self, record: OperationRecord) -> bool:
        """Bucket one operation. Returns False if its timestamp is unusable."""
        self.records_seen += 1
        op_time = parse_rfc3339(record.timestamp)
        if op_time is None:
            self.records_skipped += 1
            RECORDS_SKIPPED_TOTAL.labels(reason="bad_operation_timestamp").inc()
            return False

        for window, cutoff in self.cutoffs.items():
            if cutoff > op_time:
                continue
            if StatName.USER_OPS in self.counters:
                self.counters[StatName.USER_OPS][window] += 1
            if StatName.GAS_USED in self.counters:
                self.counters[StatName.GAS_USED][window] += record.gas_used
            self.unique_senders[window].add(record.sender)

        if self.now - GAS_RANKING_WINDOW <= op_time:
            self.gas_by_sender[record.sender] += record.gas_used
        return True

    def add_all(self, records: Iterable[OperationRecord]) -> None:
        for record in records:
            self.add(record)

    def stats(self) -> dict[StatName, dict[TimeWindow, int]]:
        out = {stat: dict(values) for stat, values in self.counters.items()}
        if StatName.UNIQUE_ACTIVE_ACCOUNTS in self.keys.stat_names:
            out[StatName.UNIQUE_ACTIVE_ACCOUNTS] = {
                window: len(senders) for window, senders in self.unique_senders.items()
            }
        return out

    def labelled_stats(self) -> dict[str, dict[str, int]]:
        """stats() keyed by the configured output labels."""
        return {
            self.keys.stat_names.label(stat): {
                self.keys.time_windows.label(window): value
                for window, value in values.items()
            }
            for stat, values in self.stats().items()
        }


@dataclass
class OperationStats:
    aggregator: WindowAggregator
    pages: int = 0
    error: MonitorError | None = None


async def aggregate_operations(
    keys: StatsKeys, pages: AsyncIterator[Page], now: datetime
) -> OperationStats:
    """Drain the operations stream into a fresh WindowAggregator."""
    aggregator = WindowAggregator(keys, now)
    drained = await drain(pages, lambda page: aggregator.add_all(page.records))
    if aggregator.records_skipped:
        logger.debug(
            "operations_skipped",
            extra={
                "skipped": aggregator.records_skipped,
                "seen": aggregator.records_seen,
            },
        )
    return OperationStats(
        aggregator=aggregator,
        pages=drained.pages,
        error=drained.error,
    )
