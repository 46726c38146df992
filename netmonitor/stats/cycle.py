"""One full stats refresh: drain both sources, rank, write the snapshot."""

from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Callable

from netmonitor.core.logger import get_logger
from netmonitor.domain.models import CycleOutcome, CycleResult
from netmonitor.domain.windows import SelectionKind, StatsFamily, StatsKeys, query_start
from netmonitor.infrastructure.http.pagination import PaginatedSource
from netmonitor.metrics import CYCLE_DURATION_SECONDS, CYCLES_TOTAL

from .aggregator import DrainResult, aggregate_operations, drain
from .ranking import RecentAccounts, top_gas_consumers
from .store import SnapshotStore

logger = get_logger("netmonitor.stats_cycle")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def classify(results: dict[str, DrainResult]) -> CycleOutcome:
    failed = [r for r in results.values() if r.error is not None]
    if not failed:
        return CycleOutcome.REFRESHED
    if len(failed) == len(results) and all(r.pages == 0 for r in failed):
        return CycleOutcome.FAILED
    return CycleOutcome.PARTIAL


class StatsRefresher:
    def __init__(
        self,
        family: StatsFamily,
        keys: StatsKeys,
        store: SnapshotStore,
        user_ops: PaginatedSource,
        accounts: PaginatedSource,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.family = family
        self.keys = keys
        self.store = store
        self.user_ops = user_ops
        self.accounts = accounts
        self.clock = clock

    async def run_cycle(self) -> CycleResult:
        """Refresh the snapshot once.

        A source whose first page fails leaves its part of the snapshot
        untouched. A source that fails later still contributes the pages it
        delivered.
        """
        now = self.clock()
        start_time = query_start(now)
        started = time.monotonic()
        logger.info(
            "stats_cycle_started",
            extra={"family": self.family.name, "start_time": start_time.isoformat()},
        )

        async with self.store.writing() as writer:
            ops = await aggregate_operations(
                self.keys, self.user_ops.pages(start_time, now), now
            )
            self._log_drain(self.user_ops.name, ops.pages, ops.error)
            if ops.pages:
                writer.merge_stats(ops.aggregator.labelled_stats())

            recent = RecentAccounts()
            accounts = await drain(
                self.accounts.pages(start_time, now),
                lambda page: recent.add_all(page.records),
            )
            self._log_drain(self.accounts.name, accounts.pages, accounts.error)

            selections = self.keys.select_accounts_by
            if accounts.pages and SelectionKind.RECENT in selections:
                writer.set_selection(
                    selections.label(SelectionKind.RECENT), recent.selection()
                )
            if ops.pages and SelectionKind.TOP_GAS_CONSUMERS_24H in selections:
                writer.set_selection(
                    selections.label(SelectionKind.TOP_GAS_CONSUMERS_24H),
                    top_gas_consumers(ops.aggregator.gas_by_sender),
                )

            drained = {
                self.user_ops.name: DrainResult(ops.pages, ops.error),
                self.accounts.name: accounts,
            }
            result = CycleResult(
                outcome=classify(drained),
                failed_sources=[n for n, r in drained.items() if r.error is not None],
                pages_fetched={n: r.pages for n, r in drained.items()},
                started_at=now,
                finished_at=self.clock(),
            )
            writer.record_cycle(result)

        elapsed = time.monotonic() - started
        CYCLE_DURATION_SECONDS.labels(family=self.family.name).observe(elapsed)
        CYCLES_TOTAL.labels(family=self.family.name, outcome=result.outcome.value).inc()
        logger.info(
            "stats_cycle_finished",
            extra={
                "family": self.family.name,
                "outcome": result.outcome.value,
                "pages_fetched": result.pages_fetched,
                "elapsed_s": round(elapsed, 3),
            },
        )
        return result

    def _log_drain(self, source: str, pages: int, error: Exception | None) -> None:
        if error is None:
            logger.info(
                "source_drained",
                extra={"family": self.family.name, "source": source, "pages": pages},
            )
            return
        logger.error(
            f"{source}_fetch_failed",
            extra={
                "family": self.family.name,
                "source": source,
                "pages": pages,
                "error": str(error),
                "error_type": type(error).__name__,
            },
        )
