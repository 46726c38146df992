"""Top-N account selections."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Mapping

from netmonitor.core.logger import get_logger
from netmonitor.domain.models import EntityRecord
from netmonitor.domain.timestamps import parse_rfc3339
from netmonitor.metrics import RECORDS_SKIPPED_TOTAL

logger = get_logger("netmonitor.ranking")

TOP_N = 5


def _dated(accounts: Iterable[EntityRecord]) -> list[tuple[datetime, EntityRecord]]:
    dated = []
    for account in accounts:
        if not account.creation_timestamp:
            continue
        created = parse_rfc3339(account.creation_timestamp)
        if created is None:
            RECORDS_SKIPPED_TOTAL.labels(reason="bad_creation_timestamp").inc()
            logger.debug(
                "account_creation_timestamp_unparseable",
                extra={
                    "address": account.address,
                    "creation_timestamp": account.creation_timestamp,
                },
            )
            continue
        dated.append((created, account))
    return dated


def most_recently_created(
    accounts: Iterable[EntityRecord], limit: int = TOP_N
) -> list[EntityRecord]:
    """Newest accounts first; ties ordered by address.

    Accounts without a creation timestamp, or with one that does not parse,
    are left out.
    """
    dated = sorted(_dated(accounts), key=lambda pair: pair[1].address)
    dated.sort(key=lambda pair: pair[0], reverse=True)
    return [account for _, account in dated[:limit]]


def top_gas_consumers(
    gas_by_sender: Mapping[str, int], limit: int = TOP_N
) -> list[EntityRecord]:
    """Largest gas totals first; ties ordered by address."""
    ranked = sorted(gas_by_sender.items(), key=lambda item: (-item[1], item[0]))
    return [
        EntityRecord(address=address, creation_timestamp="", gas_used=gas_used)
        for address, gas_used in ranked[:limit]
    ]


class RecentAccounts:
    """Running most-recently-created selection over a paged stream.

    Only the current top N is kept between pages.
    """

    def __init__(self, limit: int = TOP_N):
        self.limit = limit
        self._selection: list[EntityRecord] = []

    def add_all(self, accounts: Iterable[EntityRecord]) -> None:
        self._selection = most_recently_created(
            [*self._selection, *accounts], self.limit
        )

    def selection(self) -> list[EntityRecord]:
        return list(self._selection)
