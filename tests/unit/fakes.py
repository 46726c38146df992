"""Fakes and fixtures data shared by the unit tests."""

from datetime import datetime, timezone

import httpx

NOW = datetime(2025, 2, 1, 12, 0, 0, tzinfo=timezone.utc)

OPS_URL = "http://indexer.test/operations"
ACCOUNTS_URL = "http://indexer.test/accounts"

USAGE_KEYS_DOC = {
    "usage_stat_names": {
        "USAGE_STATS__USER_OPS": "User ops",
        "USAGE_STATS__GAS_USED": "Gas used",
        "USAGE_STATS__UNIQUE_ACTIVE_ACCOUNTS": "Unique active accounts",
    },
    "time_windows": {
        "TIME_WINDOW__LAST_24_HOURS": "24h",
        "TIME_WINDOW__LAST_30_DAYS": "30d",
        "TIME_WINDOW__YEAR_TO_DATE": "YTD",
    },
    "select_accounts_by": {
        "ACCOUNTS__RECENT": "Recent",
        "ACCOUNTS__TOP_GAS_CONSUMERS_24H": "Top gas 24h",
    },
}

ACTIVITY_KEYS_DOC = {
    "activity_stat_names": {
        "ACTIVITY_STATS__USER_OPS": "Ops",
        "ACTIVITY_STATS__GAS_USED": "Gas",
        "ACTIVITY_STATS__UNIQUE_ACTIVE_ACCOUNTS": "Accounts",
    },
    "time_windows": USAGE_KEYS_DOC["time_windows"],
    "select_accounts_by": USAGE_KEYS_DOC["select_accounts_by"],
}


def iso(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def user_op_item(sender: str, fee: str, timestamp: str) -> dict:
    return {"address": {"hash": sender}, "fee": fee, "timestamp": timestamp}


def account_item(address: str, created: str | None = None, **extra) -> dict:
    item = {"address": {"hash": address}, "creation_timestamp": created}
    item.update(extra)
    return item


class FakeIndexer:
    """Serves canned pages per URL path.

    Entry i of a path's list answers page_token "tok{i}" (None for the first
    page). An entry is either a list of items, an HTTP status code, or an
    exception to raise from the transport.
    """

    def __init__(self):
        self.pages: dict[str, list] = {}
        self.requests: list[httpx.Request] = []

    def serve(self, url: str, entries: list) -> None:
        self.pages[httpx.URL(url).path] = entries

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        entries = self.pages.get(request.url.path)
        if entries is None:
            return httpx.Response(404)
        token = request.url.params.get("page_token")
        index = 0 if token is None else int(token.removeprefix("tok"))
        entry = entries[index]
        if isinstance(entry, Exception):
            raise entry
        if isinstance(entry, int):
            return httpx.Response(entry, text="upstream error")
        body: dict = {"items": entry}
        if index + 1 < len(entries):
            body["next_page_params"] = {"page_token": f"tok{index + 1}"}
        return httpx.Response(200, json=body)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def requests_for(self, url: str) -> list[httpx.Request]:
        path = httpx.URL(url).path
        return [r for r in self.requests if r.url.path == path]
