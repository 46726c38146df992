"""Paginated reader for the indexer's operations and accounts endpoints.

Both endpoints take a time range, a page size and an opaque page token and
answer `{"items": [...], "next_page_params": {"page_token": ...}}`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, AsyncIterator, Generic, NamedTuple, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from netmonitor.core.errors import DecodeError, TransportError
from netmonitor.core.logger import get_logger
from netmonitor.domain.timestamps import format_query_time
from netmonitor.metrics import PAGE_FETCH_ERRORS_TOTAL, PAGES_FETCHED_TOTAL

from .schemas import AccountItem, UserOpItem

logger = get_logger("netmonitor.pagination")

T = TypeVar("T")

USER_OPS_SOURCE = "user_ops"
ACCOUNTS_SOURCE = "accounts"


class Page(NamedTuple, Generic[T]):
    records: list[T]
    next_token: str | None


def extract_next_token(payload: dict[str, Any]) -> str | None:
    """`next_page_params.page_token` with surrounding quotes stripped."""
    params = payload.get("next_page_params")
    if not isinstance(params, dict):
        return None
    token = params.get("page_token")
    if not isinstance(token, str):
        return None
    token = token.strip('"')
    return token or None


def decode_page(payload: Any, item_schema: type[BaseModel]) -> Page:
    if not isinstance(payload, dict) or "items" not in payload:
        raise DecodeError("Missing 'items' in response")
    try:
        items = TypeAdapter(list[item_schema]).validate_python(payload["items"])
    except ValidationError as e:
        raise DecodeError(f"Failed to decode items: {e}") from e
    return Page(
        records=[item.to_record() for item in items],
        next_token=extract_next_token(payload),
    )


async def fetch_page(
    client: httpx.AsyncClient,
    base_url: str,
    start_time: datetime,
    end_time: datetime,
    page_size: int | None,
    page_token: str | None,
    item_schema: type[BaseModel],
) -> Page:
    params = {
        "start_time": format_query_time(start_time),
        "end_time": format_query_time(end_time),
    }
    if page_size is not None:
        params["page_size"] = str(page_size)
    if page_token is not None:
        params["page_token"] = page_token

    try:
        response = await client.get(base_url, params=params)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise TransportError(
            f"Upstream answered {e.response.status_code}",
            url=base_url,
            status_code=e.response.status_code,
        ) from e
    except httpx.HTTPError as e:
        raise TransportError(f"Request failed: {e}", url=base_url) from e

    try:
        payload = response.json()
    except ValueError as e:
        raise DecodeError(f"Response from {base_url} is not JSON") from e
    return decode_page(payload, item_schema)


class PaginatedSource:
    """One upstream endpoint drained page by page.

    pages() yields until the upstream stops returning a page token. A failed
    fetch is raised from the iterator after the pages already yielded.
    """

    def __init__(
        self,
        name: str,
        client: httpx.AsyncClient,
        url: str,
        item_schema: type[BaseModel],
        page_size: int | None = None,
    ):
        self.name = name
        self.client = client
        self.url = url
        self.item_schema = item_schema
        self.page_size = page_size

    async def pages(
        self, start_time: datetime, end_time: datetime
    ) -> AsyncIterator[Page]:
        token: str | None = None
        while True:
            try:
                page = await fetch_page(
                    self.client,
                    self.url,
                    start_time,
                    end_time,
                    self.page_size,
                    token,
                    self.item_schema,
                )
            except TransportError:
                PAGE_FETCH_ERRORS_TOTAL.labels(source=self.name, kind="transport").inc()
                raise
            except DecodeError:
                PAGE_FETCH_ERRORS_TOTAL.labels(source=self.name, kind="decode").inc()
                raise
            PAGES_FETCHED_TOTAL.labels(source=self.name).inc()
            logger.debug(
                "page_fetched",
                extra={"source": self.name, "records": len(page.records)},
            )
            yield page
            if page.next_token is None:
                return
            token = page.next_token


def user_ops_source(
    client: httpx.AsyncClient, url: str, page_size: int | None
) -> PaginatedSource:
    return PaginatedSource(USER_OPS_SOURCE, client, url, UserOpItem, page_size)


def accounts_source(
    client: httpx.AsyncClient, url: str, page_size: int | None
) -> PaginatedSource:
    return PaginatedSource(ACCOUNTS_SOURCE, client, url, AccountItem, page_size)
