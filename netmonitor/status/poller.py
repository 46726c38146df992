"""Chain and bundler liveness checks."""

from __future__ import annotations

from typing import Any

import httpx

from netmonitor.core.errors import DecodeError, TransportError
from netmonitor.core.logger import get_logger
from netmonitor.domain.models import NetworkStatus, Status
from netmonitor.metrics import COMPONENT_ONLINE
from shared.utils.retry import retry_async

from .store import LatestValueStore

logger = get_logger("netmonitor.status")

SYNC_STATUS_METHOD = "strata_syncStatus"
BACKOFF_MULTIPLIER = 1.5


class RpcError(TransportError):
    """JSON-RPC error object returned by the node."""


async def rpc_request(
    client: httpx.AsyncClient, url: str, method: str, params: list | None = None
) -> Any:
    body = {"jsonrpc": "2.0", "id": 1, "method": method, "params": params or []}
    try:
        response = await client.post(url, json=body)
        response.raise_for_status()
    except httpx.HTTPError as e:
        raise TransportError(f"{method} request failed: {e}", url=url) from e
    try:
        payload = response.json()
    except ValueError as e:
        raise DecodeError(f"{method} response is not JSON") from e
    if not isinstance(payload, dict):
        raise DecodeError(f"{method} response is not a JSON-RPC object")
    if payload.get("error") is not None:
        raise RpcError(f"{method} returned error: {payload['error']}", url=url)
    return payload.get("result")


def initial_delay(retries: int, total_time_s: float, multiplier: float) -> float:
    """First backoff delay such that `retries` delays add up to total_time_s."""
    if retries <= 0:
        return 0.0
    if multiplier == 1:
        return total_time_s / retries
    return total_time_s * (multiplier - 1) / (multiplier**retries - 1)


async def call_rpc_status(
    client: httpx.AsyncClient,
    rpc_url: str,
    max_retries: int,
    total_retry_time_s: float,
) -> Status:
    """Online when strata_syncStatus answers with a tip height."""

    async def _call():
        return await rpc_request(client, rpc_url, SYNC_STATUS_METHOD)

    def _on_retry(attempt: int, exc: BaseException, sleep_for: float):
        logger.info(
            "rpc_status_retry",
            extra={"attempt": attempt, "error": str(exc), "sleep_for": round(sleep_for, 2)},
        )

    base = initial_delay(max_retries, total_retry_time_s, BACKOFF_MULTIPLIER)
    try:
        result = await retry_async(
            _call,
            retries=max_retries + 1,
            base_delay=base,
            max_delay=total_retry_time_s,
            multiplier=BACKOFF_MULTIPLIER,
            jitter=0.0,
            retry_on=(TransportError, DecodeError),
            on_retry=_on_retry,
        )
    except (TransportError, DecodeError) as e:
        logger.error("rpc_status_unavailable", extra={"error": str(e)})
        return Status.OFFLINE

    if isinstance(result, dict) and "tip_height" in result:
        return Status.ONLINE
    return Status.OFFLINE


async def check_bundler_health(client: httpx.AsyncClient, url: str) -> Status:
    try:
        response = await client.get(url)
    except httpx.HTTPError as e:
        logger.warning("bundler_health_failed", extra={"error": str(e)})
        return Status.OFFLINE
    if "ok" in response.text:
        return Status.ONLINE
    return Status.OFFLINE


class StatusStore(LatestValueStore[NetworkStatus]):
    def __init__(self):
        super().__init__(NetworkStatus())


class NetworkStatusPoller:
    def __init__(
        self,
        client: httpx.AsyncClient,
        store: StatusStore,
        rpc_url: str,
        bundler_url: str,
        max_retries: int,
        total_retry_time_s: float,
    ):
        self.client = client
        self.store = store
        self.rpc_url = rpc_url
        self.bundler_url = bundler_url
        self.max_retries = max_retries
        self.total_retry_time_s = total_retry_time_s

    async def poll_once(self) -> NetworkStatus:
        rpc_status = await call_rpc_status(
            self.client, self.rpc_url, self.max_retries, self.total_retry_time_s
        )
        status = NetworkStatus(
            batch_producer=rpc_status,
            rpc_endpoint=rpc_status,
            bundler_endpoint=await check_bundler_health(self.client, self.bundler_url),
        )
        for component, value in status.model_dump().items():
            COMPONENT_ONLINE.labels(component=component).set(
                1 if value == Status.ONLINE else 0
            )
        logger.info("network_status_updated", extra=status.model_dump(mode="json"))
        self.store.replace(status)
        return status
