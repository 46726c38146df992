import asyncio
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from prometheus_fastapi_instrumentator import Instrumentator

from netmonitor.api.router import api_router
from netmonitor.core.config import settings
from netmonitor.core.errors import ConfigError
from netmonitor.core.logger import configure_logging, get_logger
from netmonitor.domain.windows import ACTIVITY, USAGE, StatsFamily, StatsKeys
from netmonitor.infrastructure.http.pagination import accounts_source, user_ops_source
from netmonitor.scheduler import run_periodically
from netmonitor.stats.cycle import StatsRefresher
from netmonitor.stats.store import SnapshotStore
from netmonitor.status.bridge import BridgeMonitor, BridgeStore
from netmonitor.status.poller import NetworkStatusPoller, StatusStore
from netmonitor.status.wallets import BalancePoller, WalletStore

# Configure logging once and get service logger
configure_logging()
logger = get_logger("netmonitor.main")


def load_keys(family: StatsFamily, path: str) -> StatsKeys:
    try:
        keys = StatsKeys.load(path, family)
    except ConfigError as e:
        logger.critical("key_file_invalid", extra={"family": family.name, "error": str(e)})
        raise
    logger.info(
        "key_file_loaded",
        extra={
            "family": family.name,
            "path": path,
            "time_windows": keys.time_windows.labels(),
        },
    )
    return keys


def build_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={"User-Agent": settings.http_user_agent, "Accept": "application/json"},
    )


def build_refresher(
    family: StatsFamily, keys: StatsKeys, store: SnapshotStore, client: httpx.AsyncClient
) -> StatsRefresher:
    return StatsRefresher(
        family,
        keys,
        store,
        user_ops=user_ops_source(
            client, settings.user_ops_query_url, settings.usage_query_page_size
        ),
        accounts=accounts_source(
            client, settings.accounts_query_url, settings.usage_query_page_size
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("netmonitor_starting")
    usage_keys = load_keys(USAGE, settings.usage_keys_path)
    activity_keys = load_keys(ACTIVITY, settings.activity_keys_path)

    app.state.http_client = build_http_client()
    app.state.usage_store = SnapshotStore(usage_keys)
    app.state.activity_store = SnapshotStore(activity_keys)
    app.state.status_store = StatusStore()
    app.state.wallet_store = WalletStore(
        settings.deposit_paymaster_wallet, settings.validating_paymaster_wallet
    )
    app.state.bridge_store = BridgeStore()

    usage = build_refresher(USAGE, usage_keys, app.state.usage_store, app.state.http_client)
    activity = build_refresher(
        ACTIVITY, activity_keys, app.state.activity_store, app.state.http_client
    )
    poller = NetworkStatusPoller(
        app.state.http_client,
        app.state.status_store,
        rpc_url=settings.strata_rpc_url,
        bundler_url=settings.bundler_url,
        max_retries=settings.rpc_max_retries,
        total_retry_time_s=settings.rpc_total_retry_time_s,
    )
    balances = BalancePoller(app.state.http_client, app.state.wallet_store, settings.reth_url)
    bridge = BridgeMonitor(
        app.state.http_client,
        app.state.bridge_store,
        rpc_url=settings.strata_rpc_url,
        bridge_rpc_url=settings.strata_bridge_rpc_url,
        ping_timeout_s=settings.bridge_operator_ping_timeout_s,
    )
    app.state.tasks = [
        asyncio.create_task(
            run_periodically(
                "usage_stats", settings.usage_stats_refetch_interval_s, usage.run_cycle
            )
        ),
        asyncio.create_task(
            run_periodically(
                "activity_stats",
                settings.activity_stats_refetch_interval_s,
                activity.run_cycle,
            )
        ),
        asyncio.create_task(
            run_periodically(
                "network_status", settings.status_refetch_interval_s, poller.poll_once
            )
        ),
        asyncio.create_task(
            run_periodically(
                "wallet_balances", settings.balances_refetch_interval_s, balances.poll_once
            )
        ),
        asyncio.create_task(
            run_periodically(
                "bridge_status", settings.bridge_status_refetch_interval_s, bridge.poll_once
            )
        ),
    ]
    try:
        yield
    finally:
        logger.info("netmonitor_stopping")
        for task in app.state.tasks:
            task.cancel()
        for task in app.state.tasks:
            try:
                await task
            except asyncio.CancelledError:  # expected during shutdown
                logger.debug("background_task_cancelled")
        await app.state.http_client.aclose()


app = FastAPI(title="Network Monitor", version="0.1.0", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET"],
    allow_headers=["*"],
)

Instrumentator(
    should_group_status_codes=True,
    should_ignore_untemplated=True,
    excluded_handlers=["/docs", "/openapi.json", "/metrics"],
).instrument(app)

app.include_router(api_router)


@app.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
