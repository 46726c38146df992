from fastapi import Request

from netmonitor.stats.store import SnapshotStore
from netmonitor.status.bridge import BridgeStore
from netmonitor.status.poller import StatusStore
from netmonitor.status.wallets import WalletStore


def get_usage_store(request: Request) -> SnapshotStore:
    return request.app.state.usage_store  # type: ignore[return-value]


def get_activity_store(request: Request) -> SnapshotStore:
    return request.app.state.activity_store  # type: ignore[return-value]


def get_status_store(request: Request) -> StatusStore:
    return request.app.state.status_store  # type: ignore[return-value]


def get_wallet_store(request: Request) -> WalletStore:
    return request.app.state.wallet_store  # type: ignore[return-value]


def get_bridge_store(request: Request) -> BridgeStore:
    return request.app.state.bridge_store  # type: ignore[return-value]
