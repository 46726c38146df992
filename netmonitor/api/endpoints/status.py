from fastapi import APIRouter, Depends

from netmonitor.api.dependencies import get_bridge_store, get_status_store, get_wallet_store
from netmonitor.domain.models import BalancesResponse, BridgeStatus, NetworkStatus
from netmonitor.status.bridge import BridgeStore
from netmonitor.status.poller import StatusStore
from netmonitor.status.wallets import WalletStore

router = APIRouter(prefix="/api")


@router.get("/status", response_model=NetworkStatus)
async def network_status(store: StatusStore = Depends(get_status_store)):
    return store.read()


@router.get("/balances", response_model=BalancesResponse)
async def paymaster_balances(store: WalletStore = Depends(get_wallet_store)):
    return BalancesResponse(wallets=store.read())


@router.get("/bridge_status", response_model=BridgeStatus)
async def bridge_status(store: BridgeStore = Depends(get_bridge_store)):
    return store.read()
