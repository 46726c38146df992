from fastapi import APIRouter, Depends

from netmonitor.api.dependencies import get_activity_store, get_usage_store
from netmonitor.domain.models import StatsSnapshot
from netmonitor.stats.store import SnapshotStore

router = APIRouter(prefix="/api")


@router.get("/usage_stats", response_model=StatsSnapshot)
async def usage_stats(store: SnapshotStore = Depends(get_usage_store)):
    return store.read()


@router.get("/activity_stats", response_model=StatsSnapshot)
async def activity_stats(store: SnapshotStore = Depends(get_activity_store)):
    return store.read()
