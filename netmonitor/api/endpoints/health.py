from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/healthz")
async def healthz():
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request):
    """Ready once every stats family has completed a refresh cycle."""
    cycles = {}
    for family, store in (
        ("usage", request.app.state.usage_store),
        ("activity", request.app.state.activity_store),
    ):
        last = store.last_cycle
        cycles[family] = last.outcome.value if last is not None else None
    ready = all(outcome is not None for outcome in cycles.values())
    body = {"status": "ready" if ready else "not ready", "last_cycles": cycles}
    return JSONResponse(status_code=200 if ready else 503, content=body)
