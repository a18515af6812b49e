"""System API — health check, scheduler status, manual monitor trigger."""

from fastapi import APIRouter, Depends, HTTPException

from papertrade.api.deps import get_current_account

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/scheduler", dependencies=[Depends(get_current_account)])
def scheduler_status():
    """Current scheduler state with job details."""
    from papertrade.engine.scheduler import get_scheduler_status
    return get_scheduler_status()


@router.post("/monitor/run", dependencies=[Depends(get_current_account)])
async def trigger_monitor():
    """Manually run one price monitor sweep."""
    from papertrade.engine.scheduler import run_monitor_cycle
    try:
        summary = await run_monitor_cycle()
        return {"status": "ok", **summary}
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
