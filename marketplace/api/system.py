"""System API: health check, scheduler status, manual reconcile."""

from fastapi import APIRouter, Depends

from marketplace.api.deps import get_current_user_id, get_lifecycle
from marketplace.engine.reconcile import reconcile_scores
from marketplace.services.lifecycle import TransactionLifecycle

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.get("/scheduler", dependencies=[Depends(get_current_user_id)])
def scheduler_status():
    """Current scheduler state with job details."""
    from marketplace.engine.scheduler import get_scheduler_status
    return get_scheduler_status()


@router.post("/reconcile", dependencies=[Depends(get_current_user_id)])
def trigger_reconcile(lifecycle: TransactionLifecycle = Depends(get_lifecycle)):
    """Retry every parked credibility recompute now."""
    return reconcile_scores(lifecycle.credibility, lifecycle.recompute_queue)
