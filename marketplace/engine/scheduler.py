"""APScheduler integration for FastAPI.

Runs the periodic reconcile pass that retries failed credibility recomputes.
"""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from marketplace.config import settings
from marketplace.engine.reconcile import pending_recomputes, reconcile_scores

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()

RECONCILE_JOB_ID = "reconcile_scores"


def run_reconcile() -> dict:
    """One reconcile pass against the process-wide lifecycle."""
    from marketplace.services.factory import get_lifecycle

    lifecycle = get_lifecycle()
    return reconcile_scores(lifecycle.credibility, lifecycle.recompute_queue)


def start_scheduler(interval_minutes: int | None = None):
    """Register the reconcile job and start the scheduler."""
    minutes = interval_minutes or settings.reconcile_interval_minutes
    scheduler.add_job(
        run_reconcile,
        trigger=IntervalTrigger(minutes=minutes),
        id=RECONCILE_JOB_ID,
        name="Reconcile credibility scores",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=60,
    )
    scheduler.start()
    logger.info(f"Scheduler started, reconciling every {minutes}m")


def stop_scheduler():
    """Shut down the scheduler."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


def get_scheduler_status() -> dict:
    """Return current scheduler state for the API."""
    jobs = scheduler.get_jobs()
    return {
        "running": scheduler.running,
        "job_count": len(jobs),
        "pending_recomputes": len(pending_recomputes),
        "jobs": [
            {
                "id": j.id,
                "name": j.name,
                "next_run": str(j.next_run_time) if getattr(j, "next_run_time", None) else None,
                "trigger": str(j.trigger),
            }
            for j in jobs
        ],
    }
