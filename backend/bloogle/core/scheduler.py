# bloogle/core/scheduler.py
"""
Periodic background jobs.
Expired sessions are already ignored (and deleted) when resolved; the sweep
removes the ones nobody comes back for.
"""
import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from tortoise.exceptions import BaseORMException

from bloogle.config import settings
from bloogle.services.sessions import sweep_expired

logger = logging.getLogger("uvicorn.error")

SWEEP_JOB_ID = "session-sweep"

# Rebuilt on every start so it binds to the event loop that is running at that moment
scheduler: AsyncIOScheduler | None = None


async def sweep_sessions_job() -> int:
    """
    Delete expired sessions; storage errors are logged and retried on the next tick.

    Returns:
        int: Number of sessions removed (0 on failure)
    """
    try:
        removed = await sweep_expired()
    except BaseORMException as e:
        logger.error("[scheduler] session sweep failed: %s", e)
        return 0
    if removed:
        logger.info("[scheduler] swept %s expired sessions", removed)
    return removed


def start_scheduler() -> None:
    """Register the sweep job and start the scheduler (needs a running event loop)."""
    global scheduler
    if scheduler is not None and scheduler.running:
        return
    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        sweep_sessions_job,
        IntervalTrigger(seconds=settings.session_sweep_interval_sec),
        id=SWEEP_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    scheduler.start()
    logger.info("[scheduler] started; session sweep every %ss", settings.session_sweep_interval_sec)


async def stop_scheduler() -> None:
    """Stop the scheduler; returns once it no longer reports running."""
    if scheduler is not None and scheduler.running:
        scheduler.shutdown(wait=False)
        # AsyncIOScheduler finishes the shutdown on the next loop iteration
        await asyncio.sleep(0)
        logger.info("[scheduler] stopped")
