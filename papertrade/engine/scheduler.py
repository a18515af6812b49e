"""APScheduler integration for FastAPI.

Runs a periodic monitor cycle that re-applies the latest known price of every
symbol with active trades. Ticks pushed through the API are applied
immediately; this sweep covers polling price sources.
"""

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlmodel import Session, select

from papertrade.config import settings
from papertrade.database import engine
from papertrade.engine.execution import apply_tick
from papertrade.models.trade import Trade
from papertrade.services.price_feed import get_price_source
from papertrade.utils.constants import ACTIVE_STATUSES

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()
MONITOR_JOB_ID = "price_monitor"
_cycle_lock = asyncio.Lock()


def _run_monitor_cycle_sync(db_engine) -> dict:
    source = get_price_source()
    summary = {"symbols": 0, "updated": 0, "skipped": []}

    with Session(db_engine) as session:
        symbols = session.exec(
            select(Trade.symbol).where(Trade.status.in_(ACTIVE_STATUSES)).distinct()
        ).all()

        for symbol in symbols:
            summary["symbols"] += 1
            price = source.latest(symbol)
            if price is None:
                summary["skipped"].append(symbol)
                continue
            try:
                summary["updated"] += len(apply_tick(session, symbol, price))
            except Exception as e:
                logger.error(f"[monitor] {symbol} tick failed: {e}", exc_info=True)

    return summary


async def run_monitor_cycle(db_engine=None) -> dict:
    """Run one monitor sweep, skipping if a prior sweep is still in-flight."""
    if _cycle_lock.locked():
        logger.warning("[monitor] Skipping overlapping cycle")
        return {"symbols": 0, "updated": 0, "skipped": [], "overlap": True}

    async with _cycle_lock:
        # Ledger writes are blocking; keep them off the event loop
        return await asyncio.get_running_loop().run_in_executor(
            None, _run_monitor_cycle_sync, db_engine or engine
        )


def start_scheduler():
    """Start the scheduler with the price monitor job."""
    if settings.monitor_enabled:
        scheduler.add_job(
            run_monitor_cycle,
            trigger=IntervalTrigger(seconds=settings.monitor_interval_seconds),
            id=MONITOR_JOB_ID,
            name="Price monitor",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            misfire_grace_time=30,
        )
    scheduler.start()
    logger.info(f"Scheduler started with {len(scheduler.get_jobs())} jobs")


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
        "jobs": [
            {
                "id": j.id,
                "name": j.name,
                "next_run": str(j.next_run_time) if j.next_run_time else None,
                "trigger": str(j.trigger),
            }
            for j in jobs
        ],
    }
