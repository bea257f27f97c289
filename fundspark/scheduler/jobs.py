"""FundSpark — Scheduler Jobs.

APScheduler interval job that closes out approved campaigns past their end date.
"""

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlmodel import Session

from fundspark.config import settings
from fundspark.database import engine
from fundspark.stores.campaign_store import complete_ended_campaigns
from fundspark.core.logging import get_logger

logger = get_logger("scheduler")

scheduler = AsyncIOScheduler()


async def campaign_lifecycle_job():
    """Mark ended approved campaigns as completed."""
    try:
        with Session(engine) as session:
            closed = complete_ended_campaigns(session)
        if closed:
            logger.info(f"Lifecycle sweep completed {closed} campaigns")
    except Exception as e:
        logger.error(f"Lifecycle sweep failed: {e}")


def start_scheduler():
    """Configure and start the scheduler."""
    if not settings.scheduler_enabled:
        logger.info("Scheduler disabled via config")
        return

    scheduler.add_job(
        campaign_lifecycle_job,
        "interval",
        minutes=settings.lifecycle_sweep_minutes,
        id="campaign_lifecycle",
        replace_existing=True,
        misfire_grace_time=300,
    )
    scheduler.start()
    logger.info(f"Scheduler started. Lifecycle sweep every {settings.lifecycle_sweep_minutes} min")


def stop_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")
