"""
APScheduler configuration for marketplace background jobs.

Jobs:
- scheduled_payouts: sweeps eligible seller wallets into pending payouts,
  on the interval named by the platform payout schedule
- expire_coupons: deactivates coupons past their validity window

Each job opens its own database session and commits on success.
"""

import logging
from typing import Dict

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.executors.asyncio import AsyncIOExecutor

from groweasy.config import settings
from groweasy.database import get_db_session

logger = logging.getLogger(__name__)

PAYOUT_INTERVALS: Dict[str, int] = {
    "daily": 1,
    "weekly": 7,
    "monthly": 30,
}

# Job stores
jobstores = {
    'default': MemoryJobStore()
}

# Executors
executors = {
    'default': AsyncIOExecutor(),
}

# Job defaults
job_defaults = {
    'coalesce': True,  # Combine multiple pending executions into one
    'max_instances': 1,  # Only one instance of each job at a time
    'misfire_grace_time': 60,
}

scheduler = AsyncIOScheduler(
    jobstores=jobstores,
    executors=executors,
    job_defaults=job_defaults,
    timezone=settings.TIMEZONE,
)


async def scheduled_payouts() -> int:
    """Create pending payouts for every eligible seller. Returns how many were created."""
    from groweasy.services.payout_service import PayoutService

    try:
        async with get_db_session() as db:
            payouts = await PayoutService(db).schedule_payouts()
        logger.info(f"Job 'scheduled_payouts' completed: {len(payouts)} payouts created")
        return len(payouts)
    except Exception as e:
        logger.error(f"Job 'scheduled_payouts' failed: {e}")
        raise


async def expire_coupons() -> int:
    """Deactivate expired coupons. Returns how many were switched off."""
    from groweasy.services.coupon_service import CouponService

    try:
        async with get_db_session() as db:
            count = await CouponService(db).expire_coupons()
        logger.info(f"Job 'expire_coupons' completed: {count} coupons deactivated")
        return count
    except Exception as e:
        logger.error(f"Job 'expire_coupons' failed: {e}")
        raise


def payout_interval_days(schedule: str) -> int:
    if schedule not in PAYOUT_INTERVALS:
        logger.warning(f"Unknown payout schedule '{schedule}', falling back to weekly")
    return PAYOUT_INTERVALS.get(schedule, PAYOUT_INTERVALS["weekly"])


def start_scheduler(payout_schedule: str = settings.PAYOUT_SCHEDULE):
    """Start the background job scheduler."""
    if scheduler.running:
        return

    scheduler.add_job(
        scheduled_payouts,
        'interval',
        days=payout_interval_days(payout_schedule),
        id='scheduled_payouts',
        name='Scheduled Seller Payouts',
        replace_existing=True,
    )

    scheduler.add_job(
        expire_coupons,
        'interval',
        minutes=settings.COUPON_EXPIRY_INTERVAL_MINUTES,
        id='expire_coupons',
        name='Expire Coupons',
        replace_existing=True,
    )

    scheduler.start()
    logger.info("Background job scheduler started")

    for job in scheduler.get_jobs():
        logger.info(f"Scheduled job: {job.name} - Next run: {job.next_run_time}")


def reschedule_payouts(payout_schedule: str) -> None:
    """Apply a changed payout schedule to the running scheduler."""
    if not scheduler.running or scheduler.get_job('scheduled_payouts') is None:
        return
    scheduler.reschedule_job(
        'scheduled_payouts',
        trigger='interval',
        days=payout_interval_days(payout_schedule),
    )
    logger.info(f"Payout job rescheduled: {payout_schedule}")


def shutdown_scheduler():
    """Shutdown the scheduler gracefully."""
    if scheduler.running:
        scheduler.shutdown(wait=True)
        logger.info("Background job scheduler stopped")
