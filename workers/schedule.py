# =============================================================================
# workers/schedule.py - Cron Schedule & In-Process Runner
# =============================================================================
# CRON_JOBS is the single source of truth for recurring jobs:
# - workers/celery_app.py turns it into Celery beat's schedule (production)
# - initialize_crons() runs it inside the API event loop (development only)
#
# The in-process runner keeps one asyncio task per job. Each task sleeps
# until the crontab's next fire time, then runs the Celery task locally
# (task.apply) in a worker thread so the event loop never blocks.
#
# Usage:
#   await initialize_crons()   # during startup, development only
#   await shutdown_crons()     # during shutdown
# =============================================================================

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from celery import Task
from celery.schedules import crontab

from workers import tasks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CronJob:
    """A recurring job: a Celery task plus crontab fields (UTC)."""
    name: str
    task: Task
    minute: str
    hour: str
    day_of_month: str = "*"

    def to_crontab(self, nowfun: Callable[[], datetime] | None = None) -> crontab:
        return crontab(
            minute=self.minute,
            hour=self.hour,
            day_of_month=self.day_of_month,
            nowfun=nowfun,
        )


CRON_JOBS: tuple[CronJob, ...] = (
    # daily 00:05
    CronJob("process-recurring-transactions", tasks.process_recurring_transactions, minute="5", hour="0"),
    # 1st of every month 02:30
    CronJob("generate-monthly-reports", tasks.generate_monthly_reports, minute="30", hour="2", day_of_month="1"),
)

_cron_tasks: list[asyncio.Task] = []


def beat_schedule() -> dict[str, dict]:
    """CRON_JOBS in Celery beat's configuration format."""
    return {
        job.name: {"task": job.task.name, "schedule": job.to_crontab()}
        for job in CRON_JOBS
    }


def seconds_until_next_run(job: CronJob, now: datetime | None = None) -> float:
    """
    Seconds from `now` until the job next fires.

    Example:
        job = CronJob("x", task, minute="5", hour="0")
        seconds_until_next_run(job, datetime(2024, 1, 1, tzinfo=timezone.utc))  # 300.0
    """
    now = now or datetime.now(timezone.utc)
    schedule = job.to_crontab(nowfun=lambda: now)
    return max(schedule.remaining_estimate(now).total_seconds(), 0.0)


async def _run_forever(job: CronJob) -> None:
    while True:
        delay = seconds_until_next_run(job)
        logger.debug(f"Cron {job.name} next run in {delay:.0f}s")
        await asyncio.sleep(delay)

        try:
            result = await asyncio.to_thread(job.task.apply)
            if result.failed():
                logger.error(f"Cron {job.name} failed: {result.result}")
            else:
                logger.info(f"Cron {job.name} finished: {result.result}")
        except Exception as e:
            logger.exception(f"Cron {job.name} crashed: {e}")

        # Step past the fire minute so the same slot is never run twice
        await asyncio.sleep(1)


async def initialize_crons() -> list[asyncio.Task]:
    """
    Start the in-process cron runner (one asyncio task per job).

    Calling it again while jobs are running is a no-op.

    Returns:
        The running asyncio tasks
    """
    if _cron_tasks:
        return list(_cron_tasks)

    for job in CRON_JOBS:
        _cron_tasks.append(asyncio.create_task(_run_forever(job), name=f"cron:{job.name}"))
        logger.info(f"Cron job scheduled: {job.name} ({job.minute} {job.hour} {job.day_of_month} * *)")

    return list(_cron_tasks)


async def shutdown_crons() -> None:
    """Cancel and await every in-process cron task."""
    while _cron_tasks:
        task = _cron_tasks.pop()
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
