"""APScheduler adapter: implements SchedulerPort.

Each CronSpec becomes a CronTrigger on an AsyncIOScheduler, so callbacks
run as coroutines on the application's event loop.
"""

from __future__ import annotations

import logging

from apscheduler.jobstores.base import JobLookupError
from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.data.models import CronSpec
from src.ports.scheduler_port import JobCallback

logger = logging.getLogger(__name__)


def to_trigger(spec: CronSpec, timezone: str | None = None) -> CronTrigger:
    return CronTrigger(
        minute=spec.minute,
        hour=spec.hour,
        day_of_week=spec.day_of_week,
        timezone=timezone,
    )


class APSchedulerJob:
    """JobHandle wrapping an APScheduler Job."""

    def __init__(self, job: Job) -> None:
        self._job = job

    def cancel(self) -> None:
        try:
            self._job.remove()
        except JobLookupError:
            logger.debug("Job %s already removed", self._job.id)


class APSchedulerClock:
    """AsyncIOScheduler implementation of SchedulerPort."""

    def __init__(self, timezone: str = "UTC") -> None:
        self._timezone = timezone
        self._scheduler = AsyncIOScheduler(timezone=timezone)

    def schedule_recurring(self, trigger: CronSpec, callback: JobCallback, name: str) -> APSchedulerJob:
        job = self._scheduler.add_job(
            callback,
            to_trigger(trigger, self._timezone),
            id=name,
            name=name,
            coalesce=True,
            max_instances=1,
            replace_existing=True,
        )
        logger.debug("Scheduled job %s at cron %s", name, trigger.expression)
        return APSchedulerJob(job)

    def start(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()
            logger.info("Scheduler started (%s)", self._timezone)

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
