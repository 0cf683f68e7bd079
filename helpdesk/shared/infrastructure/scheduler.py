"""
Background Scheduler
====================

Thin wrapper around APScheduler's ``AsyncIOScheduler`` for the service's
periodic jobs (SLA breach scan, heartbeat).

Every job runs with ``max_instances=1``: a run that is still in flight when
the next tick fires causes that tick to be skipped, so runs of one job never
overlap.
"""

from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from helpdesk.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)

JobFunc = Callable[[], Awaitable[object]]


class IntervalScheduler:
    """
    Manages the lifecycle of the scheduler and its interval jobs.

    Jobs are registered before ``start``; registering after start adds them
    to the running scheduler.
    """

    def __init__(self):
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._jobs: Dict[str, tuple] = {}
        self._running = False

    def add_interval_job(
        self,
        job_id: str,
        job_func: JobFunc,
        interval_seconds: int,
        name: Optional[str] = None,
        run_immediately: bool = False,
    ) -> None:
        """Register ``job_func`` to run every ``interval_seconds``."""
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._jobs[job_id] = (job_func, interval_seconds, name or job_id, run_immediately)
        if self._running:
            self._schedule(job_id)

    def _schedule(self, job_id: str) -> None:
        job_func, interval_seconds, name, run_immediately = self._jobs[job_id]
        options = {}
        if run_immediately:
            options["next_run_time"] = datetime.now(timezone.utc)

        self._scheduler.add_job(
            job_func,
            "interval",
            seconds=interval_seconds,
            id=job_id,
            name=name,
            misfire_grace_time=60,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
            **options
        )
        logger.info(
            "Scheduled interval job",
            extra={"job_id": job_id, "interval_seconds": interval_seconds}
        )

    async def start(self) -> None:
        """Start the scheduler. Must be called from the running event loop."""
        if self._running:
            logger.warning("Scheduler already running")
            return

        self._scheduler = AsyncIOScheduler()
        for job_id in self._jobs:
            self._schedule(job_id)

        self._scheduler.start()
        self._running = True
        logger.info("Scheduler started", extra={"jobs": list(self._jobs)})

    async def stop(self) -> None:
        """Stop the scheduler without waiting for in-flight jobs."""
        if not self._running:
            return

        if self._scheduler:
            self._scheduler.shutdown(wait=False)

        self._running = False
        logger.info("Scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._running

    @property
    def job_ids(self) -> list:
        return list(self._jobs)
