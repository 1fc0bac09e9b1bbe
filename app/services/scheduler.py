"""
Scheduler Service for sub2api

Background periodic jobs (token refresh, quota polling, subscription
expiry) each run on their own APScheduler instance.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MINUTES = 5


class PeriodicTask:
    """
    Runs ``func`` once immediately and then every ``interval_minutes``.

    A single worker thread with ``max_instances=1`` guarantees at most one
    run in flight; runs that fall behind are coalesced instead of queued.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], object],
        interval_minutes: int,
        enabled: bool = True,
    ):
        if interval_minutes < 1:
            interval_minutes = DEFAULT_INTERVAL_MINUTES
        self.name = name
        self.func = func
        self.interval_minutes = interval_minutes
        self.enabled = enabled
        self._scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Start the background job. No-op when disabled or already running."""
        if not self.enabled:
            logger.info(f"{self.name} disabled")
            return

        if self.running:
            logger.info(f"{self.name} already running")
            return

        scheduler = BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(1)},
            job_defaults={"max_instances": 1, "coalesce": True, "misfire_grace_time": None},
            timezone="UTC",
        )
        scheduler.add_job(
            self._run,
            IntervalTrigger(minutes=self.interval_minutes, timezone="UTC"),
            id=self.name,
            replace_existing=True,
            name=self.name,
            next_run_time=datetime.now(timezone.utc),
        )
        scheduler.start()
        self._scheduler = scheduler
        logger.info(f"{self.name} started (interval: {self.interval_minutes} min)")

    def stop(self) -> None:
        """Stop the job, waiting for an in-flight run to finish. Safe to call anytime."""
        if self.running:
            self._scheduler.shutdown(wait=True)
            logger.info(f"{self.name} stopped")
        self._scheduler = None

    def _run(self) -> None:
        # Errors never escape into the scheduler; the next tick runs as usual.
        try:
            self.func()
        except Exception:
            logger.exception(f"{self.name} run failed")

    def get_status(self) -> dict:
        """Get current job status."""
        jobs = []
        if self._scheduler is not None:
            for job in self._scheduler.get_jobs():
                next_run = getattr(job, "next_run_time", None)
                jobs.append({
                    "id": job.id,
                    "name": job.name,
                    "next_run": next_run.isoformat() if next_run else None,
                    "trigger": str(job.trigger),
                })

        return {
            "name": self.name,
            "enabled": self.enabled,
            "running": self.running,
            "jobs": jobs,
        }
