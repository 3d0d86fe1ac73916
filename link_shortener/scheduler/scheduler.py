"""Scheduler implementation for the link shortener.

This module provides a scheduler service that manages background tasks
like the periodic sweep of idle rate limiter clients using APScheduler.
"""

import logging
from typing import Any, Dict, List, Optional

from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from link_shortener.core.config import settings
from link_shortener.core.rate_limit import sweep_rate_limiter

logger = logging.getLogger(__name__)

RATE_LIMIT_SWEEP_JOB_ID = "sweep_rate_limiter"


def sweep_rate_limiter_job() -> int:
    """
    Job to drop clients with no requests left in the rate limit window.

    Lazy pruning only touches the identity being checked, so clients that
    never come back would otherwise stay in memory.
    """
    try:
        return sweep_rate_limiter()
    except Exception as e:
        logger.error(f"Error in scheduled rate limiter sweep: {e}", exc_info=True)
        return 0


class SchedulerService:
    """
    Scheduler service for managing background tasks.

    This service provides a wrapper around APScheduler to handle
    scheduling and execution of background tasks.
    """

    def __init__(self):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.is_running = False
        self.jobs: List[Dict[str, Any]] = []

    def initialize(self) -> None:
        """
        Initialize the scheduler.

        This sets up the APScheduler with an in-memory job store,
        but does not start it yet.
        """
        if self.scheduler:
            logger.warning("Scheduler already initialized")
            return

        self.scheduler = AsyncIOScheduler(
            jobstores={"default": MemoryJobStore()},
            job_defaults={
                "coalesce": settings.SCHEDULER_JOB_COALESCE,
                "max_instances": settings.SCHEDULER_JOB_MAX_INSTANCES,
                "misfire_grace_time": settings.SCHEDULER_MISFIRE_GRACE_TIME
            }
        )
        logger.info("Scheduler initialized")

    def start(self) -> None:
        """
        Start the scheduler and register jobs.

        Must be called from within a running event loop.
        """
        if not self.scheduler:
            self.initialize()

        if self.is_running:
            logger.warning("Scheduler already running")
            return

        try:
            if settings.RATE_LIMIT_ENABLED:
                self.scheduler.add_job(
                    sweep_rate_limiter_job,
                    trigger=IntervalTrigger(
                        seconds=settings.RATE_LIMIT_SWEEP_INTERVAL_SECONDS,
                        timezone="UTC"
                    ),
                    id=RATE_LIMIT_SWEEP_JOB_ID,
                    name="Sweep Rate Limiter",
                    replace_existing=True
                )
                self.jobs.append({
                    "id": RATE_LIMIT_SWEEP_JOB_ID,
                    "name": "Sweep Rate Limiter",
                    "interval": f"{settings.RATE_LIMIT_SWEEP_INTERVAL_SECONDS} seconds",
                    "function": "sweep_rate_limiter_job"
                })

            self.scheduler.start()
            self.is_running = True
            logger.info(f"Scheduler started with {len(self.jobs)} jobs")
        except Exception as e:
            logger.error(f"Error starting scheduler: {e}", exc_info=True)
            self.is_running = False
            raise

    def shutdown(self) -> None:
        """Shutdown the scheduler gracefully."""
        if not self.scheduler or not self.is_running:
            logger.warning("Scheduler not running, nothing to shut down")
            return

        self.scheduler.shutdown(wait=True)
        self.is_running = False
        self.scheduler = None
        self.jobs = []
        logger.info("Scheduler shut down successfully")

    def get_status(self) -> Dict[str, Any]:
        """
        Get the current status of the scheduler.

        Returns:
            Dict with information about the scheduler status and jobs
        """
        job_details = []
        if self.scheduler and self.is_running:
            for job in self.scheduler.get_jobs():
                job_details.append({
                    "job_id": job.id,
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None
                })

        return {
            "running": self.is_running,
            "jobs": self.jobs,
            "scheduler_jobs_status": job_details
        }


# Create global instance of the scheduler service
scheduler_service = SchedulerService()
