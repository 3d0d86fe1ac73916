"""Scheduler module for the link shortener.

This module provides scheduled task functionality using APScheduler.
"""

from link_shortener.scheduler.scheduler import SchedulerService, scheduler_service, sweep_rate_limiter_job

__all__ = ["SchedulerService", "scheduler_service", "sweep_rate_limiter_job"]
