"""Periodic execution of the dispatch cycle."""

from .service import DISPATCH_JOB_ID, SchedulerService

__all__ = ["SchedulerService", "DISPATCH_JOB_ID"]
