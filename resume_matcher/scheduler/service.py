"""Scheduler service that runs the dispatch cycle at a fixed interval."""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from resume_matcher.logging import get_logger

logger = get_logger(__name__, component="scheduler")

DISPATCH_JOB_ID = "alert-dispatch"


class SchedulerService:
    """
    Wraps APScheduler's BackgroundScheduler around the dispatch cycle.

    Jobs run on a worker thread so the main thread stays free for signal
    handling. ``max_instances=1`` and ``coalesce=True`` keep a slow cycle from
    overlapping the next one or piling up missed runs.
    """

    def __init__(
        self,
        dispatch_callable: Callable[[], object],
        interval_seconds: int,
        shutdown_event: Optional[threading.Event] = None,
    ):
        """
        Initialize the scheduler service.

        Args:
            dispatch_callable: Function to call on each run (e.g. cycle.run_once)
            interval_seconds: Interval between runs in seconds
            shutdown_event: Optional event to set on shutdown for coordination
        """
        self.dispatch_callable = dispatch_callable
        self.interval_seconds = interval_seconds
        self.shutdown_event = shutdown_event

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def start(self) -> None:
        """
        Register the dispatch job and start the scheduler.

        The first cycle runs immediately; later cycles follow the interval.
        Calling start on a running scheduler does nothing.
        """
        if self.scheduler.running:
            logger.warning(
                "Scheduler already running",
                extra={"event": "scheduler.already_running"},
            )
            return

        trigger = IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc)

        next_run = datetime.now(timezone.utc)
        self.scheduler.add_job(
            func=self.dispatch_callable,
            trigger=trigger,
            id=DISPATCH_JOB_ID,
            name="Alert dispatch cycle",
            replace_existing=True,
            next_run_time=next_run,
        )

        self.scheduler.start()

        logger.info(
            f"Scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat(),
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """
        Shut the scheduler down.

        Args:
            wait: If True, wait for a running cycle to finish before returning
        """
        logger.info(
            "Shutting down scheduler",
            extra={"event": "scheduler.stopping", "wait_for_jobs": wait},
        )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        if self.shutdown_event:
            self.shutdown_event.set()

        logger.info("Scheduler shutdown complete", extra={"event": "scheduler.stopped"})

    def trigger_now(self) -> None:
        """Run one dispatch cycle synchronously on the calling thread."""
        logger.info("Triggering immediate dispatch run", extra={"event": "scheduler.trigger_now"})
        self.dispatch_callable()

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        """Next scheduled run time, or None if the job is not registered."""
        job = self.scheduler.get_job(DISPATCH_JOB_ID)
        return job.next_run_time if job else None
