"""Data models for dispatch cycle tracking and reporting."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class AlertOutcome:
    """
    What happened to one due alert within a dispatch cycle.

    Attributes:
        alert_id: Alert that was processed
        user_id: Owner of the alert
        status: "sent", "not_matched", "suppressed", "send_failed" or "error"
        score: Overall match score, when the alert was scored
        reason: Why the alert was suppressed or failed
    """

    alert_id: str
    user_id: str
    status: str
    score: Optional[float] = None
    reason: Optional[str] = None

    @property
    def sent(self) -> bool:
        return self.status == "sent"


@dataclass
class DispatchRunResult:
    """
    Aggregate results from one dispatch cycle.

    Attributes:
        run_started_at: UTC timestamp when the run began
        run_finished_at: UTC timestamp when the run completed
        total_duration_seconds: Total time for the entire run
        active_alerts: Active alerts considered
        due_alerts: Active alerts whose cadence interval had elapsed
        matched_alerts: Due alerts whose score met their threshold
        notifications_sent: Match notifications the notifier accepted
        digests_sent: Digests the notifier accepted
        total_errors: Alerts or users that failed with an error
        outcomes: Per-alert outcomes
        had_errors: Whether any alert or digest failed
        skipped: Whether the run was skipped (previous run still in progress)
    """

    run_started_at: datetime
    run_finished_at: datetime
    total_duration_seconds: float = 0.0
    active_alerts: int = 0
    due_alerts: int = 0
    matched_alerts: int = 0
    notifications_sent: int = 0
    digests_sent: int = 0
    total_errors: int = 0
    outcomes: List[AlertOutcome] = field(default_factory=list)
    had_errors: bool = False
    skipped: bool = False

    def __post_init__(self):
        """Compute duration if not set."""
        if self.total_duration_seconds == 0.0:
            delta = self.run_finished_at - self.run_started_at
            self.total_duration_seconds = delta.total_seconds()
