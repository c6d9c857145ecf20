"""Alert eligibility and cadence tracking."""

from .cadence import (
    activate,
    deactivate,
    interval_end,
    mark_sent,
    next_due_at,
    should_process,
)

__all__ = [
    "interval_end",
    "should_process",
    "next_due_at",
    "mark_sent",
    "activate",
    "deactivate",
]
