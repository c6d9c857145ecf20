"""Periodic dispatch: due alerts, scoring, preference filtering and notification."""

from .models import AlertOutcome, DispatchRunResult
from .runner import DispatchCycle

__all__ = [
    "DispatchCycle",
    "DispatchRunResult",
    "AlertOutcome",
]
