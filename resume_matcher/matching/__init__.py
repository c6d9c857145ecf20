"""Multi-factor matching of resumes against job alerts."""

from .engine import MatchingEngine
from .factors import extract_experience_years
from .models import MatchRequest, MatchResult, MatchValidationError
from .utils import build_notification_payload, build_rationale_dict

__all__ = [
    "MatchingEngine",
    "MatchRequest",
    "MatchResult",
    "MatchValidationError",
    "extract_experience_years",
    "build_notification_payload",
    "build_rationale_dict",
]
