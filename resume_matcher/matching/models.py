"""Data models for the matching engine.

This module defines the input and output records of a single resume-to-alert
evaluation and the validation error raised for structurally invalid input.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Optional

from resume_matcher.utils.timestamps import utc_now


class MatchValidationError(ValueError):
    """Raised when a MatchRequest is structurally invalid.

    No partial MatchResult is produced when this is raised.
    """


@dataclass(frozen=True)
class MatchRequest:
    """Input for one match evaluation.

    Every optional signal may be left as None; the engine maps a missing
    signal to a neutral factor score.

    Attributes:
        resume_text: Free text of the candidate's resume
        required_skills_text: Free text listing the opening's required skills
        salary_min: Lower bound of the opening's salary range
        salary_max: Upper bound of the opening's salary range
        expected_salary: Candidate's salary signal compared against the range
        experience_years: Candidate's years of experience; parsed from
            ``resume_text`` when None
        candidate_location: Where the candidate is
        required_location: Where the opening is
        match_threshold: Score (0-100) at or above which the result is a match

    Raises:
        MatchValidationError: On a threshold outside [0, 100], a negative
            salary bound, ``salary_min > salary_max``, or a negative expected
            salary or experience value
    """

    resume_text: Optional[str] = None
    required_skills_text: Optional[str] = None
    salary_min: Optional[float] = None
    salary_max: Optional[float] = None
    expected_salary: Optional[float] = None
    experience_years: Optional[float] = None
    candidate_location: Optional[str] = None
    required_location: Optional[str] = None
    match_threshold: float = 60.0

    def __post_init__(self):
        """Reject structurally invalid input before any scoring happens."""
        if self.match_threshold is None or not 0 <= self.match_threshold <= 100:
            raise MatchValidationError(
                f"match_threshold must be between 0 and 100, got: {self.match_threshold}"
            )

        for name in ("salary_min", "salary_max", "expected_salary", "experience_years"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise MatchValidationError(f"{name} cannot be negative, got: {value}")

        if (
            self.salary_min is not None
            and self.salary_max is not None
            and self.salary_min > self.salary_max
        ):
            raise MatchValidationError(
                f"salary_min ({self.salary_min}) cannot exceed salary_max ({self.salary_max})"
            )


@dataclass(frozen=True)
class MatchResult:
    """Result of evaluating a resume against one opening.

    Attributes:
        score: Weighted overall score in [0, 100]
        skill_score: Share of required skills found in the resume
        salary_score: Salary range compatibility
        experience_score: Experience band fit
        location_score: Location compatibility
        matched_skills: Required skills the resume has
        missing_skills: Required skills the resume lacks
        matched: True iff ``score >= threshold``
        threshold: Threshold the verdict was made against
        evaluated_at: When the evaluation ran (UTC)
    """

    score: float
    skill_score: float
    salary_score: float
    experience_score: float
    location_score: float
    matched_skills: FrozenSet[str] = frozenset()
    missing_skills: FrozenSet[str] = frozenset()
    matched: bool = False
    threshold: float = 60.0
    evaluated_at: datetime = field(default_factory=utc_now)

    @property
    def match_quality(self) -> str:
        """Return a description of match quality.

        Returns:
            "perfect" if matched with no missing skills,
            "partial" if matched with some skills missing,
            "no-match" otherwise
        """
        if not self.matched:
            return "no-match"
        if self.missing_skills:
            return "partial"
        return "perfect"
