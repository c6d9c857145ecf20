"""Set comparison between resume skills and required skills."""

from dataclasses import dataclass
from typing import AbstractSet, FrozenSet, Optional


@dataclass(frozen=True)
class SkillMatchResult:
    """Outcome of comparing two skill sets.

    Attributes:
        matched_skills: Required skills the resume has
        missing_skills: Required skills the resume lacks
        match_percentage: 100 * |matched| / |required|, or 0 when nothing is
            required or the resume skills are unknown
    """

    matched_skills: FrozenSet[str]
    missing_skills: FrozenSet[str]
    match_percentage: float


class SkillMatcher:
    """Exact, case-sensitive set matcher.

    Case folding is the extractor's job; both inputs are expected to hold
    canonical skill names already.
    """

    def match(
        self,
        resume_skills: Optional[AbstractSet[str]],
        required_skills: Optional[AbstractSet[str]],
    ) -> SkillMatchResult:
        required = frozenset(required_skills or ())

        if resume_skills is None:
            return SkillMatchResult(frozenset(), required, 0.0)

        matched = required & frozenset(resume_skills)
        missing = required - matched

        # An empty requirement list scores 0 rather than 100: there is nothing to match against
        percentage = 100.0 * len(matched) / len(required) if required else 0.0

        return SkillMatchResult(matched, missing, percentage)
