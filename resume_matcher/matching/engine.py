"""Multi-factor matching engine for scoring resumes against job alerts.

This module implements the scoring logic that:
1. Extracts skills from the resume and from the opening's requirements
2. Scores skill coverage, salary, experience, and location separately
3. Combines the factors with fixed weights into one 0-100 score
4. Decides the matched verdict against the request's threshold
"""

import logging
from typing import Optional

from resume_matcher.domain.models import AlertCadenceState, UserProfile
from resume_matcher.logging import get_logger
from resume_matcher.skills import SkillExtractor, SkillMatcher
from resume_matcher.utils.timestamps import utc_now

from . import factors
from .models import MatchRequest, MatchResult

logger = get_logger(__name__, component="matching")


class MatchingEngine:
    """Scores a resume against an opening.

    Responsibilities:
    - Extract resume and required skill sets through the shared extractor
    - Compute the four factor scores
    - Produce an immutable MatchResult with the matched verdict

    The engine holds no mutable state, so one instance can serve any number
    of threads.
    """

    def __init__(
        self,
        extractor: SkillExtractor,
        matcher: Optional[SkillMatcher] = None,
        logger_instance: Optional[logging.Logger] = None,
    ):
        """Initialize MatchingEngine.

        Args:
            extractor: SkillExtractor bound to the process-wide registry
            matcher: SkillMatcher (a default one when omitted)
            logger_instance: Optional logger instance (defaults to module logger)
        """
        self.extractor = extractor
        self.matcher = matcher or SkillMatcher()
        self.logger = logger_instance or logger

    def compute_match(self, request: MatchRequest) -> MatchResult:
        """Score one request.

        Algorithm:
        1. Extract skills from resume and required-skill text
        2. Skill score is the matcher's coverage percentage
        3. Salary, experience and location scores from their signals
        4. Weighted sum, then compare with the threshold

        Args:
            request: Validated MatchRequest

        Returns:
            MatchResult with factor scores and skill breakdown
        """
        # Step 1-2: Skill coverage
        resume_skills = self.extractor.extract(request.resume_text)
        required_skills = self.extractor.extract(request.required_skills_text)
        skill_match = self.matcher.match(resume_skills, required_skills)
        skill_score = skill_match.match_percentage

        # Step 3: Remaining factors
        salary_score = factors.salary_score(
            request.salary_min, request.salary_max, request.expected_salary
        )

        years = request.experience_years
        if years is None:
            years = factors.extract_experience_years(request.resume_text)
        experience_score = factors.experience_score(years)

        location_score = factors.location_score(
            request.candidate_location, request.required_location
        )

        # Step 4: Verdict
        score = factors.weighted_score(skill_score, salary_score, experience_score, location_score)
        matched = score >= request.match_threshold

        result = MatchResult(
            score=score,
            skill_score=skill_score,
            salary_score=salary_score,
            experience_score=experience_score,
            location_score=location_score,
            matched_skills=skill_match.matched_skills,
            missing_skills=skill_match.missing_skills,
            matched=matched,
            threshold=request.match_threshold,
            evaluated_at=utc_now(),
        )

        self.logger.debug(
            f"Match computed: score={score:.1f} threshold={request.match_threshold}",
            extra={
                "event": "matching.computed",
                "score": round(score, 2),
                "matched": matched,
                "skills_matched": len(skill_match.matched_skills),
                "skills_required": len(required_skills),
            },
        )
        return result

    def match_alert(self, profile: UserProfile, alert: AlertCadenceState) -> MatchResult:
        """Score a user's resume against one of their alerts.

        Args:
            profile: Candidate data for the alert's owner
            alert: The alert describing the opening

        Returns:
            MatchResult against the alert's own threshold

        Raises:
            MatchValidationError: If the combined signals are invalid
        """
        request = MatchRequest(
            resume_text=profile.resume_text,
            required_skills_text=alert.required_skills,
            salary_min=alert.salary_min,
            salary_max=alert.salary_max,
            expected_salary=profile.expected_salary,
            experience_years=profile.experience_years,
            candidate_location=profile.location,
            required_location=alert.location,
            match_threshold=alert.match_threshold,
        )
        result = self.compute_match(request)

        if result.matched:
            self.logger.info(
                f"Alert matched: {alert.alert_id}",
                extra={
                    "event": "matching.alert.matched",
                    "alert_id": alert.alert_id,
                    "user_id": profile.user_id,
                    "score": round(result.score, 2),
                },
            )
        return result
