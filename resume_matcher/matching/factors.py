"""Individual scoring factors for the matching engine.

Each factor maps a possibly-missing signal to a score in [0, 100]. A missing
signal never scores zero: it resolves to the factor's neutral value so that
no single absent field can sink the overall score.
"""

import re
from typing import Optional

# Overall weighting: skills 50%, salary 25%, experience 15%, location 10%
SKILL_WEIGHT = 0.50
SALARY_WEIGHT = 0.25
EXPERIENCE_WEIGHT = 0.15
LOCATION_WEIGHT = 0.10

NEUTRAL_SALARY_SCORE = 75.0
SALARY_FLOOR = 50.0
SALARY_TOLERANCE = 0.10

IDEAL_EXPERIENCE_MIN = 3.0
IDEAL_EXPERIENCE_MAX = 10.0
EXPERIENCE_FLOOR = 70.0
EXPERIENCE_DECAY_PER_YEAR = 5.0
DEFAULT_EXPERIENCE_YEARS = 2.0

NEUTRAL_LOCATION_SCORE = 80.0
LOCATION_MATCH_SCORE = 100.0
LOCATION_MISMATCH_SCORE = 60.0

# "5 years", "5+ years", "5 yrs", "1 year"
_EXPERIENCE_PATTERN = re.compile(r"\b(\d{1,2})\s*\+?\s*(?:years?|yrs?)\b", re.IGNORECASE)


def _clamp(score: float) -> float:
    return max(0.0, min(100.0, score))


def salary_score(
    salary_min: Optional[float],
    salary_max: Optional[float],
    expected_salary: Optional[float],
) -> float:
    """Score the candidate's salary signal against the opening's range.

    Args:
        salary_min: Lower bound of the range
        salary_max: Upper bound of the range
        expected_salary: Candidate's salary signal

    Returns:
        75 when either bound or the signal is missing, 100 inside the range,
        otherwise a linear decay from 100 at the nearest bound to 50 at a gap
        of 10% of that bound, floored at 50
    """
    if salary_min is None or salary_max is None or expected_salary is None:
        return NEUTRAL_SALARY_SCORE

    if salary_min <= expected_salary <= salary_max:
        return 100.0

    if expected_salary < salary_min:
        nearest = salary_min
        gap = salary_min - expected_salary
    else:
        nearest = salary_max
        gap = expected_salary - salary_max

    tolerance = nearest * SALARY_TOLERANCE
    if tolerance <= 0:
        return SALARY_FLOOR

    decayed = 100.0 - (100.0 - SALARY_FLOOR) * gap / tolerance
    return _clamp(max(SALARY_FLOOR, decayed))


def extract_experience_years(text: Optional[str]) -> float:
    """Pull a years-of-experience figure out of free text.

    Takes the first "<N> years" / "<N>+ yrs" style phrase. This is a plain
    pattern match and is kept here on its own so it can be swapped for a
    real parser.

    Args:
        text: Resume text

    Returns:
        The number found, or 2 when the text has no such phrase
    """
    if not text:
        return DEFAULT_EXPERIENCE_YEARS

    found = _EXPERIENCE_PATTERN.search(text)
    if found is None:
        return DEFAULT_EXPERIENCE_YEARS
    return float(found.group(1))


def experience_score(years: Optional[float]) -> float:
    """Score years of experience against the ideal 3 to 10 year band.

    Below the band the score ramps from 50 at 0 years to 100 at 3 years.
    Above it the score loses 5 points per extra year, floored at 70.
    """
    if years is None:
        years = DEFAULT_EXPERIENCE_YEARS
    years = max(0.0, float(years))

    if IDEAL_EXPERIENCE_MIN <= years <= IDEAL_EXPERIENCE_MAX:
        return 100.0
    if years < IDEAL_EXPERIENCE_MIN:
        return _clamp(50.0 + years * 50.0 / IDEAL_EXPERIENCE_MIN)
    return _clamp(
        max(
            EXPERIENCE_FLOOR,
            100.0 - EXPERIENCE_DECAY_PER_YEAR * (years - IDEAL_EXPERIENCE_MAX),
        )
    )


def location_score(
    candidate_location: Optional[str], required_location: Optional[str]
) -> float:
    """Score location compatibility.

    Returns:
        80 if either side is missing or blank, 100 if one contains the other
        (case-insensitive), otherwise 60
    """
    candidate = (candidate_location or "").strip().lower()
    required = (required_location or "").strip().lower()

    if not candidate or not required:
        return NEUTRAL_LOCATION_SCORE
    if candidate in required or required in candidate:
        return LOCATION_MATCH_SCORE
    return LOCATION_MISMATCH_SCORE


def weighted_score(skill: float, salary: float, experience: float, location: float) -> float:
    """Combine the four factor scores with the fixed weights."""
    return _clamp(
        skill * SKILL_WEIGHT
        + salary * SALARY_WEIGHT
        + experience * EXPERIENCE_WEIGHT
        + location * LOCATION_WEIGHT
    )
