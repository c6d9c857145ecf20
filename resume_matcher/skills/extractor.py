"""Skill extraction from free text against a ``SkillRegistry``."""

from typing import FrozenSet, Optional

from resume_matcher.logging import get_logger

from .registry import SkillRegistry, tokenize

logger = get_logger(__name__, component="skills")

SkillSet = FrozenSet[str]


class SkillExtractor:
    """Finds registry skills mentioned in resume or job-requirement text.

    Text is split into normalized tokens. A skill is present when its
    normalized name equals one token, or equals the concatenation of
    consecutive tokens so that "Spring Boot", "Node.js" and "CI/CD" are found
    as written. Whole-token comparison keeps "Java" from matching inside
    "JavaScript".
    """

    def __init__(self, registry: SkillRegistry):
        self.registry = registry

    def extract(self, text: Optional[str]) -> SkillSet:
        """Return the canonical names of every registry skill found in ``text``.

        Null or empty text yields an empty set. Unknown technologies are never
        returned.
        """
        tokens = tokenize(text)
        if not tokens:
            return frozenset()

        known = self.registry.tokens
        span = self.registry.max_span
        found = set()

        for start in range(len(tokens)):
            candidate = ""
            for piece in tokens[start : start + span]:
                candidate += piece
                skill = known.get(candidate)
                if skill is not None:
                    found.add(skill.name)

        logger.debug(
            f"Extracted {len(found)} skills from {len(text)} characters",
            extra={"event": "skills.extracted", "skill_count": len(found)},
        )
        return frozenset(found)

    def known_skills(self) -> FrozenSet[str]:
        return self.registry.names()

    def skill_count(self) -> int:
        return len(self.registry)

    def category_of(self, skill_name: str) -> Optional[str]:
        return self.registry.category_of(skill_name)
