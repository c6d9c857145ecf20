"""Skill registry: the closed-world list of recognised skills.

A ``SkillRegistry`` is built once (normally by ``load_registry`` at startup)
and passed explicitly to the extractor. It is immutable after construction,
so a single instance can be shared by any number of threads.
"""

import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from resume_matcher.logging import get_logger

logger = get_logger(__name__, component="skills")

DEFAULT_SKILLS_FILE = Path(__file__).with_name("skills.yaml")
DEFAULT_CATEGORY = "Uncategorized"

# Symbols that carry meaning in skill names ("C++", "C#") are spelled out
# before stripping, so they do not collapse into "c".
_SYMBOL_WORDS = (("+", "plus"), ("#", "sharp"))
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


class SkillRegistryError(Exception):
    """Raised when a skill registry source cannot be read or parsed."""


def _spell_symbols(text: str) -> str:
    lowered = text.lower()
    for symbol, word in _SYMBOL_WORDS:
        lowered = lowered.replace(symbol, word)
    return lowered


def normalize_token(token: Optional[str]) -> str:
    """Normalize a skill name for lookup: lowercase, alphanumeric only.

    Examples:
        >>> normalize_token("Node.js")
        'nodejs'
        >>> normalize_token("C++")
        'cplusplus'
    """
    if not token:
        return ""
    return _NON_ALNUM.sub("", _spell_symbols(token))


def tokenize(text: Optional[str]) -> List[str]:
    """Split text into normalized tokens on every non-alphanumeric run.

    Uses the same symbol spelling as ``normalize_token`` so that joining
    consecutive tokens reproduces a multi-word skill's normalized form.
    """
    if not text:
        return []
    return [piece for piece in _NON_ALNUM.split(_spell_symbols(text)) if piece]


class SkillToken(BaseModel):
    """A recognised skill and its category."""

    name: str = Field(..., min_length=1, description="Canonical display name")
    category: str = Field(DEFAULT_CATEGORY, description="Category label, e.g. 'language'")

    @field_validator("name", "category")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Field cannot be empty or whitespace-only")
        return stripped

    @property
    def normalized(self) -> str:
        return normalize_token(self.name)

    model_config = {"frozen": True}


class _SkillFile(BaseModel):
    skills: List[SkillToken] = Field(default_factory=list)


BUILTIN_SKILLS: Dict[str, List[str]] = {
    "language": [
        "Java", "Python", "JavaScript", "TypeScript", "C++", "C#", "Go", "Rust",
        "PHP", "Ruby", "Kotlin", "Scala", "SQL", "HTML", "CSS",
    ],
    "framework": [
        "Spring", "Spring Boot", "Hibernate", "Django", "Flask", "FastAPI",
        "React", "Angular", "Vue", "Node.js", "Express",
    ],
    "database": ["MongoDB", "PostgreSQL", "MySQL", "Redis", "Elasticsearch"],
    "cloud": ["Docker", "Kubernetes", "AWS", "Azure", "GCP"],
    "tool": [
        "Git", "GitHub", "GitLab", "Maven", "Gradle", "Jenkins", "CI/CD",
        "JUnit", "Mockito", "Jest", "Pytest",
    ],
    "concept": [
        "REST", "GraphQL", "JSON", "XML", "Microservices", "OOP",
        "Design Patterns", "SOLID", "TDD", "Agile", "Scrum", "Linux",
    ],
}


class SkillRegistry:
    """Read-only mapping from normalized token to ``SkillToken``.

    When two skills normalize to the same token the first one wins.
    """

    def __init__(self, skills: Iterable[SkillToken], source: str = "inline"):
        by_token: Dict[str, SkillToken] = {}
        longest = 1

        for skill in skills:
            token = skill.normalized
            if not token:
                logger.warning(
                    f"Skipping skill with no alphanumeric characters: {skill.name!r}",
                    extra={"event": "skills.registry.skipped", "skill": skill.name},
                )
                continue
            existing = by_token.get(token)
            if existing is not None:
                if existing.name != skill.name:
                    logger.warning(
                        f"Skill {skill.name!r} collides with {existing.name!r}; keeping the first",
                        extra={"event": "skills.registry.collision", "token": token},
                    )
                continue
            by_token[token] = skill
            longest = max(longest, len(tokenize(skill.name)))

        self._by_token: Mapping[str, SkillToken] = MappingProxyType(by_token)
        self._by_name: Mapping[str, SkillToken] = MappingProxyType(
            {skill.name: skill for skill in by_token.values()}
        )
        self._max_span = longest
        self.source = source

    @classmethod
    def builtin(cls) -> "SkillRegistry":
        """Registry built from the hard-coded fallback list."""
        return cls(
            (
                SkillToken(name=name, category=category)
                for category, names in BUILTIN_SKILLS.items()
                for name in names
            ),
            source="builtin",
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "SkillRegistry":
        """Load a registry from a YAML (or JSON) file.

        Accepted shapes: ``{"skills": [{"name": ..., "category": ...}, ...]}``
        or a bare list of such entries; plain strings are accepted as names.

        Raises:
            SkillRegistryError: If the file is missing, malformed or empty
        """
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = yaml.safe_load(f)
        except OSError as e:
            raise SkillRegistryError(f"Cannot read skills file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise SkillRegistryError(f"Cannot parse skills file {path}: {e}") from e

        try:
            parsed = _SkillFile.model_validate(_coerce_entries(raw))
        except ValidationError as e:
            raise SkillRegistryError(f"Invalid skills file {path}: {e}") from e

        registry = cls(parsed.skills, source=str(path))
        if len(registry) == 0:
            raise SkillRegistryError(f"Skills file {path} contains no skills")
        return registry

    def get(self, token: Optional[str]) -> Optional[SkillToken]:
        """Look up a skill by any spelling (normalized before lookup)."""
        return self._by_token.get(normalize_token(token))

    def display_name(self, token: Optional[str]) -> Optional[str]:
        skill = self.get(token)
        return skill.name if skill else None

    def category_of(self, name: str) -> Optional[str]:
        skill = self._by_name.get(name)
        return skill.category if skill else None

    def names(self) -> FrozenSet[str]:
        return frozenset(self._by_name)

    def by_category(self) -> Dict[str, FrozenSet[str]]:
        grouped: Dict[str, set] = {}
        for skill in self._by_name.values():
            grouped.setdefault(skill.category, set()).add(skill.name)
        return {category: frozenset(names) for category, names in grouped.items()}

    @property
    def tokens(self) -> Mapping[str, SkillToken]:
        return self._by_token

    @property
    def max_span(self) -> int:
        """Largest number of text tokens a single skill name spans."""
        return self._max_span

    def __len__(self) -> int:
        return len(self._by_token)

    def __contains__(self, token: object) -> bool:
        return isinstance(token, str) and normalize_token(token) in self._by_token

    def __repr__(self) -> str:
        return f"SkillRegistry(source={self.source!r}, skills={len(self)})"


def _coerce_entries(raw: Any) -> Dict[str, Any]:
    if raw is None:
        return {"skills": []}
    if isinstance(raw, list):
        raw = {"skills": raw}
    if not isinstance(raw, dict):
        raise SkillRegistryError(f"Expected a mapping or list, got {type(raw).__name__}")
    entries = raw.get("skills") or []
    if not isinstance(entries, list):
        raise SkillRegistryError("'skills' must be a list")
    return {
        "skills": [{"name": entry} if isinstance(entry, str) else entry for entry in entries]
    }


def load_registry(source: Optional[Union[str, Path]] = None) -> SkillRegistry:
    """Build the process-wide registry, falling back to the built-in list.

    Args:
        source: Skills file to load; the packaged skills.yaml when None

    Returns:
        Registry from the file, or ``SkillRegistry.builtin()`` when the file
        cannot be used
    """
    path = Path(source) if source is not None else DEFAULT_SKILLS_FILE
    try:
        registry = SkillRegistry.from_file(path)
    except SkillRegistryError as e:
        logger.warning(
            f"Failed to load skills from {path}, using built-in skill set: {e}",
            extra={"event": "skills.registry.fallback", "skills_file": str(path)},
        )
        registry = SkillRegistry.builtin()

    logger.info(
        f"Skill registry loaded with {len(registry)} skills",
        extra={
            "event": "skills.registry.loaded",
            "skill_count": len(registry),
            "registry_source": registry.source,
        },
    )
    return registry
