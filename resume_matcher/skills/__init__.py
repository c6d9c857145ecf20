"""Skill registry, extraction and set matching."""

from .extractor import SkillExtractor, SkillSet
from .matcher import SkillMatcher, SkillMatchResult
from .registry import (
    SkillRegistry,
    SkillRegistryError,
    SkillToken,
    load_registry,
    normalize_token,
)

__all__ = [
    "SkillRegistry",
    "SkillRegistryError",
    "SkillToken",
    "SkillSet",
    "SkillExtractor",
    "SkillMatcher",
    "SkillMatchResult",
    "load_registry",
    "normalize_token",
]
