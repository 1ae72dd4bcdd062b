"""
Lens Contracts

The three interpretive lenses and the closed category set each lens can
produce. A LensPerspective is one lens's reading of one event; a
SynthesisResult combines all three.

CLOSED WORLD:
=============
Categories are Enums, not free strings. Iteration order of each Enum is
the tie-break order used by the keyword scorer, so member order is
behavior, not cosmetics. Do not reorder members.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Type

from .base import utc_now_iso


class Lens(Enum):
    """
    The three interpretive viewpoints.

    Declaration order doubles as the synthesizer's confidence tie-break:
    on equal confidence the earlier lens leads.
    """
    ENGINEER = "engineer"          # Mia - The Builder
    CEREMONY = "ceremony"          # Ava8 - The Keeper
    STORY_ENGINE = "story_engine"  # Miette - The Weaver


class EngineerCategory(Enum):
    FEATURE_IMPLEMENTATION = "feature_implementation"
    BUG_FIX = "bug_fix"
    REFACTOR = "refactor"
    DOCUMENTATION = "documentation"
    TESTING = "testing"
    DEPENDENCY = "dependency"
    CONFIGURATION = "configuration"
    PERFORMANCE = "performance"
    SECURITY = "security"
    CI_CD = "ci_cd"
    MAINTENANCE = "maintenance"  # no-match default


class CeremonyCategory(Enum):
    CO_CREATION = "co_creation"
    GRATITUDE_EXPRESSION = "gratitude_expression"
    WITNESSING = "witnessing"
    SACRED_PAUSE = "sacred_pause"
    RELATIONSHIP_BUILDING = "relationship_building"
    HEALING = "healing"
    CELEBRATION = "celebration"
    OFFERING = "offering"
    INDIVIDUAL_OFFERING = "individual_offering"  # no-match default


class StoryCategory(Enum):
    INCITING_INCIDENT = "inciting_incident"
    RISING_ACTION = "rising_action"  # no-match default
    TURNING_POINT = "turning_point"
    COMPLICATION = "complication"
    CRISIS = "crisis"
    CLIMAX = "climax"
    RESOLUTION = "resolution"
    DENOUEMENT = "denouement"


CATEGORY_ENUMS: Dict[Lens, Type[Enum]] = {
    Lens.ENGINEER: EngineerCategory,
    Lens.CEREMONY: CeremonyCategory,
    Lens.STORY_ENGINE: StoryCategory,
}


def category_names(lens: Lens) -> Tuple[str, ...]:
    """All category values a lens may produce, in tie-break order."""
    return tuple(member.value for member in CATEGORY_ENUMS[lens])


@dataclass(frozen=True)
class LensPerspective:
    """
    Single lens's interpretation of an event.

    INVARIANT: confidence lies in [min(base, fallback constant), 0.95].
    Context values are JSON-safe (str, int, float, bool, list of str).
    """
    lens: Lens
    category: str
    confidence: float
    suggested_actions: Tuple[str, ...] = field(default_factory=tuple)
    context: Dict[str, Any] = field(default_factory=dict)

    def context_value(self, key: str, default: Any = None) -> Any:
        return self.context.get(key, default)


@dataclass(frozen=True)
class SynthesisResult:
    """
    Complete three-lens analysis of one event.
    Created once per event; read-only afterward.
    """
    engineer: LensPerspective
    ceremony: LensPerspective
    story_engine: LensPerspective
    lead_lens: Lens
    coherence: float
    timestamp: str = field(default_factory=utc_now_iso)

    def perspective(self, lens: Lens) -> LensPerspective:
        if lens is Lens.ENGINEER:
            return self.engineer
        if lens is Lens.CEREMONY:
            return self.ceremony
        return self.story_engine

    @property
    def perspectives(self) -> Dict[Lens, LensPerspective]:
        return {
            Lens.ENGINEER: self.engineer,
            Lens.CEREMONY: self.ceremony,
            Lens.STORY_ENGINE: self.story_engine,
        }


def find_lens(value: Optional[str], default: Lens = Lens.STORY_ENGINE) -> Lens:
    """Parse a lens name, falling back to ``default`` for unknown values."""
    for lens in Lens:
        if lens.value == value:
            return lens
    return default
