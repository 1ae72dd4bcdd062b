"""
Narrative Ledger Contracts

The serializable aggregate shared by every stage of the pipeline:
beats, character arcs, thematic threads, routing history and the
derived narrative position.

All types are frozen. Ledger operations (trilens.ledger) return new
instances rather than mutating these in place; collection fields are
tuples, and the two id-keyed maps are replaced wholesale on update.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from .base import utc_now_iso
from .lens import Lens, SynthesisResult


class NarrativePhase(Enum):
    """Phases in the three-act structure."""
    SETUP = "setup"                   # Act 1
    CONFRONTATION = "confrontation"   # Act 2
    RESOLUTION = "resolution"         # Act 3


class NarrativeFunction(Enum):
    """Narrative functions a beat can serve."""
    INCITING_INCIDENT = "inciting_incident"
    RISING_ACTION = "rising_action"
    TURNING_POINT = "turning_point"
    COMPLICATION = "complication"
    CRISIS = "crisis"
    CLIMAX = "climax"
    RESOLUTION = "resolution"
    DENOUEMENT = "denouement"
    BEAT = "beat"  # generic


def find_function(value: Optional[str]) -> NarrativeFunction:
    """Parse a narrative function name; unknown names become the generic beat."""
    for member in NarrativeFunction:
        if member.value == value:
            return member
    return NarrativeFunction.BEAT


@dataclass(frozen=True)
class NarrativePosition:
    """Current position in the narrative journey (derived from the beat list)."""
    act: int = 1
    phase: NarrativePhase = NarrativePhase.SETUP
    current_beat_id: Optional[str] = None
    beat_count: int = 0
    character_arc_strength: float = 0.5
    thematic_resonance: float = 0.5
    emotional_tone: str = "neutral"
    lead_lens: Lens = Lens.STORY_ENGINE


@dataclass(frozen=True)
class Beat:
    """
    The atomic unit of the ledger.

    INVARIANT (checked by the coherence engine, not enforced here):
    sequence values are unique and, for a well-formed narrative,
    contiguous and ascending.
    """
    id: str
    sequence: int
    content: str
    narrative_function: NarrativeFunction
    act: int
    lead_lens: Lens = Lens.STORY_ENGINE
    emotional_tone: str = "neutral"
    thematic_tags: Tuple[str, ...] = field(default_factory=tuple)
    character_id: Optional[str] = None
    character_arc_impact: float = 0.0
    source: str = "generator"
    source_event_id: Optional[str] = None
    timestamp: str = field(default_factory=utc_now_iso)
    enrichments_applied: Tuple[str, ...] = field(default_factory=tuple)
    quality_score: float = 0.5
    analysis: Optional[SynthesisResult] = None


@dataclass(frozen=True)
class GrowthPoint:
    """One entry in a character's append-only development log."""
    timestamp: str
    impact: float
    description: str


@dataclass(frozen=True)
class CharacterState:
    """Character arc tracking. arc_position only grows, capped at 1.0."""
    id: str
    name: str
    archetype: str
    lens: Lens
    arc_position: float = 0.0
    initial_state: str = ""
    current_state: str = ""
    growth_points: Tuple[GrowthPoint, ...] = field(default_factory=tuple)
    relationships: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ThematicThread:
    """A theme tracked across the narrative. strength stays within [0, 1]."""
    id: str
    name: str
    description: str
    strength: float = 0.5
    tension_level: float = 0.5
    resolution_progress: float = 0.0
    beat_ids: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class RoutingDecision:
    """Immutable audit record of where an analysed event was routed."""
    id: str
    backend: str
    flow: str
    analysis: SynthesisResult
    position: NarrativePosition
    score: float
    method: str = "narrative"
    success: bool = True
    result_summary: str = ""
    latency_ms: float = 0.0
    timestamp: str = field(default_factory=utc_now_iso)


@dataclass(frozen=True)
class NarrativeLedger:
    """
    Aggregate root for one story + session pair.

    Lifecycle: created once (trilens.ledger.create_ledger), replaced by
    each operation in trilens.ledger, never deleted in-process.
    """
    story_id: str
    session_id: str
    position: NarrativePosition = field(default_factory=NarrativePosition)
    beats: Tuple[Beat, ...] = field(default_factory=tuple)
    characters: Dict[str, CharacterState] = field(default_factory=dict)
    themes: Dict[str, ThematicThread] = field(default_factory=dict)
    routing_decisions: Tuple[RoutingDecision, ...] = field(default_factory=tuple)
    current_episode_id: Optional[str] = None
    episode_beats_count: int = 0
    created_at: str = field(default_factory=utc_now_iso)
    updated_at: str = field(default_factory=utc_now_iso)
    overall_coherence: float = 0.5
    emotional_arc_strength: float = 0.5

    # Frozen dataclasses with dict fields cannot hash; ledgers are compared, not hashed.
    __hash__ = None  # type: ignore[assignment]
