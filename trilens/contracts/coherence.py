"""
Coherence Contracts

Output types of the coherence engine: per-dimension component scores,
routed gap records and the three-persona summary.
All ephemeral - recomputed on every analysis call, never ledger state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from .base import utc_now_iso


class GapType(Enum):
    STRUCTURAL = "structural"   # missing beats, incomplete arcs
    THEMATIC = "thematic"       # promised themes underdelivered
    CHARACTER = "character"     # traits mentioned but not demonstrated
    SENSORY = "sensory"         # scenes lacking grounding detail
    CONTINUITY = "continuity"   # timeline/detail inconsistencies


class GapSeverity(Enum):
    CRITICAL = "critical"
    MODERATE = "moderate"
    MINOR = "minor"


class RoutingTarget(Enum):
    """Where a gap is routed for remediation."""
    STORYTELLER = "storyteller"  # prose refinement
    STRUCTURIST = "structurist"  # structural repair
    ARCHITECT = "architect"      # schema inconsistency
    AUTHOR = "author"            # human decision required


class ComponentStatus(Enum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"

    @staticmethod
    def from_score(score: float) -> ComponentStatus:
        if score >= 70:
            return ComponentStatus.GOOD
        if score >= 50:
            return ComponentStatus.WARNING
        return ComponentStatus.CRITICAL


@dataclass(frozen=True)
class ComponentScore:
    """Score for one coherence dimension. score is in [0, 100]."""
    score: float
    status: ComponentStatus
    issues: Tuple[str, ...] = field(default_factory=tuple)
    suggestions: Tuple[str, ...] = field(default_factory=tuple)

    @staticmethod
    def build(score: float, issues=(), suggestions=()) -> ComponentScore:
        """Clamp the score and derive status from it."""
        bounded = max(0.0, min(100.0, float(score)))
        return ComponentScore(
            score=bounded,
            status=ComponentStatus.from_score(bounded),
            issues=tuple(issues),
            suggestions=tuple(suggestions),
        )


@dataclass(frozen=True)
class Gap:
    """A detected narrative-quality defect, typed, ranked and routed."""
    id: str
    gap_type: GapType
    severity: GapSeverity
    description: str
    suggested_route: RoutingTarget
    location: Dict[str, str] = field(default_factory=dict)
    resolved: bool = False
    resolution: Optional[str] = None

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class CoherenceScore:
    """Complete coherence score for a narrative."""
    overall: float
    narrative_flow: ComponentScore
    character_consistency: ComponentScore
    pacing: ComponentScore
    theme_saturation: ComponentScore
    continuity: ComponentScore
    analyzed_at: str = field(default_factory=utc_now_iso)


@dataclass(frozen=True)
class TrinityAssessment:
    """Assessment from the three persona perspectives."""
    mia: str     # structural
    miette: str  # emotional
    ava8: str    # atmospheric
    priorities: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CoherenceResult:
    coherence_score: CoherenceScore
    gaps: Tuple[Gap, ...]
    trinity: TrinityAssessment

    @property
    def score(self) -> float:
        return self.coherence_score.overall
