"""
Contracts Layer

Immutable data types shared by every layer. Layers import from here,
never from each other's implementation modules.
"""

from .base import Error, ErrorCode, Result, clamp, clamp01, utc_now_iso
from .lens import (
    Lens, EngineerCategory, CeremonyCategory, StoryCategory,
    LensPerspective, SynthesisResult, category_names, find_lens
)
from .ledger import (
    NarrativePhase, NarrativeFunction, NarrativePosition, Beat, GrowthPoint,
    CharacterState, ThematicThread, RoutingDecision, NarrativeLedger,
    find_function
)
from .coherence import (
    GapType, GapSeverity, RoutingTarget, ComponentStatus, ComponentScore,
    Gap, CoherenceScore, TrinityAssessment, CoherenceResult
)
from .events import (
    EventKind, Commit, PushEvent, IssueEvent, PullRequestEvent, CommentEvent,
    TextEvent, EventEnvelope, AuditEventType, AuditLogEntry
)

__all__ = [
    'Error', 'ErrorCode', 'Result', 'clamp', 'clamp01', 'utc_now_iso',
    'Lens', 'EngineerCategory', 'CeremonyCategory', 'StoryCategory',
    'LensPerspective', 'SynthesisResult', 'category_names', 'find_lens',
    'NarrativePhase', 'NarrativeFunction', 'NarrativePosition', 'Beat',
    'GrowthPoint', 'CharacterState', 'ThematicThread', 'RoutingDecision',
    'NarrativeLedger', 'find_function',
    'GapType', 'GapSeverity', 'RoutingTarget', 'ComponentStatus',
    'ComponentScore', 'Gap', 'CoherenceScore', 'TrinityAssessment',
    'CoherenceResult',
    'EventKind', 'Commit', 'PushEvent', 'IssueEvent', 'PullRequestEvent',
    'CommentEvent', 'TextEvent', 'EventEnvelope', 'AuditEventType',
    'AuditLogEntry',
]
