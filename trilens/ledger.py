"""
Narrative Ledger Operations

Every operation here is a pure function: it takes a NarrativeLedger and
returns a NEW ledger. Inputs are never mutated, so each pipeline stage
can be tested against the exact snapshot it was given.

BOUNDARY ENFORCEMENT:
=====================
- Beats are appended, never removed or reordered
- Out-of-order sequence values are accepted here and reported later by
  the coherence engine
- Updates that name an unknown character or theme return the ledger
  unchanged (recorded in the audit log when one is supplied)
"""

from __future__ import annotations
from dataclasses import replace
from typing import Dict, Optional, Tuple
import hashlib

from .contracts.base import clamp01, utc_now_iso
from .contracts.events import AuditEventType
from .contracts.ledger import (
    Beat, CharacterState, GrowthPoint, NarrativeFunction, NarrativeLedger,
    NarrativePhase, NarrativePosition, RoutingDecision, ThematicThread
)
from .contracts.lens import Lens, SynthesisResult
from .processor import story_function

EPISODE_BEAT_LIMIT = 12
COHERENCE_WINDOW = 20
DEFAULT_COHERENCE = 0.5

# narrative function -> (act, phase); functions not listed leave position unchanged
_POSITION_SHIFTS = {
    NarrativeFunction.INCITING_INCIDENT: (1, NarrativePhase.SETUP),
    NarrativeFunction.TURNING_POINT: (2, NarrativePhase.CONFRONTATION),
    NarrativeFunction.CRISIS: (2, NarrativePhase.CONFRONTATION),
    NarrativeFunction.CLIMAX: (3, NarrativePhase.RESOLUTION),
    NarrativeFunction.RESOLUTION: (3, NarrativePhase.RESOLUTION),
}


# =============================================================================
# DEFAULT CAST
# =============================================================================

def default_characters() -> Dict[str, CharacterState]:
    """One archetype per lens."""
    cast = (
        ("the-builder", "Mia", "The Builder", Lens.ENGINEER,
         "Analytical, focused on structural integrity"),
        ("the-keeper", "Ava8", "The Keeper", Lens.CEREMONY,
         "Reverent, guardian of relational protocols"),
        ("the-weaver", "Miette", "The Weaver", Lens.STORY_ENGINE,
         "Playful, sees narrative patterns in chaos"),
    )
    return {
        char_id: CharacterState(
            id=char_id, name=name, archetype=archetype, lens=lens,
            initial_state=state, current_state=state,
        )
        for char_id, name, archetype, lens, state in cast
    }


def default_themes() -> Dict[str, ThematicThread]:
    threads = (
        ("integration", "Integration Without Extraction",
         "The tension between connecting systems and respecting their autonomy"),
        ("collaboration", "Cross-Lens Collaboration",
         "Three perspectives learning to work together while maintaining distinction"),
        ("coherence", "Narrative Coherence",
         "The gap between disconnected events and meaningful story"),
    )
    return {
        theme_id: ThematicThread(id=theme_id, name=name, description=description)
        for theme_id, name, description in threads
    }


# =============================================================================
# LIFECYCLE
# =============================================================================

def create_ledger(
    story_id: str,
    session_id: str,
    include_default_characters: bool = True,
    include_default_themes: bool = True
) -> NarrativeLedger:
    now = utc_now_iso()
    return NarrativeLedger(
        story_id=story_id,
        session_id=session_id,
        position=NarrativePosition(),
        characters=default_characters() if include_default_characters else {},
        themes=default_themes() if include_default_themes else {},
        created_at=now,
        updated_at=now,
    )


def append_beat(ledger: NarrativeLedger, beat: Beat) -> NarrativeLedger:
    """Append a beat and re-derive the position from it."""
    act, phase = _POSITION_SHIFTS.get(
        beat.narrative_function, (ledger.position.act, ledger.position.phase)
    )
    beats = ledger.beats + (beat,)
    position = replace(
        ledger.position,
        beat_count=len(beats),
        current_beat_id=beat.id,
        lead_lens=beat.lead_lens,
        act=act,
        phase=phase,
    )
    return replace(
        ledger,
        beats=beats,
        position=position,
        episode_beats_count=ledger.episode_beats_count + 1,
        updated_at=utc_now_iso(),
    )


def append_routing_decision(ledger: NarrativeLedger, decision: RoutingDecision) -> NarrativeLedger:
    return replace(
        ledger,
        routing_decisions=ledger.routing_decisions + (decision,),
        updated_at=utc_now_iso(),
    )


def update_character_arc(
    ledger: NarrativeLedger,
    character_id: str,
    impact: float,
    description: str,
    audit=None
) -> NarrativeLedger:
    """
    Move a character along its arc (ceiling 1.0) and log a growth point.
    Unknown ids leave the ledger unchanged.
    """
    character = ledger.characters.get(character_id)
    if character is None:
        _record_unknown(audit, "character", character_id)
        return ledger

    now = utc_now_iso()
    updated = replace(
        character,
        arc_position=min(1.0, character.arc_position + impact),
        growth_points=character.growth_points + (
            GrowthPoint(timestamp=now, impact=impact, description=description),
        ),
    )
    characters = dict(ledger.characters)
    characters[character_id] = updated
    return replace(ledger, characters=characters, updated_at=now)


def update_theme_strength(
    ledger: NarrativeLedger,
    theme_id: str,
    delta: float,
    audit=None
) -> NarrativeLedger:
    """Shift a theme's strength, clamped into [0, 1]. Unknown ids are a no-op."""
    theme = ledger.themes.get(theme_id)
    if theme is None:
        _record_unknown(audit, "theme", theme_id)
        return ledger

    themes = dict(ledger.themes)
    themes[theme_id] = replace(theme, strength=clamp01(theme.strength + delta))
    return replace(ledger, themes=themes, updated_at=utc_now_iso())


def recent_beats(ledger: NarrativeLedger, n: int = 5) -> Tuple[Beat, ...]:
    """Last ``n`` beats, oldest of the window first."""
    if n <= 0:
        return ()
    return ledger.beats[-n:]


def should_start_new_episode(ledger: NarrativeLedger) -> bool:
    if ledger.episode_beats_count >= EPISODE_BEAT_LIMIT:
        return True
    return bool(ledger.beats) and ledger.beats[-1].narrative_function == NarrativeFunction.RESOLUTION


def start_new_episode(ledger: NarrativeLedger, episode_id: str) -> NarrativeLedger:
    return replace(
        ledger,
        current_episode_id=episode_id,
        episode_beats_count=0,
        updated_at=utc_now_iso(),
    )


def rolling_coherence(ledger: NarrativeLedger) -> float:
    """Mean synthesis coherence over the last 20 routing decisions (0.5 if none)."""
    window = ledger.routing_decisions[-COHERENCE_WINDOW:]
    if not window:
        return DEFAULT_COHERENCE
    return sum(d.analysis.coherence for d in window) / len(window)


def refresh_coherence(ledger: NarrativeLedger) -> NarrativeLedger:
    """Ledger with ``overall_coherence`` set to the rolling value."""
    return replace(ledger, overall_coherence=rolling_coherence(ledger))


# =============================================================================
# FACTORIES
# =============================================================================

def beat_from_analysis(
    event_id: str,
    content: str,
    analysis: SynthesisResult,
    sequence: int
) -> Beat:
    """Webhook beat with id ``beat_{event_id}``."""
    act = analysis.story_engine.context.get("act")
    if not isinstance(act, int) or act not in (1, 2, 3):
        act = 2
    return Beat(
        id=f"beat_{event_id}",
        sequence=sequence,
        content=content,
        narrative_function=story_function(analysis.story_engine.category),
        act=act,
        lead_lens=analysis.lead_lens,
        source="webhook",
        source_event_id=event_id,
        analysis=analysis,
    )


def create_routing_decision(
    backend: str,
    flow: str,
    analysis: SynthesisResult,
    position: NarrativePosition,
    score: float,
    method: str = "narrative",
    success: bool = True,
    result_summary: str = "",
    latency_ms: float = 0.0,
    decision_id: Optional[str] = None
) -> RoutingDecision:
    timestamp = utc_now_iso()
    if decision_id is None:
        decision_id = "route_" + hashlib.sha256(
            f"{backend}|{flow}|{timestamp}|{analysis.timestamp}".encode()
        ).hexdigest()[:12]
    return RoutingDecision(
        id=decision_id,
        backend=backend,
        flow=flow,
        analysis=analysis,
        position=position,
        score=score,
        method=method,
        success=success,
        result_summary=result_summary,
        latency_ms=latency_ms,
        timestamp=timestamp,
    )


def _record_unknown(audit, entity: str, entity_id: str) -> None:
    if audit is not None:
        audit.record(
            AuditEventType.LEDGER, "ledger", f"unknown_{entity}",
            entity_id=entity_id
        )
