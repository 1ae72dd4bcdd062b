"""
Ledger Serialization

Plain-JSON encoding of the ledger and everything nested in it.

RULES:
1. Field names are camelCase on the wire (``narrativeFunction``, ``leadLens``).
2. Enums travel as their .value string.
3. Timestamps stay ISO-8601 strings; they are never re-parsed.
4. Floats are written as-is (no rounding), so a round trip is lossless.
5. Tuples become lists on the way out and tuples again on the way in.
"""

from __future__ import annotations
import json
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from .contracts.coherence import CoherenceResult, ComponentScore, Gap, TrinityAssessment
from .contracts.ledger import (
    Beat, CharacterState, GrowthPoint, NarrativeLedger, NarrativePhase,
    NarrativePosition, RoutingDecision, ThematicThread, find_function
)
from .contracts.lens import LensPerspective, SynthesisResult, find_lens


class SerializationError(ValueError):
    """Stored JSON could not be turned back into ledger types."""


class TrilensEncoder(json.JSONEncoder):
    """
    Encoder for values that reach json.dumps without going through a
    ``*_to_dict`` helper first.
    """

    def default(self, obj: Any) -> Any:
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, (set, frozenset)):
            return sorted(list(obj))
        for kind, encode in _ENCODERS:
            if isinstance(obj, kind):
                return encode(obj)
        if hasattr(obj, "__dataclass_fields__"):
            return asdict(obj)
        return super().default(obj)


def dumps(obj: Any) -> str:
    return json.dumps(obj, cls=TrilensEncoder)


def _phase(value: Optional[str]) -> NarrativePhase:
    for phase in NarrativePhase:
        if phase.value == value:
            return phase
    return NarrativePhase.SETUP


# =============================================================================
# LENS RESULTS
# =============================================================================

def perspective_to_dict(perspective: LensPerspective) -> Dict[str, Any]:
    return {
        "lens": perspective.lens.value,
        "category": perspective.category,
        "confidence": perspective.confidence,
        "suggestedActions": list(perspective.suggested_actions),
        "context": dict(perspective.context),
    }


def perspective_from_dict(data: Dict[str, Any]) -> LensPerspective:
    return LensPerspective(
        lens=find_lens(data["lens"]),
        category=data["category"],
        confidence=float(data["confidence"]),
        suggested_actions=tuple(data.get("suggestedActions", ())),
        context=dict(data.get("context") or {}),
    )


def synthesis_to_dict(result: SynthesisResult) -> Dict[str, Any]:
    return {
        "perspectives": {
            "engineer": perspective_to_dict(result.engineer),
            "ceremony": perspective_to_dict(result.ceremony),
            "storyEngine": perspective_to_dict(result.story_engine),
        },
        "leadLens": result.lead_lens.value,
        "coherence": result.coherence,
        "timestamp": result.timestamp,
    }


def synthesis_from_dict(data: Dict[str, Any]) -> SynthesisResult:
    perspectives = data["perspectives"]
    return SynthesisResult(
        engineer=perspective_from_dict(perspectives["engineer"]),
        ceremony=perspective_from_dict(perspectives["ceremony"]),
        story_engine=perspective_from_dict(perspectives["storyEngine"]),
        lead_lens=find_lens(data["leadLens"]),
        coherence=float(data["coherence"]),
        timestamp=data["timestamp"],
    )


# =============================================================================
# LEDGER PARTS
# =============================================================================

def position_to_dict(position: NarrativePosition) -> Dict[str, Any]:
    return {
        "act": position.act,
        "phase": position.phase.value,
        "currentBeatId": position.current_beat_id,
        "beatCount": position.beat_count,
        "characterArcStrength": position.character_arc_strength,
        "thematicResonance": position.thematic_resonance,
        "emotionalTone": position.emotional_tone,
        "leadLens": position.lead_lens.value,
    }


def position_from_dict(data: Dict[str, Any]) -> NarrativePosition:
    return NarrativePosition(
        act=int(data.get("act", 1)),
        phase=_phase(data.get("phase")),
        current_beat_id=data.get("currentBeatId"),
        beat_count=int(data.get("beatCount", 0)),
        character_arc_strength=float(data.get("characterArcStrength", 0.5)),
        thematic_resonance=float(data.get("thematicResonance", 0.5)),
        emotional_tone=data.get("emotionalTone", "neutral"),
        lead_lens=find_lens(data.get("leadLens")),
    )


def beat_to_dict(beat: Beat) -> Dict[str, Any]:
    return {
        "id": beat.id,
        "sequence": beat.sequence,
        "content": beat.content,
        "narrativeFunction": beat.narrative_function.value,
        "act": beat.act,
        "leadLens": beat.lead_lens.value,
        "emotionalTone": beat.emotional_tone,
        "thematicTags": list(beat.thematic_tags),
        "characterId": beat.character_id,
        "characterArcImpact": beat.character_arc_impact,
        "source": beat.source,
        "sourceEventId": beat.source_event_id,
        "timestamp": beat.timestamp,
        "enrichmentsApplied": list(beat.enrichments_applied),
        "qualityScore": beat.quality_score,
        "analysis": synthesis_to_dict(beat.analysis) if beat.analysis else None,
    }


def beat_from_dict(data: Dict[str, Any]) -> Beat:
    analysis = data.get("analysis")
    return Beat(
        id=data["id"],
        sequence=int(data["sequence"]),
        content=data.get("content", ""),
        narrative_function=find_function(data.get("narrativeFunction")),
        act=int(data.get("act", 2)),
        lead_lens=find_lens(data.get("leadLens")),
        emotional_tone=data.get("emotionalTone", "neutral"),
        thematic_tags=tuple(data.get("thematicTags", ())),
        character_id=data.get("characterId"),
        character_arc_impact=float(data.get("characterArcImpact", 0.0)),
        source=data.get("source", "generator"),
        source_event_id=data.get("sourceEventId"),
        timestamp=data["timestamp"],
        enrichments_applied=tuple(data.get("enrichmentsApplied", ())),
        quality_score=float(data.get("qualityScore", 0.5)),
        analysis=synthesis_from_dict(analysis) if analysis else None,
    )


def character_to_dict(character: CharacterState) -> Dict[str, Any]:
    return {
        "id": character.id,
        "name": character.name,
        "archetype": character.archetype,
        "lens": character.lens.value,
        "arcPosition": character.arc_position,
        "initialState": character.initial_state,
        "currentState": character.current_state,
        "growthPoints": [
            {"timestamp": p.timestamp, "impact": p.impact, "description": p.description}
            for p in character.growth_points
        ],
        "relationships": list(character.relationships),
    }


def character_from_dict(data: Dict[str, Any]) -> CharacterState:
    return CharacterState(
        id=data["id"],
        name=data["name"],
        archetype=data.get("archetype", ""),
        lens=find_lens(data.get("lens")),
        arc_position=float(data.get("arcPosition", 0.0)),
        initial_state=data.get("initialState", ""),
        current_state=data.get("currentState", ""),
        growth_points=tuple(
            GrowthPoint(timestamp=p["timestamp"], impact=float(p["impact"]), description=p["description"])
            for p in data.get("growthPoints", ())
        ),
        relationships=tuple(data.get("relationships", ())),
    )


def theme_to_dict(theme: ThematicThread) -> Dict[str, Any]:
    return {
        "id": theme.id,
        "name": theme.name,
        "description": theme.description,
        "strength": theme.strength,
        "tensionLevel": theme.tension_level,
        "resolutionProgress": theme.resolution_progress,
        "beatIds": list(theme.beat_ids),
    }


def theme_from_dict(data: Dict[str, Any]) -> ThematicThread:
    return ThematicThread(
        id=data["id"],
        name=data["name"],
        description=data.get("description", ""),
        strength=float(data.get("strength", 0.5)),
        tension_level=float(data.get("tensionLevel", 0.5)),
        resolution_progress=float(data.get("resolutionProgress", 0.0)),
        beat_ids=tuple(data.get("beatIds", ())),
    )


def routing_decision_to_dict(decision: RoutingDecision) -> Dict[str, Any]:
    return {
        "id": decision.id,
        "backend": decision.backend,
        "flow": decision.flow,
        "analysis": synthesis_to_dict(decision.analysis),
        "position": position_to_dict(decision.position),
        "score": decision.score,
        "method": decision.method,
        "success": decision.success,
        "resultSummary": decision.result_summary,
        "latencyMs": decision.latency_ms,
        "timestamp": decision.timestamp,
    }


def routing_decision_from_dict(data: Dict[str, Any]) -> RoutingDecision:
    return RoutingDecision(
        id=data["id"],
        backend=data["backend"],
        flow=data["flow"],
        analysis=synthesis_from_dict(data["analysis"]),
        position=position_from_dict(data.get("position") or {}),
        score=float(data["score"]),
        method=data.get("method", "narrative"),
        success=bool(data.get("success", True)),
        result_summary=data.get("resultSummary", ""),
        latency_ms=float(data.get("latencyMs", 0.0)),
        timestamp=data["timestamp"],
    )


# =============================================================================
# LEDGER (aggregate root)
# =============================================================================

def ledger_to_dict(ledger: NarrativeLedger) -> Dict[str, Any]:
    return {
        "storyId": ledger.story_id,
        "sessionId": ledger.session_id,
        "position": position_to_dict(ledger.position),
        "beats": [beat_to_dict(b) for b in ledger.beats],
        "characters": {k: character_to_dict(v) for k, v in ledger.characters.items()},
        "themes": {k: theme_to_dict(v) for k, v in ledger.themes.items()},
        "routingDecisions": [routing_decision_to_dict(d) for d in ledger.routing_decisions],
        "currentEpisodeId": ledger.current_episode_id,
        "episodeBeatsCount": ledger.episode_beats_count,
        "createdAt": ledger.created_at,
        "updatedAt": ledger.updated_at,
        "overallCoherence": ledger.overall_coherence,
        "emotionalArcStrength": ledger.emotional_arc_strength,
    }


def ledger_from_dict(data: Dict[str, Any]) -> NarrativeLedger:
    return NarrativeLedger(
        story_id=data["storyId"],
        session_id=data["sessionId"],
        position=position_from_dict(data.get("position") or {}),
        beats=tuple(beat_from_dict(b) for b in data.get("beats", ())),
        characters={k: character_from_dict(v) for k, v in (data.get("characters") or {}).items()},
        themes={k: theme_from_dict(v) for k, v in (data.get("themes") or {}).items()},
        routing_decisions=tuple(routing_decision_from_dict(d) for d in data.get("routingDecisions", ())),
        current_episode_id=data.get("currentEpisodeId"),
        episode_beats_count=int(data.get("episodeBeatsCount", 0)),
        created_at=data["createdAt"],
        updated_at=data["updatedAt"],
        overall_coherence=float(data.get("overallCoherence", 0.5)),
        emotional_arc_strength=float(data.get("emotionalArcStrength", 0.5)),
    )


def serialize_ledger(ledger: NarrativeLedger) -> str:
    return json.dumps(ledger_to_dict(ledger))


def deserialize_ledger(text: str) -> NarrativeLedger:
    """Raises SerializationError on malformed input."""
    return _load(text, ledger_from_dict)


def serialize_beat(beat: Beat) -> str:
    return json.dumps(beat_to_dict(beat))


def deserialize_beat(text: str) -> Beat:
    return _load(text, beat_from_dict)


def serialize_analysis(result: SynthesisResult) -> str:
    return json.dumps(synthesis_to_dict(result))


def deserialize_analysis(text: str) -> SynthesisResult:
    return _load(text, synthesis_from_dict)


def _load(text: str, build):
    try:
        data = json.loads(text)
        if not isinstance(data, dict):
            raise SerializationError(f"expected JSON object, got {type(data).__name__}")
        return build(data)
    except SerializationError:
        raise
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise SerializationError(f"{type(e).__name__}: {e}") from e


# =============================================================================
# COHERENCE OUTPUT (outbound only)
# =============================================================================

def component_to_dict(component: ComponentScore) -> Dict[str, Any]:
    return {
        "score": component.score,
        "status": component.status.value,
        "issues": list(component.issues),
        "suggestions": list(component.suggestions),
    }


def gap_to_dict(gap: Gap) -> Dict[str, Any]:
    return {
        "id": gap.id,
        "type": gap.gap_type.value,
        "severity": gap.severity.value,
        "description": gap.description,
        "location": dict(gap.location),
        "suggestedRoute": gap.suggested_route.value,
        "resolved": gap.resolved,
        "resolution": gap.resolution,
    }


def trinity_to_dict(trinity: TrinityAssessment) -> Dict[str, Any]:
    return {
        "mia": trinity.mia,
        "miette": trinity.miette,
        "ava8": trinity.ava8,
        "priorities": list(trinity.priorities),
    }


def coherence_result_to_dict(result: CoherenceResult) -> Dict[str, Any]:
    score = result.coherence_score
    return {
        "coherenceScore": {
            "overall": score.overall,
            "narrativeFlow": component_to_dict(score.narrative_flow),
            "characterConsistency": component_to_dict(score.character_consistency),
            "pacing": component_to_dict(score.pacing),
            "themeSaturation": component_to_dict(score.theme_saturation),
            "continuity": component_to_dict(score.continuity),
            "analyzedAt": score.analyzed_at,
        },
        "gaps": [gap_to_dict(g) for g in result.gaps],
        "trinityAssessment": trinity_to_dict(result.trinity),
    }


_ENCODERS = (
    (NarrativeLedger, ledger_to_dict),
    (Beat, beat_to_dict),
    (CharacterState, character_to_dict),
    (ThematicThread, theme_to_dict),
    (RoutingDecision, routing_decision_to_dict),
    (NarrativePosition, position_to_dict),
    (SynthesisResult, synthesis_to_dict),
    (LensPerspective, perspective_to_dict),
    (CoherenceResult, coherence_result_to_dict),
    (Gap, gap_to_dict),
    (ComponentScore, component_to_dict),
    (TrinityAssessment, trinity_to_dict),
)
