"""
Coherence Engine Tests
======================

INVARIANTS TESTED:
1. Overall score is the weighted mean of the five components (50 if none)
2. Gaps are sorted critical -> moderate -> minor, stable within a band
3. Gap ids are unique within a result and across calls on one engine
4. Every routing target appears in routing_suggestions, possibly empty
5. Trinity priorities: top critical, else top moderate, else minor line
6. Analyzing the same input twice gives the same scores, gaps and trinity
"""

import pytest

from trilens.contracts.coherence import ComponentScore, GapSeverity, GapType, RoutingTarget
from trilens.contracts.events import AuditEventType
from trilens.contracts.ledger import NarrativeFunction as F
from trilens.coherence import NarrativeCoherenceEngine, aggregate
from trilens.coherence.trinity import MINOR_ONLY
from trilens.ledger import create_ledger
from trilens.observability import AuditLog

from tests.fixtures import make_beat, make_character, make_theme


def component_view(result):
    score = result.coherence_score
    components = (score.narrative_flow, score.character_consistency, score.pacing,
                  score.theme_saturation, score.continuity)
    return score.overall, components


def gap_view(result):
    return [(g.gap_type, g.severity, g.description, g.suggested_route) for g in result.gaps]


class TestAggregate:

    def test_no_components(self):
        assert aggregate({}) == 50.0

    def test_single_component(self):
        assert aggregate({"pacing": ComponentScore.build(80)}) == pytest.approx(80.0)

    def test_weights_normalised_over_present(self):
        components = {
            "narrative_flow": ComponentScore.build(100),
            "continuity": ComponentScore.build(0),
        }
        assert aggregate(components) == pytest.approx(120 / 2.0)


class TestAnalyzeEmpty:

    def test_empty_narrative(self):
        result = NarrativeCoherenceEngine().analyze([], [], [])
        assert result.score == pytest.approx(276 / 5.2)
        assert result.trinity.mia == (
            "Structure is 50% sound. Key structural gap: Too few beats to assess flow "
            "Pacing needs attention (50%). Add more beats to establish proper pacing rhythm "
            "Continuity has 1 issues to address."
        )
        assert result.trinity.priorities == (MINOR_ONLY,)
        assert all(g.severity == GapSeverity.MINOR for g in result.gaps)

    def test_gap_types_and_routes(self):
        result = NarrativeCoherenceEngine().analyze([], [], [])
        routes = {g.location["component"]: (g.gap_type, g.suggested_route) for g in result.gaps}
        assert routes["narrative_flow"] == (GapType.STRUCTURAL, RoutingTarget.STRUCTURIST)
        assert routes["character_consistency"] == (GapType.CHARACTER, RoutingTarget.STORYTELLER)
        assert routes["theme_saturation"] == (GapType.THEMATIC, RoutingTarget.STRUCTURIST)
        assert routes["continuity"] == (GapType.CONTINUITY, RoutingTarget.AUTHOR)


class TestGaps:

    def test_critical_sorted_first(self):
        result = NarrativeCoherenceEngine().analyze([], [], [make_theme(strength=0.8)])
        first = result.gaps[0]
        assert first.severity == GapSeverity.CRITICAL
        assert first.description == "Theme 'Trust' is important but appears rarely"
        assert result.trinity.priorities == ("Theme 'Trust' is important but appears rarely",)

    def test_moderate_marker(self):
        beats = [make_beat(i + 1, character_id="hero" if i in (0, 8) else None) for i in range(10)]
        result = NarrativeCoherenceEngine().analyze(beats, [make_character()], [])
        by_description = {g.description: g.severity for g in result.gaps}
        assert by_description["Character 'Hero' disappears for 8 beats"] == GapSeverity.MODERATE
        assert by_description["Character 'Hero' has minimal arc progression"] == GapSeverity.MINOR
        assert result.trinity.priorities == ("Character 'Hero' disappears for 8 beats",)

    def test_ids_unique_across_calls(self):
        engine = NarrativeCoherenceEngine()
        first = [g.id for g in engine.analyze([], [], []).gaps]
        second = [g.id for g in engine.analyze([], [], []).gaps]
        assert len(set(first + second)) == len(first) + len(second)

    def test_repeat_analysis_is_stable(self):
        tones = ("joyful", "devastating")
        beats = [make_beat(s, F.CLIMAX, tones[s % 2], beat_id=f"b{s}") for s in (3, 1, 2, 5, 4, 7, 6, 9, 8, 10)]
        characters = [make_character("ghost", "Ghost", 0.0)]
        themes = [make_theme(strength=0.9)]
        engine = NarrativeCoherenceEngine()

        first = engine.analyze(beats, characters, themes)
        second = engine.analyze(beats, characters, themes)

        assert component_view(first) == component_view(second)
        assert gap_view(first) == gap_view(second)
        assert first.trinity == second.trinity
        assert first.gaps

    def test_routing_suggestions_has_every_target(self):
        engine = NarrativeCoherenceEngine()
        routing = engine.routing_suggestions(engine.analyze([], [], []).gaps)
        assert set(routing) == set(RoutingTarget)
        assert routing[RoutingTarget.ARCHITECT] == []
        assert len(routing[RoutingTarget.STRUCTURIST]) == 3


class TestTrinity:

    def test_jarring_tone_reaches_miette(self):
        beats = [make_beat(1, tone="devastating"), make_beat(2, tone="joyful")]
        result = NarrativeCoherenceEngine().analyze(beats, [make_character()], [])
        assert "Emotional transitions feel abrupt in places." in result.trinity.miette
        assert result.trinity.miette.startswith("Character arcs are resonating well.")

    def test_balanced_pacing_reaches_ava8(self):
        beats = [make_beat(i, f) for i, f in enumerate(
            [F.INCITING_INCIDENT, F.RISING_ACTION, F.TURNING_POINT, F.CRISIS, F.CLIMAX, F.RESOLUTION],
            start=1,
        )]
        result = NarrativeCoherenceEngine().analyze(beats, [], [])
        assert result.trinity.ava8 == "Atmospheric rhythm feels balanced."
        assert result.trinity.mia.startswith("Structure is 70% sound.")

    def test_dense_tension_reaches_ava8(self):
        beats = [make_beat(i, F.CRISIS) for i in range(1, 5)] + [make_beat(5, F.CLIMAX)]
        result = NarrativeCoherenceEngine().analyze(beats, [], [])
        assert result.trinity.ava8 == (
            "Atmosphere could use more grounding moments. "
            "The dense tension sections may benefit from visual breathing room."
        )


class TestLedgerAndAudit:

    def test_analyze_ledger_accepts_id_maps(self):
        result = NarrativeCoherenceEngine().analyze_ledger(create_ledger("story", "session"))
        assert result.coherence_score.character_consistency.score == 90.0
        assert result.coherence_score.theme_saturation.score == 20.0

    def test_audit_entry(self):
        audit = AuditLog()
        NarrativeCoherenceEngine(audit=audit).analyze([make_beat(1)], [], [])
        entries = audit.entries(layer="coherence", event_type=AuditEventType.COHERENCE)
        assert [e.action for e in entries] == ["narrative_analyzed"]
        assert ("beats", "1") in entries[0].metadata
