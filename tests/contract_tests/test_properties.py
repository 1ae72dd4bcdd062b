"""
Property-Based Contract Tests
=============================

Hypothesis-driven checks of the invariants that must hold for ANY input,
not just the hand-picked fixtures.

INVARIANTS TESTED:
1. Lens confidence stays within [lens minimum, 0.95]; same input,
   same output
2. Synthesis coherence stays within [0, 1]
3. Character arcs never exceed 1.0; theme strength stays in [0, 1]
4. Component and overall coherence scores stay within [0, 100]
5. Gaps are always ordered critical -> moderate -> minor
6. Appending beats never shrinks the ledger; beat_count == len(beats)
7. Analyzing the same input twice gives the same scores, gaps and trinity
"""

from dataclasses import replace

from hypothesis import given, settings, strategies as st

from trilens.coherence import NarrativeCoherenceEngine
from trilens.coherence.gaps import SEVERITY_ORDER
from trilens.contracts.ledger import NarrativeFunction
from trilens.ledger import append_beat, create_ledger, update_character_arc, update_theme_strength
from trilens.lenses import MAX_CONFIDENCE, CeremonyLens, EngineerLens, StoryEngineLens, parse_event
from trilens.processor import ThreeLensProcessor

from tests.fixtures import make_beat, make_character, make_theme

LENSES = (EngineerLens, CeremonyLens, StoryEngineLens)
TONES = ("neutral", "devastating", "joyful", "fearful", "peaceful", "triumphant", "tense")

beat_specs = st.lists(
    st.tuples(
        st.integers(min_value=-5, max_value=60),
        st.sampled_from(list(NarrativeFunction)),
        st.sampled_from(TONES),
        st.sampled_from([None, "hero", "ally"]),
        st.lists(st.sampled_from(["trust", "loss"]), max_size=2, unique=True),
    ),
    max_size=25,
)


def build_beats(specs):
    return [
        make_beat(sequence, function, tone, character_id, tags, beat_id=f"beat_{i}")
        for i, (sequence, function, tone, character_id, tags) in enumerate(specs)
    ]


class TestLensProperties:

    @given(st.text(max_size=300))
    @settings(max_examples=60)
    def test_confidence_bounds(self, content):
        event = parse_event({"content": content})
        for lens_class in LENSES:
            result = lens_class().classify(event)
            assert lens_class.profile.min_confidence <= result.confidence <= MAX_CONFIDENCE

    @given(st.text(max_size=300))
    @settings(max_examples=40)
    def test_deterministic(self, content):
        event = parse_event({"content": content})
        for lens_class in LENSES:
            assert lens_class().classify(event) == lens_class().classify(event)

    @given(st.text(max_size=200), st.lists(st.text(min_size=1, max_size=8), max_size=4))
    @settings(max_examples=40)
    def test_synthesis_coherence_bounds(self, content, authors):
        raw = {
            "event_type": "github.push",
            "payload": {"commits": [{"message": content, "author": {"name": a}} for a in authors]},
        }
        analysis = ThreeLensProcessor().process(raw).unwrap()
        assert 0.0 <= analysis.coherence <= 1.0


class TestLedgerProperties:

    @given(st.lists(st.floats(min_value=-2, max_value=2, allow_nan=False), max_size=10))
    def test_arc_ceiling(self, impacts):
        ledger = create_ledger("story", "session")
        for impact in impacts:
            ledger = update_character_arc(ledger, "the-builder", impact, "step")
        assert ledger.characters["the-builder"].arc_position <= 1.0

    @given(st.lists(st.floats(min_value=-2, max_value=2, allow_nan=False), max_size=10))
    def test_theme_strength_bounds(self, deltas):
        ledger = create_ledger("story", "session")
        for delta in deltas:
            ledger = update_theme_strength(ledger, "coherence", delta)
        assert 0.0 <= ledger.themes["coherence"].strength <= 1.0

    @given(beat_specs)
    def test_append_monotonic(self, specs):
        ledger = create_ledger("story", "session")
        for beat in build_beats(specs):
            before = len(ledger.beats)
            ledger = append_beat(ledger, beat)
            assert len(ledger.beats) == before + 1
            assert ledger.position.beat_count == len(ledger.beats)


class TestCoherenceProperties:

    @given(beat_specs, st.floats(min_value=0, max_value=1), st.floats(min_value=0, max_value=1))
    @settings(max_examples=80)
    def test_scores_and_gap_order(self, specs, arc, strength):
        characters = [make_character("hero", "Hero", arc), make_character("ally", "Ally", 0.0)]
        themes = [make_theme("trust", "Trust", strength), make_theme("loss", "Loss", 1 - strength)]
        result = NarrativeCoherenceEngine().analyze(build_beats(specs), characters, themes)

        score = result.coherence_score
        for component in (score.narrative_flow, score.character_consistency, score.pacing,
                          score.theme_saturation, score.continuity):
            assert 0.0 <= component.score <= 100.0
        assert 0.0 <= score.overall <= 100.0

        ranks = [SEVERITY_ORDER[g.severity] for g in result.gaps]
        assert ranks == sorted(ranks)
        assert len({g.id for g in result.gaps}) == len(result.gaps)
        assert 1 <= len(result.trinity.priorities) <= 3

    @given(beat_specs, st.floats(min_value=0, max_value=1))
    @settings(max_examples=40)
    def test_repeat_analysis_is_stable(self, specs, strength):
        beats = build_beats(specs)
        characters = [make_character("hero", "Hero", 0.2)]
        themes = [make_theme("trust", "Trust", strength)]
        engine = NarrativeCoherenceEngine()

        first = engine.analyze(beats, characters, themes)
        second = engine.analyze(beats, characters, themes)

        assert replace(first.coherence_score, analyzed_at="") == replace(second.coherence_score, analyzed_at="")
        assert [g.description for g in first.gaps] == [g.description for g in second.gaps]
        assert first.trinity == second.trinity
