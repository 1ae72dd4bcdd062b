"""
Emotional-Tone Classifier Tests
===============================

INVARIANTS TESTED:
1. Existing non-neutral tone is kept at confidence 1.0
2. Most keyword hits wins; first declared tone wins ties
3. No hit -> Peaceful at 0.3 ("rule_based_default")
4. Fallback consulted only on the default path; unknown tones rejected
5. enrich_beat stamps a lower-case tone and records the enrichment
"""

from dataclasses import replace

import pytest

from trilens.contracts.events import AuditEventType
from trilens.emotion import ENRICHMENT_TAG, EmotionalToneClassifier, classify_emotional_tone
from trilens.observability import AuditLog

from tests.fixtures import make_beat


class TestRuleBased:

    def test_hits_decide_tone(self):
        result = classify_emotional_tone("we celebrate with joy")
        assert result.tone == "Joyful"
        assert result.confidence == pytest.approx(2 / 3)
        assert result.method == "rule_based"

    def test_tie_keeps_first_declared(self):
        assert classify_emotional_tone("hope and fear").tone == "Hopeful"

    def test_confidence_caps_at_one(self):
        result = classify_emotional_tone("fear terror dread panic")
        assert result.tone == "Fearful"
        assert result.confidence == 1.0

    def test_default(self):
        result = classify_emotional_tone("")
        assert (result.tone, result.confidence, result.method) == ("Peaceful", 0.3, "rule_based_default")


class TestClassify:

    def test_existing_tone_kept(self):
        result = EmotionalToneClassifier().classify("joy", existing_tone="Tense")
        assert (result.tone, result.confidence, result.method) == ("Tense", 1.0, "existing")

    def test_neutral_existing_tone_ignored(self):
        assert EmotionalToneClassifier().classify("joy", existing_tone="neutral").tone == "Joyful"

    def test_fallback_used_when_no_hit(self):
        classifier = EmotionalToneClassifier(fallback=lambda t, c: ("fearful", 0.8))
        result = classifier.classify("zzz")
        assert (result.tone, result.confidence, result.method) == ("Fearful", 0.8, "fallback")

    def test_fallback_not_used_when_keywords_hit(self):
        classifier = EmotionalToneClassifier(fallback=lambda t, c: ("Fearful", 0.8))
        assert classifier.classify("joy").tone == "Joyful"

    def test_unknown_fallback_tone_rejected(self):
        classifier = EmotionalToneClassifier(fallback=lambda t, c: ("Bored", 0.9))
        assert classifier.classify("zzz").method == "rule_based_default"

    def test_fallback_error_audited(self):
        def broken(t, c):
            raise TimeoutError("slow")

        audit = AuditLog()
        result = EmotionalToneClassifier(fallback=broken, audit=audit).classify("zzz")
        assert result.tone == "Peaceful"
        assert audit.entries(event_type=AuditEventType.FALLBACK)[0].action == "tone_fallback_failed"


class TestEnrichBeat:

    def test_neutral_beat_enriched(self):
        beat = replace(make_beat(1), content="grief and loss")
        enriched = EmotionalToneClassifier().enrich_beat(beat)
        assert enriched.emotional_tone == "devastating"
        assert enriched.enrichments_applied == (ENRICHMENT_TAG,)

    def test_toned_beat_unchanged(self):
        beat = make_beat(1, tone="tense")
        assert EmotionalToneClassifier().enrich_beat(beat) is beat
