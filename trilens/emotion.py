"""
Emotional-Tone Classifier

Keyword classifier for the emotional tone of a beat. Used by the beat
factory to stamp new beats and as an enrichment pass over existing ones.

Resolution order:
1. A tone already present on the input is kept (method "existing")
2. Keyword hits per tone; most hits wins, first declared tone on ties
3. Optional fallback callback, only when no keyword hit
4. Peaceful at 0.3 (method "rule_based_default")
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from .contracts.events import AuditEventType
from .contracts.ledger import Beat
from .lenses.scoring import FallbackClassifier

ENRICHMENT_TAG = "emotional_tone"
NEUTRAL = "neutral"


class EmotionalTone(Enum):
    DEVASTATING = "Devastating"
    HOPEFUL = "Hopeful"
    TENSE = "Tense"
    JOYFUL = "Joyful"
    MELANCHOLIC = "Melancholic"
    TRIUMPHANT = "Triumphant"
    FEARFUL = "Fearful"
    PEACEFUL = "Peaceful"
    CONFLICTED = "Conflicted"
    RESIGNED = "Resigned"


TONE_KEYWORDS: Dict[EmotionalTone, Tuple[str, ...]] = {
    EmotionalTone.DEVASTATING: ("destroy", "loss", "death", "tragedy", "grief", "devastat"),
    EmotionalTone.HOPEFUL: ("hope", "bright", "promise", "future", "optimis", "dream"),
    EmotionalTone.TENSE: ("tense", "anxious", "nervous", "edge", "suspense", "uncertain"),
    EmotionalTone.JOYFUL: ("joy", "happy", "celebrate", "triumph", "delight", "elat"),
    EmotionalTone.MELANCHOLIC: ("sad", "melanchol", "wistful", "longing", "regret", "sorrow"),
    EmotionalTone.TRIUMPHANT: ("victory", "triumph", "succeed", "conquer", "win", "achieve"),
    EmotionalTone.FEARFUL: ("fear", "terror", "dread", "frighten", "horror", "panic"),
    EmotionalTone.PEACEFUL: ("peace", "calm", "serene", "tranquil", "quiet", "still"),
    EmotionalTone.CONFLICTED: ("conflict", "torn", "struggle", "dilemma", "uncertain", "doubt"),
    EmotionalTone.RESIGNED: ("resign", "accept", "inevitable", "surrender", "fate", "give up"),
}


@dataclass(frozen=True)
class ToneClassification:
    tone: str
    confidence: float
    method: str

    @property
    def label(self) -> str:
        """Lower-case form stored on beats."""
        return self.tone.lower()


def find_tone(value: Optional[str]) -> Optional[EmotionalTone]:
    if not value:
        return None
    for tone in EmotionalTone:
        if tone.value.lower() == value.strip().lower():
            return tone
    return None


class EmotionalToneClassifier:

    def __init__(self, fallback: Optional[FallbackClassifier] = None, audit=None):
        self._fallback = fallback
        self._audit = audit

    def classify(self, text: str, existing_tone: Optional[str] = None) -> ToneClassification:
        if existing_tone and existing_tone != NEUTRAL:
            return ToneClassification(existing_tone, 1.0, "existing")

        result = self.classify_rule_based(text)
        if result.method == "rule_based_default" and self._fallback is not None:
            return self._consult_fallback(text) or result
        return result

    def classify_rule_based(self, text: str) -> ToneClassification:
        lowered = (text or "").lower()
        best = None
        for tone, keywords in TONE_KEYWORDS.items():
            hits = sum(1 for keyword in keywords if keyword in lowered)
            if hits and (best is None or hits > best[1]):
                best = (tone, hits)

        if best is None:
            return ToneClassification(EmotionalTone.PEACEFUL.value, 0.3, "rule_based_default")
        return ToneClassification(best[0].value, min(best[1] / 3.0, 1.0), "rule_based")

    def _consult_fallback(self, text: str) -> Optional[ToneClassification]:
        try:
            verdict = self._fallback(text, [tone.value for tone in EmotionalTone])
        except Exception as e:
            if self._audit is not None:
                self._audit.record(
                    AuditEventType.FALLBACK, "lenses", "tone_fallback_failed",
                    error=type(e).__name__, message=str(e)
                )
            return None

        if not verdict:
            return None
        tone = find_tone(verdict[0])
        if tone is None:
            return None
        try:
            confidence = max(0.0, min(1.0, float(verdict[1])))
        except (TypeError, ValueError):
            confidence = 0.3
        return ToneClassification(tone.value, confidence, "fallback")

    def enrich_beat(self, beat: Beat) -> Beat:
        """Return the beat with a tone stamped on it; beats with a tone are returned unchanged."""
        if beat.emotional_tone and beat.emotional_tone != NEUTRAL:
            return beat
        result = self.classify(beat.content)
        return replace(
            beat,
            emotional_tone=result.label,
            enrichments_applied=beat.enrichments_applied + (ENRICHMENT_TAG,),
        )


def classify_emotional_tone(text: str) -> ToneClassification:
    """Rule-based classification of a single snippet."""
    return EmotionalToneClassifier().classify_rule_based(text)
