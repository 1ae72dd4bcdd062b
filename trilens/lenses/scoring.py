"""
Shared Keyword Scoring

The one algorithm all three lenses share: distinct-substring hit ratio per
category, arg-max with a fixed tie-break, lens-specific confidence, and the
optional fallback callback consulted only when nothing matched.

DETERMINISM:
============
- Categories are scored in Enum declaration order
- On equal scores the category seen first is kept
- No clock, randomness or I/O in the scoring path
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Mapping, Optional, Sequence, Tuple, Type

from ..contracts.base import clamp
from ..contracts.events import AuditEventType
from ..contracts.lens import Lens


Verdict = Tuple[str, float]
FallbackClassifier = Callable[[str, Sequence[str]], Optional[Verdict]]

MAX_CONFIDENCE = 0.95


@dataclass(frozen=True)
class LensProfile:
    """Confidence constants of one lens."""
    lens: Lens
    base_confidence: float
    spread: float
    fallback_confidence: float

    @property
    def min_confidence(self) -> float:
        """Lowest confidence this lens can report."""
        return min(self.base_confidence, self.fallback_confidence)

    def confidence_for(self, score: float) -> float:
        return min(MAX_CONFIDENCE, self.base_confidence + score * self.spread)


ENGINEER_PROFILE = LensProfile(Lens.ENGINEER, 0.6, 0.4, 0.5)
CEREMONY_PROFILE = LensProfile(Lens.CEREMONY, 0.5, 0.4, 0.6)
STORY_PROFILE = LensProfile(Lens.STORY_ENGINE, 0.55, 0.4, 0.5)


def contains_any(text: str, words: Sequence[str]) -> bool:
    """True if any word occurs in ``text`` (already lower-cased)."""
    return any(word in text for word in words)


def first_matching(text: str, table, default: str) -> str:
    """Label of the first (label, words) row with a hit, else ``default``."""
    for label, words in table:
        if contains_any(text, words):
            return label
    return default


def keyword_scores(text: str, table: Mapping[Enum, Sequence[str]], enum: Type[Enum]) -> Dict[Enum, float]:
    """
    Hit ratio for every category with at least one hit.

    Returned dict preserves Enum declaration order.
    """
    lowered = text.lower()
    scores: Dict[Enum, float] = {}
    for member in enum:
        terms = table.get(member)
        if not terms:
            continue
        hits = sum(1 for term in set(terms) if term.lower() in lowered)
        if hits > 0:
            scores[member] = hits / len(set(terms))
    return scores


def pick_winner(scores: Mapping[Enum, float]) -> Optional[Tuple[Enum, float]]:
    """Arg-max; the first category in iteration order wins ties."""
    winner = None
    for member, score in scores.items():
        if winner is None or score > winner[1]:
            winner = (member, score)
    return winner


def consult_fallback(
    fallback: Optional[FallbackClassifier],
    text: str,
    profile: LensProfile,
    enum: Type[Enum],
    audit=None
) -> Optional[Tuple[Enum, float]]:
    """
    Ask the fallback callback for a verdict when no keyword scored.

    A verdict is accepted only when it names a category of this lens; its
    confidence is clamped into [fallback constant, 0.95]. Callback
    exceptions are recorded and treated as "no verdict".
    """
    if fallback is None or not text:
        return None

    names = [member.value for member in enum]
    try:
        verdict = fallback(text, names)
    except Exception as e:
        if audit is not None:
            audit.record(
                AuditEventType.FALLBACK, "lenses", "fallback_failed",
                entity_id=profile.lens.value, error=type(e).__name__, message=str(e)
            )
        return None

    if not verdict:
        return None

    category, confidence = verdict
    for member in enum:
        if member.value == category:
            try:
                value = float(confidence)
            except (TypeError, ValueError):
                value = profile.fallback_confidence
            bounded = clamp(value, profile.fallback_confidence, MAX_CONFIDENCE)
            if audit is not None:
                audit.record(
                    AuditEventType.FALLBACK, "lenses", "fallback_accepted",
                    entity_id=profile.lens.value, category=category, confidence=bounded
                )
            return member, bounded

    if audit is not None:
        audit.record(
            AuditEventType.FALLBACK, "lenses", "fallback_rejected",
            entity_id=profile.lens.value, category=category
        )
    return None
