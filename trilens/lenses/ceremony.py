"""
Ceremony Lens (Ava8 - The Keeper)

Reads an event as relational work: who took part, what energy the
message carries, and whether the moment deserves to be witnessed.

Collaboration bonus: with more than one contributor, co_creation gets a
flat +0.5 on top of its keyword score before the arg-max, so it can win
with zero keyword hits.
"""

from __future__ import annotations
from typing import Optional, Sequence

from ..contracts.events import EventEnvelope
from ..contracts.lens import CeremonyCategory, Lens, LensPerspective
from .. import lexicon
from .scoring import (
    CEREMONY_PROFILE, FallbackClassifier, consult_fallback, contains_any,
    first_matching, keyword_scores, pick_winner
)

COLLABORATION_BONUS = 0.5


def sender_energy(content: str) -> str:
    return first_matching(content.lower(), lexicon.ENERGY_WORDS, lexicon.DEFAULT_ENERGY)


def needs_witnessing(content: str) -> bool:
    lowered = content.lower()
    return contains_any(lowered, lexicon.VULNERABLE_WORDS) or contains_any(lowered, lexicon.ACHIEVEMENT_WORDS)


def relationship_depth(contributors: Sequence[str]) -> str:
    if len(contributors) > 2:
        return "community"
    if len(contributors) > 1:
        return "pair"
    return "individual"


def long_term_impact(content: str) -> float:
    lowered = content.lower()
    score = lexicon.LONG_TERM_BASE
    for words, bonus in lexicon.LONG_TERM_IMPACT:
        if contains_any(lowered, words):
            score += bonus
    return round(min(1.0, score), 2)


def suggested_actions(category: str):
    for member, actions in lexicon.CEREMONY_ACTIONS.items():
        if member.value == category:
            return actions
    return lexicon.CEREMONY_DEFAULT_ACTIONS


class CeremonyLens:
    """Keyword classifier for the ceremony viewpoint."""

    lens = Lens.CEREMONY
    profile = CEREMONY_PROFILE

    def __init__(self, fallback: Optional[FallbackClassifier] = None, audit=None):
        self._fallback = fallback
        self._audit = audit

    def classify(self, event: EventEnvelope) -> LensPerspective:
        content = event.content()
        contributors = list(event.contributors())

        scores = keyword_scores(content, lexicon.CEREMONY_KEYWORDS, CeremonyCategory)
        if len(contributors) > 1:
            boosted = {}
            for member in CeremonyCategory:
                if member is CeremonyCategory.CO_CREATION:
                    boosted[member] = scores.get(member, 0.0) + COLLABORATION_BONUS
                elif member in scores:
                    boosted[member] = scores[member]
            scores = boosted

        winner = pick_winner(scores)
        if winner is not None:
            category = winner[0]
            confidence = self.profile.confidence_for(winner[1])
        else:
            category = CeremonyCategory.INDIVIDUAL_OFFERING
            confidence = self.profile.fallback_confidence
            verdict = consult_fallback(
                self._fallback, content, self.profile, CeremonyCategory, self._audit
            )
            if verdict is not None:
                category, confidence = verdict

        context = {
            "contributors": contributors,
            "is_collaborative": len(contributors) > 1,
            "sender_energy": sender_energy(content),
            "witnessing_needed": needs_witnessing(content),
            "relationship_depth": relationship_depth(contributors),
            "seven_generation_relevance": long_term_impact(content),
        }

        return LensPerspective(
            lens=self.lens,
            category=category.value,
            confidence=confidence,
            suggested_actions=suggested_actions(category.value),
            context=context,
        )
