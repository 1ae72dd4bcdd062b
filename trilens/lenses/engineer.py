"""
Engineer Lens (Mia - The Builder)

Reads an event as technical work: what kind of change it is, which layer
of the system it touches, and roughly how big it is.
"""

from __future__ import annotations
from typing import Optional

from ..contracts.events import EventEnvelope
from ..contracts.lens import EngineerCategory, Lens, LensPerspective
from .. import lexicon
from .scoring import (
    ENGINEER_PROFILE, FallbackClassifier, consult_fallback, first_matching,
    keyword_scores, pick_winner
)


def technical_scope(content: str) -> str:
    return first_matching(content.lower(), lexicon.TECHNICAL_SCOPES, "general")


def estimate_complexity(content: str, commit_count: int = 0) -> str:
    """Commit count decides first; otherwise content length."""
    if commit_count > 5:
        return "high"
    if commit_count > 2:
        return "medium"
    if len(content) > 500:
        return "high"
    if len(content) > 100:
        return "medium"
    return "low"


def suggested_actions(category: str):
    for member, actions in lexicon.ENGINEER_ACTIONS.items():
        if member.value == category:
            return actions
    return lexicon.ENGINEER_DEFAULT_ACTIONS


class EngineerLens:
    """Keyword classifier for the engineer viewpoint."""

    lens = Lens.ENGINEER
    profile = ENGINEER_PROFILE

    def __init__(self, fallback: Optional[FallbackClassifier] = None, audit=None):
        self._fallback = fallback
        self._audit = audit

    def classify(self, event: EventEnvelope) -> LensPerspective:
        content = event.content()
        scores = keyword_scores(content, lexicon.ENGINEER_KEYWORDS, EngineerCategory)
        winner = pick_winner(scores)

        if winner is not None:
            category = winner[0]
            confidence = self.profile.confidence_for(winner[1])
        else:
            category = EngineerCategory.MAINTENANCE
            confidence = self.profile.fallback_confidence
            verdict = consult_fallback(
                self._fallback, content, self.profile, EngineerCategory, self._audit
            )
            if verdict is not None:
                category, confidence = verdict

        context = {
            "detected_keywords": [member.value for member in scores],
            "content_length": len(content),
            "event_type": event.kind.value,
            "technical_scope": technical_scope(content),
            "estimated_complexity": estimate_complexity(content, event.commit_count()),
        }

        return LensPerspective(
            lens=self.lens,
            category=category.value,
            confidence=confidence,
            suggested_actions=suggested_actions(category.value),
            context=context,
        )
