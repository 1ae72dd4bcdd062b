"""
Story-Engine Lens (Miette - The Weaver)

Reads an event as a story beat: which dramatic function it serves, where
it sits in the three-act arc, how much tension it carries and what beat
should come next.
"""

from __future__ import annotations
from typing import Optional

from ..contracts.events import EventEnvelope
from ..contracts.lens import Lens, LensPerspective, StoryCategory
from .. import lexicon
from .scoring import (
    STORY_PROFILE, FallbackClassifier, consult_fallback, contains_any,
    first_matching, keyword_scores, pick_winner
)


def dramatic_tension(category: StoryCategory, content: str) -> float:
    """
    Base tension for the category, +0.2 on urgency words (max 1.0),
    -0.2 on minimizing words (min 0.1), rounded to 2 decimals.
    """
    lowered = content.lower()
    tension = lexicon.BASE_TENSION[category]
    if contains_any(lowered, lexicon.URGENCY_WORDS):
        tension = min(1.0, tension + 0.2)
    if contains_any(lowered, lexicon.MINIMIZING_WORDS):
        tension = max(0.1, tension - 0.2)
    return round(tension, 2)


def character_impact(content: str) -> str:
    return first_matching(content.lower(), lexicon.CHARACTER_IMPACTS, lexicon.DEFAULT_CHARACTER_IMPACT)


def theme_resonance(content: str) -> str:
    lowered = content.lower()
    themes = [name for name, words in lexicon.THEME_RESONANCE if contains_any(lowered, words)]
    return ", ".join(themes) if themes else lexicon.DEFAULT_THEME_RESONANCE


def pacing_suggestion(category: StoryCategory, tension: float) -> str:
    if tension > 0.8:
        return "accelerate"
    if tension < 0.3:
        return "breathe"
    if category in (StoryCategory.INCITING_INCIDENT, StoryCategory.CLIMAX):
        return "emphasize"
    return "steady"


def suggested_actions(category: str):
    for member, actions in lexicon.STORY_ACTIONS.items():
        if member.value == category:
            return actions
    return lexicon.STORY_DEFAULT_ACTIONS


class StoryEngineLens:
    """Keyword classifier for the story-engine viewpoint."""

    lens = Lens.STORY_ENGINE
    profile = STORY_PROFILE

    def __init__(self, fallback: Optional[FallbackClassifier] = None, audit=None):
        self._fallback = fallback
        self._audit = audit

    def classify(self, event: EventEnvelope) -> LensPerspective:
        content = event.content()
        scores = keyword_scores(content, lexicon.STORY_KEYWORDS, StoryCategory)
        winner = pick_winner(scores)

        if winner is not None:
            category = winner[0]
            confidence = self.profile.confidence_for(winner[1])
        else:
            category = StoryCategory.RISING_ACTION
            confidence = self.profile.fallback_confidence
            verdict = consult_fallback(
                self._fallback, content, self.profile, StoryCategory, self._audit
            )
            if verdict is not None:
                category, confidence = verdict

        tension = dramatic_tension(category, content)
        context = {
            "act": lexicon.STORY_ACTS[category],
            "narrative_function": lexicon.STORY_FUNCTIONS[category].value,
            "dramatic_tension": tension,
            "suggested_next_beat": lexicon.NEXT_BEAT[category].value,
            "character_impact": character_impact(content),
            "theme_resonance": theme_resonance(content),
            "pacing_suggestion": pacing_suggestion(category, tension),
        }

        return LensPerspective(
            lens=self.lens,
            category=category.value,
            confidence=confidence,
            suggested_actions=suggested_actions(category.value),
            context=context,
        )
