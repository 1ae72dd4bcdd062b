"""
Perspective Synthesizer

Combines the three lens perspectives into one verdict: which lens leads
the response, and how well the three readings agree.

LEAD-LENS PRECEDENCE (first match wins):
========================================
1. Ceremony     - witnessing needed
2. Ceremony     - collaborative work
3. Story-Engine - dramatic tension > 0.8
4. Story-Engine - climax or turning point
5. Engineer     - high estimated complexity
6. Engineer     - security or bug fix
7. Highest confidence; equal confidence resolves in Lens declaration
   order (Engineer > Ceremony > Story-Engine)
"""

from __future__ import annotations
from typing import Optional

from .contracts.base import Error, ErrorCode, Result, clamp01
from .contracts.lens import (
    Lens, LensPerspective, SynthesisResult, EngineerCategory, StoryCategory
)
from .lexicon import URGENT_ENGINEER_CATEGORIES, URGENT_ENERGY

ALIGNMENT_BONUS = 0.1
SPREAD_PENALTY = 0.2


def _context(perspective: LensPerspective, key: str, default=None):
    return perspective.context.get(key, default)


def _tension(story_engine: LensPerspective) -> float:
    value = _context(story_engine, "dramatic_tension", 0.0)
    return value if isinstance(value, (int, float)) else 0.0


def determine_lead_lens(
    engineer: LensPerspective,
    ceremony: LensPerspective,
    story_engine: LensPerspective
) -> Lens:
    """Apply the fixed precedence rules; see module docstring."""
    if _context(ceremony, "witnessing_needed"):
        return Lens.CEREMONY
    if _context(ceremony, "is_collaborative"):
        return Lens.CEREMONY

    if _tension(story_engine) > 0.8:
        return Lens.STORY_ENGINE
    if story_engine.category in (StoryCategory.CLIMAX.value, StoryCategory.TURNING_POINT.value):
        return Lens.STORY_ENGINE

    if _context(engineer, "estimated_complexity") == "high":
        return Lens.ENGINEER
    if engineer.category in (EngineerCategory.SECURITY.value, EngineerCategory.BUG_FIX.value):
        return Lens.ENGINEER

    # Strict comparison keeps the earlier lens on ties
    ranked = ((Lens.ENGINEER, engineer), (Lens.CEREMONY, ceremony), (Lens.STORY_ENGINE, story_engine))
    lead, best = ranked[0]
    for lens, perspective in ranked[1:]:
        if perspective.confidence > best.confidence:
            lead, best = lens, perspective
    return lead


def calculate_coherence(
    engineer: LensPerspective,
    ceremony: LensPerspective,
    story_engine: LensPerspective
) -> float:
    """
    Mean confidence, +0.1 when at least two lenses read the event as
    urgent, minus 0.2 x confidence spread. Clamped to [0, 1], 2 decimals.
    """
    confidences = (engineer.confidence, ceremony.confidence, story_engine.confidence)
    mean = sum(confidences) / 3

    urgent = (
        engineer.category in URGENT_ENGINEER_CATEGORIES,
        _context(ceremony, "sender_energy") == URGENT_ENERGY,
        _tension(story_engine) > 0.7,
    )
    bonus = ALIGNMENT_BONUS if sum(urgent) >= 2 else 0.0
    penalty = (max(confidences) - min(confidences)) * SPREAD_PENALTY

    return round(clamp01(mean + bonus - penalty), 2)


def synthesize(
    engineer: Optional[LensPerspective],
    ceremony: Optional[LensPerspective],
    story_engine: Optional[LensPerspective]
) -> Result[SynthesisResult]:
    """
    Combine three perspectives. Fails with MISSING_PERSPECTIVE if any is absent.
    """
    missing = [
        lens.value for lens, perspective in (
            (Lens.ENGINEER, engineer),
            (Lens.CEREMONY, ceremony),
            (Lens.STORY_ENGINE, story_engine),
        ) if perspective is None
    ]
    if missing:
        error = Error(ErrorCode.MISSING_PERSPECTIVE, f"Missing perspectives: {', '.join(missing)}")
        return Result.failure(error.with_context("missing", ",".join(missing)))

    return Result.success(SynthesisResult(
        engineer=engineer,
        ceremony=ceremony,
        story_engine=story_engine,
        lead_lens=determine_lead_lens(engineer, ceremony, story_engine),
        coherence=calculate_coherence(engineer, ceremony, story_engine),
    ))
