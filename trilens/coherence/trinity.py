"""
Trinity Summary

Three short readings of a coherence result, one per persona:
Mia (structure), Miette (emotion), Ava8 (atmosphere). Each is assembled
from conditional sentence fragments driven by the component scores.
"""

from __future__ import annotations
from typing import Dict, List, Optional, Sequence

from ..contracts.coherence import ComponentScore, Gap, GapSeverity, GapType, TrinityAssessment

MINOR_ONLY = "Minor polish items only - narrative is coherent"


def _mia(flow: Optional[ComponentScore], pacing: Optional[ComponentScore],
         continuity: Optional[ComponentScore]) -> str:
    parts: List[str] = []
    if flow is not None:
        parts.append(f"Structure is {flow.score:.0f}% sound.")
        if flow.issues:
            parts.append(f"Key structural gap: {flow.issues[0]}")
    if pacing is not None and pacing.score < 70:
        parts.append(f"Pacing needs attention ({pacing.score:.0f}%).")
        if pacing.suggestions:
            parts.append(pacing.suggestions[0])
    if continuity is not None and continuity.score < 80:
        parts.append(f"Continuity has {len(continuity.issues)} issues to address.")
    return " ".join(parts) if parts else "Structure analysis unavailable."


def _miette(character: Optional[ComponentScore], theme: Optional[ComponentScore],
            flow: Optional[ComponentScore]) -> str:
    parts: List[str] = []
    if character is not None:
        if character.score >= 80:
            parts.append("Character arcs are resonating well.")
        else:
            parts.append(f"Character consistency is {character.score:.0f}%.")
            if character.issues:
                parts.append(f"The emotional gap: {character.issues[0]}")
    if theme is not None:
        if theme.score >= 70:
            parts.append("Themes are landing with emotional weight.")
        else:
            parts.append("Themes need stronger emotional anchoring.")
    if flow is not None and any("Jarring" in issue for issue in flow.issues):
        parts.append("Emotional transitions feel abrupt in places.")
    return " ".join(parts) if parts else "Emotional analysis unavailable."


def _ava8(pacing: Optional[ComponentScore], gaps: Sequence[Gap]) -> str:
    parts: List[str] = []
    sensory = [g for g in gaps if g.gap_type == GapType.SENSORY]
    if sensory:
        parts.append(f"Found {len(sensory)} sensory gaps to address.")
    if pacing is not None and pacing.score >= 70:
        parts.append("Atmospheric rhythm feels balanced.")
    else:
        parts.append("Atmosphere could use more grounding moments.")
    if pacing is not None and any("consecutive high-tension" in issue for issue in pacing.issues):
        parts.append("The dense tension sections may benefit from visual breathing room.")
    return " ".join(parts)


def priorities(gaps: Sequence[Gap]) -> List[str]:
    """Top 3 critical gaps, else top 3 moderate, else the minor-polish line."""
    for severity in (GapSeverity.CRITICAL, GapSeverity.MODERATE):
        matching = [g.description for g in gaps if g.severity == severity]
        if matching:
            return matching[:3]
    return [MINOR_ONLY]


def build_trinity(components: Dict[str, ComponentScore], gaps: Sequence[Gap]) -> TrinityAssessment:
    """``components`` is keyed by scorer key (see engine.SCORER_KEYS)."""
    flow = components.get("narrative_flow")
    character = components.get("character_consistency")
    pacing = components.get("pacing")
    theme = components.get("theme_saturation")
    continuity = components.get("continuity")

    return TrinityAssessment(
        mia=_mia(flow, pacing, continuity),
        miette=_miette(character, theme, flow),
        ava8=_ava8(pacing, gaps),
        priorities=tuple(priorities(gaps)),
    )
