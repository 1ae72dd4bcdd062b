"""
Coherence Scorers

Five independent heuristics, each a pure function of the beat list (plus
characters or themes where relevant) returning a ComponentScore on a
0-100 scale.

HEURISTIC FENCE POST:
=====================
These scores are rubric checks over beat metadata (narrative function,
tone, sequence, character and theme tags). They never read beat prose
and make no claim about literary quality.
"""

from __future__ import annotations
from typing import List, Sequence

from ..contracts.coherence import ComponentScore
from ..contracts.ledger import Beat, CharacterState, ThematicThread


SETUP_FUNCTIONS = ("setup", "introduction", "discovery")
ESCALATION_FUNCTIONS = ("confrontation", "crisis", "climax")
HIGH_TENSION_FUNCTIONS = ("confrontation", "crisis", "climax", "revelation")
JARRING_PAIRS = (
    ("devastating", "joyful"),
    ("fearful", "peaceful"),
    ("triumphant", "devastating"),
)

DISAPPEARANCE_GAP = 5
MAX_HIGH_TENSION_RUN = 3
MAX_FLAGGED_MISSING = 3


def _function(beat: Beat) -> str:
    return beat.narrative_function.value.lower()


# =============================================================================
# FLOW
# =============================================================================

def score_flow(beats: Sequence[Beat]) -> ComponentScore:
    """
    Escalation before any setup-type beat costs 15 (reported once);
    each jarring adjacent tone change costs 10. Base 85.
    """
    if len(beats) < 2:
        return ComponentScore.build(
            50.0,
            ["Too few beats to assess flow"],
            ["Add more story beats to establish narrative rhythm"],
        )

    issues: List[str] = []
    suggestions: List[str] = []

    setup_violation = False
    for i, beat in enumerate(beats):
        function = _function(beat)
        if function in SETUP_FUNCTIONS:
            break
        if function in ESCALATION_FUNCTIONS:
            setup_violation = True
            issues.append(f"Beat {i + 1} escalates without proper setup")
            suggestions.append("Consider adding setup beats before major confrontations")
            break

    jarring = 0
    for i in range(1, len(beats)):
        previous, current = beats[i - 1].emotional_tone, beats[i].emotional_tone
        if previous and current:
            for first, second in JARRING_PAIRS:
                if _is_jarring_pair(previous, current, first, second):
                    jarring += 1
                    issues.append(f"Jarring emotional transition at Beat {i + 1}")
    if jarring:
        suggestions.append("Add transitional beats to smooth emotional shifts")

    score = 85.0 - 10 * jarring - (15 if setup_violation else 0)
    return ComponentScore.build(score, issues, suggestions)


def _is_jarring_pair(previous: str, current: str, first: str, second: str) -> bool:
    previous, current = previous.lower(), current.lower()
    return (first in previous and second in current) or (second in previous and first in current)


# =============================================================================
# CHARACTER CONSISTENCY
# =============================================================================

def score_character_consistency(
    beats: Sequence[Beat],
    characters: Sequence[CharacterState]
) -> ComponentScore:
    """
    Each absence longer than 5 beats costs 8; each character with arc
    position under 0.1 in a ledger of more than 5 beats costs 12. Base 90.
    """
    if not characters:
        return ComponentScore.build(
            50.0,
            ["No character data provided"],
            ["Define character states to enable consistency analysis"],
        )

    issues: List[str] = []
    suggestions: List[str] = []

    appearances = {character.id: [] for character in characters}
    for index, beat in enumerate(beats):
        if beat.character_id in appearances:
            appearances[beat.character_id].append(index)

    names = {}
    for character in characters:
        names.setdefault(character.id, character.name or character.id)

    disappearances = 0
    for char_id, indices in appearances.items():
        name = names[char_id]
        for previous, current in zip(indices, indices[1:]):
            gap = current - previous
            if gap > DISAPPEARANCE_GAP:
                disappearances += 1
                issues.append(f"Character '{name}' disappears for {gap} beats")
                suggestions.append(
                    f"Consider adding '{name}' to beats between {previous + 1} and {current + 1}"
                )

    minimal_arcs = 0
    if len(beats) > 5:
        for character in characters:
            if character.arc_position < 0.1:
                minimal_arcs += 1
                issues.append(f"Character '{character.name}' has minimal arc progression")

    score = 90.0 - 8 * disappearances - 12 * minimal_arcs
    return ComponentScore.build(score, issues, suggestions)


# =============================================================================
# PACING
# =============================================================================

def score_pacing(beats: Sequence[Beat]) -> ComponentScore:
    """
    Missing climax costs 20; a last climax in the first half costs 15
    instead. A high-tension run longer than 3 costs min(20, 5 x run). Base 85.
    """
    if len(beats) < 3:
        return ComponentScore.build(
            50.0,
            ["Too few beats to assess pacing"],
            ["Add more beats to establish proper pacing rhythm"],
        )

    issues: List[str] = []
    suggestions: List[str] = []
    functions = [_function(beat) for beat in beats]
    score = 85.0

    climaxes = [i for i, function in enumerate(functions) if "climax" in function]
    if not climaxes:
        issues.append("No climax beat identified")
        suggestions.append("Ensure at least one beat has a climax function")
        score -= 20
    elif climaxes[-1] < len(beats) * 0.5:
        issues.append("Climax occurs too early in the narrative")
        suggestions.append("Move climax to later in the story or add post-climax resolution beats")
        score -= 15

    run = longest = 0
    for function in functions:
        if any(high in function for high in HIGH_TENSION_FUNCTIONS):
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    if longest > MAX_HIGH_TENSION_RUN:
        issues.append(f"Found {longest} consecutive high-tension beats")
        suggestions.append("Add breathing room with quieter beats between intense moments")
        score -= min(20, 5 * longest)

    return ComponentScore.build(score, issues, suggestions)


# =============================================================================
# THEME SATURATION
# =============================================================================

def score_theme_saturation(
    beats: Sequence[Beat],
    themes: Sequence[ThematicThread]
) -> ComponentScore:
    """
    Mean theme coverage x 100 + 20 (capped at 100), minus 10 per strong
    but rare theme and 8 per frequent but weak theme.
    """
    if not themes:
        return ComponentScore.build(
            50.0,
            ["No themes defined"],
            ["Define thematic threads to enable saturation analysis"],
        )

    issues: List[str] = []
    suggestions: List[str] = []
    coverages: List[float] = []
    penalty = 0.0

    for theme in themes:
        tagged = sum(1 for beat in beats if theme.id in beat.thematic_tags)
        coverage = tagged / max(len(beats), 1)
        coverages.append(coverage)

        if coverage < 0.2 and theme.strength > 0.5:
            issues.append(f"Theme '{theme.name}' is important but appears rarely")
            suggestions.append(f"Weave '{theme.name}' into more beats to fulfill its promise")
            penalty += 10
        if coverage > 0.3 and theme.strength < 0.3:
            issues.append(f"Theme '{theme.name}' appears often but lacks impact")
            suggestions.append(f"Strengthen the thematic weight of '{theme.name}' in key beats")
            penalty += 8

    mean_coverage = sum(coverages) / len(coverages)
    score = min(100.0, mean_coverage * 100 + 20) - penalty
    return ComponentScore.build(score, issues, suggestions)


# =============================================================================
# CONTINUITY
# =============================================================================

def score_continuity(beats: Sequence[Beat]) -> ComponentScore:
    """
    Out-of-order sequences cost 20, duplicates 15, and one to three
    missing sequence numbers 5 (flat). Larger holes are not flagged. Base 90.
    """
    if len(beats) < 2:
        return ComponentScore.build(70.0, ["Too few beats for continuity analysis"])

    issues: List[str] = []
    suggestions: List[str] = []
    sequences = [beat.sequence for beat in beats]
    score = 90.0

    if sequences != sorted(sequences):
        issues.append("Beat sequences are not in order")
        suggestions.append("Reorder beats to ensure logical sequence progression")
        score -= 20

    if len(set(sequences)) != len(sequences):
        issues.append("Duplicate beat sequence numbers found")
        suggestions.append("Ensure each beat has a unique sequence number")
        score -= 15

    present = set(sequences)
    highest = max(sequences)
    missing_count = highest - sum(1 for n in present if 1 <= n <= highest)
    if 0 < missing_count <= MAX_FLAGGED_MISSING:
        missing = [n for n in range(1, highest + 1) if n not in present]
        issues.append(f"Missing beat sequences: {', '.join(str(n) for n in missing)}")
        suggestions.append("Fill in missing beat sequences or renumber")
        score -= 5

    return ComponentScore.build(score, issues, suggestions)
