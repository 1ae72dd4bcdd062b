"""
Lexicon Tables

Static data only: trigger substrings per category, suggested follow-up
actions, act / tension / next-beat tables, and the heuristic word lists
each lens uses to derive its context bundle.

Every category-keyed table must cover its whole Enum. The checks at the
bottom of this module run at import time, so a new category without
table entries fails loudly instead of silently falling through to a
default.
"""

from __future__ import annotations
from enum import Enum
from typing import Dict, Mapping, Tuple, Type

from .contracts.lens import EngineerCategory, CeremonyCategory, StoryCategory
from .contracts.ledger import NarrativeFunction


# =============================================================================
# ENGINEER LENS (Mia - The Builder)
# =============================================================================

ENGINEER_KEYWORDS: Dict[EngineerCategory, Tuple[str, ...]] = {
    EngineerCategory.FEATURE_IMPLEMENTATION: ("feat:", "feature", "add", "implement", "create", "new"),
    EngineerCategory.BUG_FIX: ("fix:", "bug", "hotfix", "patch", "resolve", "correct"),
    EngineerCategory.REFACTOR: ("refactor", "refact:", "cleanup", "restructure", "reorganize"),
    EngineerCategory.DOCUMENTATION: ("docs:", "doc:", "documentation", "readme", "comment"),
    EngineerCategory.TESTING: ("test:", "tests:", "testing", "spec", "coverage"),
    EngineerCategory.DEPENDENCY: ("deps:", "dependency", "upgrade", "update", "bump"),
    EngineerCategory.CONFIGURATION: ("config:", "configure", "settings", "env"),
    EngineerCategory.PERFORMANCE: ("perf:", "performance", "optimize", "speed", "cache"),
    EngineerCategory.SECURITY: ("security", "sec:", "vulnerability", "auth", "permission"),
    EngineerCategory.CI_CD: ("ci:", "cd:", "pipeline", "workflow", "build"),
}

ENGINEER_ACTIONS: Dict[EngineerCategory, Tuple[str, ...]] = {
    EngineerCategory.FEATURE_IMPLEMENTATION: ("code_review", "integration_test", "documentation_update"),
    EngineerCategory.BUG_FIX: ("regression_test", "root_cause_analysis", "changelog_update"),
    EngineerCategory.REFACTOR: ("architecture_review", "performance_test", "code_quality"),
    EngineerCategory.DOCUMENTATION: ("doc_review", "example_validation"),
    EngineerCategory.TESTING: ("coverage_analysis", "test_quality_review"),
    EngineerCategory.DEPENDENCY: ("security_scan", "compatibility_test"),
    EngineerCategory.CONFIGURATION: ("validation_test", "rollback_plan"),
    EngineerCategory.PERFORMANCE: ("benchmark", "profiling", "optimization_review"),
    EngineerCategory.SECURITY: ("security_audit", "penetration_test", "credential_scan"),
    EngineerCategory.CI_CD: ("pipeline_validation", "deployment_test"),
    EngineerCategory.MAINTENANCE: ("standard_ci",),
}
ENGINEER_DEFAULT_ACTIONS: Tuple[str, ...] = ("standard_ci",)

# Ordered: first matching scope wins.
TECHNICAL_SCOPES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("api_layer", ("api", "endpoint", "route")),
    ("data_layer", ("database", "schema", "migration")),
    ("presentation_layer", ("ui", "component", "frontend")),
    ("testing", ("test", "spec")),
    ("configuration", ("config", "env", "settings")),
)

URGENT_ENGINEER_CATEGORIES = frozenset({
    EngineerCategory.SECURITY.value,
    EngineerCategory.BUG_FIX.value,
    EngineerCategory.PERFORMANCE.value,
})


# =============================================================================
# CEREMONY LENS (Ava8 - The Keeper)
# =============================================================================

CEREMONY_KEYWORDS: Dict[CeremonyCategory, Tuple[str, ...]] = {
    CeremonyCategory.CO_CREATION: ("we", "together", "team", "pair", "collaborate", "co-author"),
    CeremonyCategory.GRATITUDE_EXPRESSION: ("thanks", "thank you", "grateful", "appreciate", "credit"),
    CeremonyCategory.WITNESSING: ("witness", "observe", "acknowledge", "see", "recognize"),
    CeremonyCategory.SACRED_PAUSE: ("pause", "reflect", "consider", "contemplate", "breathe"),
    CeremonyCategory.RELATIONSHIP_BUILDING: ("connect", "relationship", "community", "support"),
    CeremonyCategory.HEALING: ("heal", "restore", "repair", "reconcile", "mend"),
    CeremonyCategory.CELEBRATION: ("celebrate", "milestone", "achievement", "success", "complete"),
    CeremonyCategory.OFFERING: ("offer", "gift", "contribute", "share", "give"),
}

CEREMONY_ACTIONS: Dict[CeremonyCategory, Tuple[str, ...]] = {
    CeremonyCategory.CO_CREATION: ("witness_collaboration", "honor_contributions", "amplify_voices"),
    CeremonyCategory.GRATITUDE_EXPRESSION: ("amplify_acknowledgment", "record_connection", "reciprocity_check"),
    CeremonyCategory.WITNESSING: ("hold_space", "reflect_back", "presence"),
    CeremonyCategory.SACRED_PAUSE: ("create_silence", "contemplation_prompt", "breathing_space"),
    CeremonyCategory.RELATIONSHIP_BUILDING: ("map_connections", "strengthen_ties", "introduce_support"),
    CeremonyCategory.HEALING: ("compassion_response", "restoration_path", "forgiveness_space"),
    CeremonyCategory.CELEBRATION: ("amplify_joy", "community_acknowledgment", "gratitude_circle"),
    CeremonyCategory.OFFERING: ("receive_gracefully", "honor_gift", "share_forward"),
    CeremonyCategory.INDIVIDUAL_OFFERING: ("witness_work", "hold_space", "gentle_acknowledgment"),
}
CEREMONY_DEFAULT_ACTIONS: Tuple[str, ...] = ("witness_work", "hold_space")

# Ordered: first matching energy wins.
ENERGY_WORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("urgent_flow", ("urgent", "critical", "asap", "emergency")),
    ("joyful_flow", ("excited", "happy", "great", "awesome")),
    ("seeking_support", ("stuck", "blocked", "help", "issue")),
    ("contemplative_flow", ("thoughtful", "consider", "reflect")),
)
DEFAULT_ENERGY = "steady_flow"
URGENT_ENERGY = "urgent_flow"

VULNERABLE_WORDS: Tuple[str, ...] = ("first", "new", "trying", "learning", "help")
ACHIEVEMENT_WORDS: Tuple[str, ...] = ("complete", "achieve", "milestone", "done")

# (words, bonus) pairs added to the 0.3 base long-term-impact score.
LONG_TERM_IMPACT: Tuple[Tuple[Tuple[str, ...], float], ...] = (
    (("architecture", "foundation", "core", "framework"), 0.3),
    (("document", "guide", "tutorial", "example"), 0.2),
    (("breaking", "migration", "deprecate"), 0.2),
)
LONG_TERM_BASE = 0.3


# =============================================================================
# STORY-ENGINE LENS (Miette - The Weaver)
# =============================================================================

STORY_KEYWORDS: Dict[StoryCategory, Tuple[str, ...]] = {
    StoryCategory.INCITING_INCIDENT: ("init", "start", "begin", "new", "first", "introduce"),
    StoryCategory.RISING_ACTION: ("add", "implement", "build", "develop", "progress", "continue"),
    StoryCategory.TURNING_POINT: ("feat:", "major", "significant", "pivot", "change", "transform"),
    StoryCategory.COMPLICATION: ("issue", "problem", "bug", "error", "conflict", "challenge"),
    StoryCategory.CRISIS: ("critical", "urgent", "breaking", "emergency", "blocker"),
    StoryCategory.CLIMAX: ("complete", "finish", "final", "release", "launch", "deploy"),
    StoryCategory.RESOLUTION: ("fix", "resolve", "close", "merge", "done"),
    StoryCategory.DENOUEMENT: ("cleanup", "refactor", "optimize", "polish", "improve"),
}

STORY_ACTIONS: Dict[StoryCategory, Tuple[str, ...]] = {
    StoryCategory.INCITING_INCIDENT: ("establish_stakes", "introduce_characters", "set_tone"),
    StoryCategory.RISING_ACTION: ("advance_narrative", "develop_characters", "build_tension"),
    StoryCategory.TURNING_POINT: ("mark_pivot", "shift_perspective", "update_arc"),
    StoryCategory.COMPLICATION: ("deepen_conflict", "raise_stakes", "add_obstacle"),
    StoryCategory.CRISIS: ("peak_tension", "force_decision", "approach_climax"),
    StoryCategory.CLIMAX: ("resolve_main_conflict", "character_transformation", "theme_revelation"),
    StoryCategory.RESOLUTION: ("tie_loose_ends", "show_consequences", "new_equilibrium"),
    StoryCategory.DENOUEMENT: ("reflect_journey", "hint_future", "final_image"),
}
STORY_DEFAULT_ACTIONS: Tuple[str, ...] = ("advance_narrative", "update_arc_position")

STORY_ACTS: Dict[StoryCategory, int] = {
    StoryCategory.INCITING_INCIDENT: 1,
    StoryCategory.RISING_ACTION: 2,
    StoryCategory.TURNING_POINT: 2,
    StoryCategory.COMPLICATION: 2,
    StoryCategory.CRISIS: 2,
    StoryCategory.CLIMAX: 3,
    StoryCategory.RESOLUTION: 3,
    StoryCategory.DENOUEMENT: 3,
}

BASE_TENSION: Dict[StoryCategory, float] = {
    StoryCategory.INCITING_INCIDENT: 0.4,
    StoryCategory.RISING_ACTION: 0.5,
    StoryCategory.TURNING_POINT: 0.7,
    StoryCategory.COMPLICATION: 0.6,
    StoryCategory.CRISIS: 0.9,
    StoryCategory.CLIMAX: 1.0,
    StoryCategory.RESOLUTION: 0.4,
    StoryCategory.DENOUEMENT: 0.2,
}

NEXT_BEAT: Dict[StoryCategory, StoryCategory] = {
    StoryCategory.INCITING_INCIDENT: StoryCategory.RISING_ACTION,
    StoryCategory.RISING_ACTION: StoryCategory.COMPLICATION,
    StoryCategory.TURNING_POINT: StoryCategory.RISING_ACTION,
    StoryCategory.COMPLICATION: StoryCategory.CRISIS,
    StoryCategory.CRISIS: StoryCategory.CLIMAX,
    StoryCategory.CLIMAX: StoryCategory.RESOLUTION,
    StoryCategory.RESOLUTION: StoryCategory.DENOUEMENT,
    StoryCategory.DENOUEMENT: StoryCategory.INCITING_INCIDENT,  # new cycle
}

STORY_FUNCTIONS: Dict[StoryCategory, NarrativeFunction] = {
    StoryCategory.INCITING_INCIDENT: NarrativeFunction.INCITING_INCIDENT,
    StoryCategory.RISING_ACTION: NarrativeFunction.RISING_ACTION,
    StoryCategory.TURNING_POINT: NarrativeFunction.TURNING_POINT,
    StoryCategory.COMPLICATION: NarrativeFunction.COMPLICATION,
    StoryCategory.CRISIS: NarrativeFunction.CRISIS,
    StoryCategory.CLIMAX: NarrativeFunction.CLIMAX,
    StoryCategory.RESOLUTION: NarrativeFunction.RESOLUTION,
    StoryCategory.DENOUEMENT: NarrativeFunction.DENOUEMENT,
}

URGENCY_WORDS: Tuple[str, ...] = ("urgent", "critical", "breaking")
MINIMIZING_WORDS: Tuple[str, ...] = ("minor", "small", "trivial")

CHARACTER_IMPACTS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("transformative", ("transform", "change", "grow", "learn")),
    ("character_testing", ("challenge", "struggle", "overcome")),
    ("relational", ("connect", "relationship", "team")),
)
DEFAULT_CHARACTER_IMPACT = "incremental"

THEME_RESONANCE: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("collaboration", ("together", "team", "collaborate")),
    ("integration", ("integrate", "connect", "bridge")),
    ("coherence", ("coherent", "consistent", "unified")),
    ("transformation", ("transform", "change", "evolve")),
)
DEFAULT_THEME_RESONANCE = "development"


# =============================================================================
# TOTALITY CHECKS
# =============================================================================

def _require_total(table: Mapping, enum: Type[Enum], exclude=()) -> None:
    missing = [m for m in enum if m not in table and m not in exclude]
    if missing:
        names = ", ".join(m.value for m in missing)
        raise RuntimeError(f"lexicon table for {enum.__name__} is missing: {names}")


_require_total(ENGINEER_KEYWORDS, EngineerCategory, exclude=(EngineerCategory.MAINTENANCE,))
_require_total(ENGINEER_ACTIONS, EngineerCategory)
_require_total(CEREMONY_KEYWORDS, CeremonyCategory, exclude=(CeremonyCategory.INDIVIDUAL_OFFERING,))
_require_total(CEREMONY_ACTIONS, CeremonyCategory)
for _table in (STORY_KEYWORDS, STORY_ACTIONS, STORY_ACTS, BASE_TENSION, NEXT_BEAT, STORY_FUNCTIONS):
    _require_total(_table, StoryCategory)
