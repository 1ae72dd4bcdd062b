"""
Coherence Engine

Five heuristic scorers over a ledger's beat list, a weighted aggregate,
routed gap extraction and the trinity summary.
"""

from .engine import NarrativeCoherenceEngine, SCORERS, SCORER_KEYS, aggregate
from .gaps import ROUTES, extract_gaps, routing_suggestions, severity_for
from .scorers import (
    score_flow, score_character_consistency, score_pacing,
    score_theme_saturation, score_continuity
)
from .trinity import build_trinity, MINOR_ONLY

__all__ = [
    'NarrativeCoherenceEngine', 'SCORERS', 'SCORER_KEYS', 'aggregate',
    'ROUTES', 'extract_gaps', 'routing_suggestions', 'severity_for',
    'score_flow', 'score_character_consistency', 'score_pacing',
    'score_theme_saturation', 'score_continuity',
    'build_trinity', 'MINOR_ONLY',
]
