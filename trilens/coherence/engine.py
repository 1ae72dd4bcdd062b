"""
Narrative Coherence Engine

Runs the five scorers over a beat list, aggregates them into one 0-100
score, extracts routed gaps and assembles the trinity summary.

PIPELINE:
=========
flow -> character consistency -> pacing -> theme saturation -> continuity
     -> weighted aggregate -> gaps -> trinity summary

analyze() is a pure function of its inputs apart from gap ids, which
come from a counter owned by the engine instance: ids are unique within
one result and across calls on the same instance.
"""

from __future__ import annotations
import itertools
from collections.abc import Mapping
from typing import Dict, List, Sequence, Tuple

import numpy as np

from ..contracts.coherence import (
    CoherenceResult, CoherenceScore, ComponentScore, Gap, GapType, RoutingTarget
)
from ..contracts.events import AuditEventType
from ..contracts.ledger import Beat, NarrativeLedger
from .gaps import extract_gaps, routing_suggestions
from .scorers import (
    score_character_consistency, score_continuity, score_flow, score_pacing,
    score_theme_saturation
)
from .trinity import build_trinity

# (key, weight, gap type) in aggregation order
SCORERS: Tuple[Tuple[str, float, GapType], ...] = (
    ("narrative_flow", 1.2, GapType.STRUCTURAL),
    ("character_consistency", 1.2, GapType.CHARACTER),
    ("pacing", 1.0, GapType.STRUCTURAL),
    ("theme_saturation", 1.0, GapType.THEMATIC),
    ("continuity", 0.8, GapType.CONTINUITY),
)
SCORER_KEYS = tuple(key for key, _, _ in SCORERS)
DEFAULT_OVERALL = 50.0


def aggregate(components: Dict[str, ComponentScore]) -> float:
    """
    Weighted mean of the components present, normalised by the weights
    actually used. 50.0 when nothing ran.
    """
    present = [(components[key].score, weight) for key, weight, _ in SCORERS if key in components]
    if not present:
        return DEFAULT_OVERALL
    scores, weights = zip(*present)
    return float(np.average(np.array(scores, dtype=float), weights=np.array(weights, dtype=float)))


def _values(items) -> list:
    if items is None:
        return []
    if isinstance(items, Mapping):
        return list(items.values())
    return list(items)


class NarrativeCoherenceEngine:
    """
    Example:
        engine = NarrativeCoherenceEngine()
        result = engine.analyze(ledger.beats, ledger.characters, ledger.themes)
        result.score            # 0-100
        result.trinity.mia      # "Structure is 70% sound. ..."
    """

    def __init__(self, audit=None):
        self._audit = audit
        self._gap_counter = itertools.count(1)

    def _next_gap_id(self) -> str:
        return f"gap_{next(self._gap_counter)}"

    def score_components(
        self,
        beats: Sequence[Beat],
        characters=None,
        themes=None
    ) -> Dict[str, ComponentScore]:
        beats = list(beats)
        return {
            "narrative_flow": score_flow(beats),
            "character_consistency": score_character_consistency(beats, _values(characters)),
            "pacing": score_pacing(beats),
            "theme_saturation": score_theme_saturation(beats, _values(themes)),
            "continuity": score_continuity(beats),
        }

    def analyze(
        self,
        beats: Sequence[Beat],
        characters=None,
        themes=None
    ) -> CoherenceResult:
        """
        Score a beat list. ``characters`` and ``themes`` may be sequences
        or id-keyed mappings (as stored on the ledger).
        """
        components = self.score_components(beats, characters, themes)
        overall = aggregate(components)

        gaps = extract_gaps(
            [(key, gap_type, components[key]) for key, _, gap_type in SCORERS],
            self._next_gap_id,
        )

        result = CoherenceResult(
            coherence_score=CoherenceScore(
                overall=overall,
                narrative_flow=components["narrative_flow"],
                character_consistency=components["character_consistency"],
                pacing=components["pacing"],
                theme_saturation=components["theme_saturation"],
                continuity=components["continuity"],
            ),
            gaps=gaps,
            trinity=build_trinity(components, gaps),
        )

        if self._audit is not None:
            self._audit.record(
                AuditEventType.COHERENCE, "coherence", "narrative_analyzed",
                beats=len(beats), overall=round(overall, 2), gaps=len(gaps)
            )
        return result

    def analyze_ledger(self, ledger: NarrativeLedger) -> CoherenceResult:
        return self.analyze(ledger.beats, ledger.characters, ledger.themes)

    @staticmethod
    def routing_suggestions(gaps: Sequence[Gap]) -> Dict[RoutingTarget, List[Gap]]:
        return routing_suggestions(gaps)
