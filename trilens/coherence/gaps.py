"""
Gap Extraction

Turns scorer issues into typed, severity-ranked, routed Gap records.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Sequence, Tuple

from ..contracts.coherence import (
    ComponentScore, ComponentStatus, Gap, GapSeverity, GapType, RoutingTarget
)


ROUTES: Dict[GapType, RoutingTarget] = {
    GapType.STRUCTURAL: RoutingTarget.STRUCTURIST,
    GapType.CHARACTER: RoutingTarget.STORYTELLER,
    GapType.THEMATIC: RoutingTarget.STRUCTURIST,
    GapType.SENSORY: RoutingTarget.STORYTELLER,
    GapType.CONTINUITY: RoutingTarget.AUTHOR,
}

SEVERITY_ORDER = {
    GapSeverity.CRITICAL: 0,
    GapSeverity.MODERATE: 1,
    GapSeverity.MINOR: 2,
}

MODERATE_MARKERS = ("rarely", "disappears")

_missing = [t for t in GapType if t not in ROUTES]
if _missing:
    raise RuntimeError(f"no routing target for gap types: {_missing}")


def severity_for(component: ComponentScore, issue: str) -> GapSeverity:
    if component.status == ComponentStatus.CRITICAL:
        return GapSeverity.CRITICAL
    if any(marker in issue for marker in MODERATE_MARKERS):
        return GapSeverity.MODERATE
    return GapSeverity.MINOR


def extract_gaps(
    components: Sequence[Tuple[str, GapType, ComponentScore]],
    next_id: Callable[[], str]
) -> Tuple[Gap, ...]:
    """
    One gap per issue, in scorer order, then stably sorted
    critical -> moderate -> minor.

    ``components`` holds (scorer key, gap type, score) triples.
    """
    gaps: List[Gap] = []
    for key, gap_type, component in components:
        for issue in component.issues:
            gaps.append(Gap(
                id=next_id(),
                gap_type=gap_type,
                severity=severity_for(component, issue),
                description=issue,
                suggested_route=ROUTES[gap_type],
                location={"component": key},
            ))
    gaps.sort(key=lambda g: SEVERITY_ORDER[g.severity])
    return tuple(gaps)


def routing_suggestions(gaps: Sequence[Gap]) -> Dict[RoutingTarget, List[Gap]]:
    """Gaps grouped by routing target; every target is present."""
    routing: Dict[RoutingTarget, List[Gap]] = {target: [] for target in RoutingTarget}
    for gap in gaps:
        routing[gap.suggested_route].append(gap)
    return routing
