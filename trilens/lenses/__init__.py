"""
Lens Classifiers

Three independent keyword classifiers, one per viewpoint. Each takes an
event envelope and returns a LensPerspective; none of them raises on bad
input.
"""

from .scoring import (
    FallbackClassifier, Verdict, LensProfile,
    ENGINEER_PROFILE, CEREMONY_PROFILE, STORY_PROFILE, MAX_CONFIDENCE
)
from .envelope import parse_event, infer_webhook_kind, find_kind
from .engineer import EngineerLens
from .ceremony import CeremonyLens
from .story_engine import StoryEngineLens

__all__ = [
    'FallbackClassifier', 'Verdict', 'LensProfile',
    'ENGINEER_PROFILE', 'CEREMONY_PROFILE', 'STORY_PROFILE', 'MAX_CONFIDENCE',
    'parse_event', 'infer_webhook_kind', 'find_kind',
    'EngineerLens', 'CeremonyLens', 'StoryEngineLens',
]
