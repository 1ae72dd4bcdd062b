"""
Trilens Narrative

Classifies development events through three interpretive lenses,
synthesizes a lead lens, keeps the resulting story in an immutable
ledger and scores that ledger for narrative coherence.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Frozen data types and the Error / Result pair
   - MUST NOT: Import from any other trilens module

2. LENSES (lenses/, lexicon.py)
   - Engineer, Ceremony and Story-Engine keyword classifiers
   - Outputs: LensPerspective
   - MUST NOT: Hold state between events

3. SYNTHESIS & PROCESSING (synthesis.py, processor.py, emotion.py)
   - Lead-lens choice, agreement score, beat construction
   - Outputs: Result[SynthesisResult], Beat

4. LEDGER (ledger.py)
   - Pure operations returning new NarrativeLedger values

5. COHERENCE (coherence/)
   - Five scorers, weighted aggregate, routed gaps, trinity summary

6. STORAGE (storage/)
   - Key-value persistence of ledgers, beats and routing history

7. OBSERVABILITY (observability.py)
   - Append-only audit log
   - MUST NOT: Modify system behavior

8. API (api/)
   - FastAPI surface; the only layer that reads the environment at startup

CONSTRAINTS ENFORCED:
=====================
- Immutability-first: ledger types are frozen, operations return new values
- Determinism: same event -> same perspectives (timestamps aside)
- Explicit errors: expected failures travel as Result, not exceptions
"""

__version__ = "0.1.0"

from .coherence import NarrativeCoherenceEngine
from .config import EngineConfig, FallbackConfig, StoreConfig
from .contracts import (
    Error, ErrorCode, Result, Lens, EventKind, LensPerspective, SynthesisResult,
    Beat, NarrativeLedger, CoherenceResult
)
from .emotion import EmotionalToneClassifier, classify_emotional_tone
from .observability import AuditLog
from .processor import ThreeLensProcessor
from .synthesis import synthesize

__all__ = [
    'NarrativeCoherenceEngine',
    'EngineConfig', 'FallbackConfig', 'StoreConfig',
    'Error', 'ErrorCode', 'Result', 'Lens', 'EventKind', 'LensPerspective',
    'SynthesisResult', 'Beat', 'NarrativeLedger', 'CoherenceResult',
    'EmotionalToneClassifier', 'classify_emotional_tone',
    'AuditLog', 'ThreeLensProcessor', 'synthesize',
]
