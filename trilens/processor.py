"""
Three-Lens Processor

High-level entry point: parse an event, run the three lenses, synthesize,
and optionally turn the result into a ledger beat.

FLOW:
=====
raw event -> parse_event -> Engineer / Ceremony / Story-Engine lenses
          -> synthesize -> (tracing callback) -> Result[SynthesisResult]

The processor holds no per-event state. The optional fallback callback is
shared by all three lenses and is only consulted when a lens finds no
keyword match.
"""

from __future__ import annotations
import hashlib
import time
from typing import Any, Callable, Dict, Optional, Union

from .contracts.base import Result, utc_now_iso
from .contracts.events import AuditEventType, EventEnvelope, EventKind
from .contracts.ledger import Beat, NarrativeFunction
from .contracts.lens import SynthesisResult
from .emotion import EmotionalToneClassifier
from .lenses import (
    CeremonyLens, EngineerLens, FallbackClassifier, StoryEngineLens,
    infer_webhook_kind, parse_event
)
from .lexicon import STORY_FUNCTIONS
from .serialization import perspective_to_dict
from .synthesis import synthesize

MAX_BEAT_CONTENT = 500

# (event_id, content_excerpt, engineer, ceremony, story_engine, lead_lens, coherence)
TracingCallback = Callable[[str, str, Dict[str, Any], Dict[str, Any], Dict[str, Any], str, float], None]


def story_function(category: str) -> NarrativeFunction:
    """Story-engine category to narrative function; unknown -> generic beat."""
    for member, function in STORY_FUNCTIONS.items():
        if member.value == category:
            return function
    return NarrativeFunction.BEAT


class ThreeLensProcessor:
    """
    Process events through all three lenses.

    Example:
        processor = ThreeLensProcessor()
        result = processor.process({"content": "we paired on this"}, EventKind.USER_INPUT)
        result.unwrap().lead_lens   # Lens.CEREMONY
    """

    def __init__(
        self,
        fallback: Optional[FallbackClassifier] = None,
        tracing_callback: Optional[TracingCallback] = None,
        audit=None,
        tone_classifier: Optional[EmotionalToneClassifier] = None
    ):
        self._engineer = EngineerLens(fallback, audit)
        self._ceremony = CeremonyLens(fallback, audit)
        self._story_engine = StoryEngineLens(fallback, audit)
        self._tracing_callback = tracing_callback
        self._audit = audit
        self._tones = tone_classifier or EmotionalToneClassifier(fallback, audit)

    def process(
        self,
        event: Any,
        kind: Union[EventKind, str, None] = None
    ) -> Result[SynthesisResult]:
        """
        Classify one event through all three lenses.

        Returns a failed Result (MISSING_PERSPECTIVE) only if a lens
        produced nothing; malformed events classify as empty content.
        """
        envelope = parse_event(event, kind)

        result = synthesize(
            self._engineer.classify(envelope),
            self._ceremony.classify(envelope),
            self._story_engine.classify(envelope),
        )

        event_id = self._event_id(envelope)
        if result.is_failure:
            if self._audit is not None:
                self._audit.record(
                    AuditEventType.ERROR, "synthesis", "synthesis_failed",
                    entity_id=event_id, code=result.error.code.name
                )
            return result

        analysis = result.value
        if self._audit is not None:
            self._audit.record(
                AuditEventType.SYNTHESIS, "synthesis", "event_synthesized",
                entity_id=event_id, kind=envelope.kind.value,
                lead_lens=analysis.lead_lens.value, coherence=analysis.coherence
            )

        if self._tracing_callback is not None:
            self._tracing_callback(
                event_id,
                self._excerpt(envelope),
                perspective_to_dict(analysis.engineer),
                perspective_to_dict(analysis.ceremony),
                perspective_to_dict(analysis.story_engine),
                analysis.lead_lens.value,
                analysis.coherence,
            )

        return result

    def process_webhook(self, raw: Dict[str, Any]) -> Result[SynthesisResult]:
        """GitHub webhook convenience: the kind is inferred from payload keys."""
        return self.process(raw, infer_webhook_kind(raw))

    def create_beat(
        self,
        event: Any,
        analysis: SynthesisResult,
        sequence: int,
        kind: Union[EventKind, str, None] = None
    ) -> Beat:
        """Build a ledger beat from an event and its analysis."""
        envelope = parse_event(event, kind)

        content = envelope.content() or envelope.kind.value
        content = content[:MAX_BEAT_CONTENT]

        act = analysis.story_engine.context.get("act")
        if not isinstance(act, int) or act not in (1, 2, 3):
            act = 2

        timestamp = utc_now_iso()
        digest = hashlib.sha256(
            f"{self._event_id(envelope)}|{sequence}|{timestamp}".encode()
        ).hexdigest()[:12]

        return Beat(
            id=f"beat_{digest}",
            sequence=sequence,
            content=content,
            narrative_function=story_function(analysis.story_engine.category),
            act=act,
            lead_lens=analysis.lead_lens,
            emotional_tone=self._tones.classify(content).label,
            source="processor",
            source_event_id=envelope.source_event_id(),
            timestamp=timestamp,
            analysis=analysis,
        )

    @staticmethod
    def _event_id(envelope: EventEnvelope) -> str:
        if envelope.event_id:
            return envelope.event_id
        return f"{envelope.kind.value}_{int(time.time() * 1000)}"

    @staticmethod
    def _excerpt(envelope: EventEnvelope) -> str:
        content = envelope.content()
        if content:
            return content[:MAX_BEAT_CONTENT]
        return f"Event: {envelope.kind.value}"
