"""
Shared Test Fixtures

Explicit builders for events, perspectives, analyses and beats.
All fixtures are deterministic - no random generation.
"""

from typing import Optional, Sequence

from trilens.contracts.lens import Lens, LensPerspective, SynthesisResult
from trilens.contracts.ledger import Beat, CharacterState, NarrativeFunction, ThematicThread


FIXED_TS = "2026-01-01T10:00:00+00:00"


def push_event(messages: Sequence[str], authors: Sequence[str] = ("alice",), sender: str = "alice",
               head_commit_id: str = "abc123") -> dict:
    """
    GitHub push webhook with one commit per message.

    Authors left over once the messages run out get an empty commit each,
    so every author shows up as a contributor.
    """
    count = max(len(messages), len(authors)) if messages else 0
    commits = [
        {"message": messages[i] if i < len(messages) else "", "author": {"name": authors[i % len(authors)]}}
        for i in range(count)
    ]
    return {
        "event_type": "github.push",
        "sender": {"login": sender},
        "payload": {"commits": commits, "head_commit": {"id": head_commit_id}},
    }


def issue_event(title: str, body: str = "", author: str = "bob", issue_id: int = 42) -> dict:
    return {
        "sender": {"login": author},
        "payload": {"issue": {"title": title, "body": body, "user": {"login": author}, "id": issue_id}},
    }


def text_event(content: str, sender: Optional[str] = None, event_id: Optional[str] = None) -> dict:
    event = {"event_type": "user.input", "content": content}
    if sender:
        event["sender"] = sender
    if event_id:
        event["event_id"] = event_id
    return event


def perspective(lens: Lens, category: str, confidence: float, **context) -> LensPerspective:
    return LensPerspective(lens=lens, category=category, confidence=confidence, context=context)


def make_analysis(
    lead: Lens = Lens.STORY_ENGINE,
    coherence: float = 0.7,
    story_category: str = "rising_action",
    act: int = 2
) -> SynthesisResult:
    return SynthesisResult(
        engineer=perspective(Lens.ENGINEER, "maintenance", 0.5, estimated_complexity="low"),
        ceremony=perspective(Lens.CEREMONY, "individual_offering", 0.6, sender_energy="steady_flow"),
        story_engine=perspective(Lens.STORY_ENGINE, story_category, 0.55, act=act, dramatic_tension=0.5),
        lead_lens=lead,
        coherence=coherence,
        timestamp=FIXED_TS,
    )


def make_beat(
    sequence: int,
    function: NarrativeFunction = NarrativeFunction.RISING_ACTION,
    tone: str = "neutral",
    character_id: Optional[str] = None,
    tags: Sequence[str] = (),
    beat_id: Optional[str] = None
) -> Beat:
    return Beat(
        id=beat_id or f"beat_{sequence}",
        sequence=sequence,
        content=f"Beat number {sequence}",
        narrative_function=function,
        act=2,
        emotional_tone=tone,
        thematic_tags=tuple(tags),
        character_id=character_id,
        timestamp=FIXED_TS,
    )


def make_character(char_id: str = "hero", name: str = "Hero", arc_position: float = 0.0) -> CharacterState:
    return CharacterState(id=char_id, name=name, archetype="The Hero", lens=Lens.STORY_ENGINE,
                          arc_position=arc_position)


def make_theme(theme_id: str = "trust", name: str = "Trust", strength: float = 0.5) -> ThematicThread:
    return ThematicThread(id=theme_id, name=name, description="", strength=strength)


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
