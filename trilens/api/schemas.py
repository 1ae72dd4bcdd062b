"""
API Request Schemas

Pydantic models for request bodies. Field aliases follow the camelCase
wire format used by trilens.serialization; snake_case names are also
accepted. Responses are plain dicts from the serialization helpers.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..contracts.base import utc_now_iso
from ..contracts.ledger import Beat, CharacterState, ThematicThread, find_function
from ..contracts.lens import find_lens


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class EventRequest(_CamelModel):
    """An event to classify. ``kind`` is an EventKind value; omitted means user.input."""
    kind: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)


class SessionEventRequest(EventRequest):
    story_id: Optional[str] = Field(default=None, alias="storyId")


class BeatModel(_CamelModel):
    id: str
    sequence: int
    content: str = ""
    narrative_function: str = Field(default="beat", alias="narrativeFunction")
    act: int = 2
    lead_lens: str = Field(default="story_engine", alias="leadLens")
    emotional_tone: str = Field(default="neutral", alias="emotionalTone")
    thematic_tags: List[str] = Field(default_factory=list, alias="thematicTags")
    character_id: Optional[str] = Field(default=None, alias="characterId")
    character_arc_impact: float = Field(default=0.0, alias="characterArcImpact")
    timestamp: Optional[str] = None

    def to_beat(self) -> Beat:
        return Beat(
            id=self.id,
            sequence=self.sequence,
            content=self.content,
            narrative_function=find_function(self.narrative_function),
            act=self.act,
            lead_lens=find_lens(self.lead_lens),
            emotional_tone=self.emotional_tone,
            thematic_tags=tuple(self.thematic_tags),
            character_id=self.character_id,
            character_arc_impact=self.character_arc_impact,
            timestamp=self.timestamp or utc_now_iso(),
        )


class CharacterModel(_CamelModel):
    id: str
    name: str
    archetype: str = ""
    lens: str = "story_engine"
    arc_position: float = Field(default=0.0, alias="arcPosition")

    def to_character(self) -> CharacterState:
        return CharacterState(
            id=self.id,
            name=self.name,
            archetype=self.archetype,
            lens=find_lens(self.lens),
            arc_position=self.arc_position,
        )


class ThemeModel(_CamelModel):
    id: str
    name: str
    description: str = ""
    strength: float = 0.5

    def to_theme(self) -> ThematicThread:
        return ThematicThread(
            id=self.id,
            name=self.name,
            description=self.description,
            strength=self.strength,
        )


class CoherenceRequest(_CamelModel):
    beats: List[BeatModel] = Field(default_factory=list)
    characters: List[CharacterModel] = Field(default_factory=list)
    themes: List[ThemeModel] = Field(default_factory=list)
