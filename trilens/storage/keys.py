"""
Store key namespace.

Templates are fixed for interop with other readers of the same store;
only the prefix is configurable. An empty prefix renders the bare
templates (``state:{session_id}``).
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class StoreKeys:
    prefix: str = "ncp"

    def _key(self, suffix: str) -> str:
        return f"{self.prefix}:{suffix}" if self.prefix else suffix

    def state(self, session_id: str) -> str:
        return self._key(f"state:{session_id}")

    def current_state(self) -> str:
        return self._key("state:current")

    def beats(self, session_id: str) -> str:
        return self._key(f"beats:{session_id}")

    def beat(self, beat_id: str) -> str:
        return self._key(f"beat:{beat_id}")

    def event_analysis(self, event_id: str) -> str:
        return self._key(f"event:{event_id}")

    def routing_history(self, session_id: str) -> str:
        return self._key(f"routing:{session_id}")

    def episode(self, episode_id: str) -> str:
        return self._key(f"episode:{episode_id}")

    def state_pattern(self) -> str:
        return self._key("state:*")

    def session_from_state_key(self, key: str) -> str:
        return key[len(self._key("state:")):]
