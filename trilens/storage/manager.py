"""
Narrative State Manager

Persists ledgers, beats, cached analyses, routing history and episode
membership in a KeyValueStore so several processes can share one
narrative.

KEY LAYOUT (see StoreKeys):
===========================
{prefix}:state:{session}    serialized ledger              TTL state
{prefix}:state:current      id of the active session       no TTL
{prefix}:beats:{session}    list of beat ids, append order TTL beat
{prefix}:beat:{beat}        serialized beat                TTL beat
{prefix}:event:{event}      cached SynthesisResult         TTL event cache
{prefix}:routing:{session}  list of routing decisions      last 100 kept
{prefix}:episode:{episode}  {"beat_ids": [...]}

Stored JSON that fails to parse is logged and treated as absent; it
never propagates as an exception.
"""

from __future__ import annotations
import json
import logging
import time
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence

from ..config import EngineConfig, StoreConfig
from ..contracts.base import utc_now_iso
from ..contracts.events import AuditEventType
from ..contracts.ledger import Beat, NarrativeLedger, RoutingDecision
from ..contracts.lens import SynthesisResult
from ..ledger import (
    append_beat, append_routing_decision, create_ledger, refresh_coherence,
    start_new_episode
)
from ..serialization import (
    SerializationError, deserialize_analysis, deserialize_beat, deserialize_ledger,
    routing_decision_from_dict, routing_decision_to_dict, serialize_analysis,
    serialize_beat, serialize_ledger
)
from .keys import StoreKeys
from .store import InMemoryStore, KeyValueStore, StoreUnavailable, build_store

logger = logging.getLogger(__name__)


class NarrativeStateManager:
    """
    Example:
        manager = NarrativeStateManager(InMemoryStore())
        ledger = manager.get_or_create_state("story-1", "session-1")
        ledger = manager.add_beat_to_session("session-1", beat)
        manager.get_recent_beats("session-1", 3)   # newest first
    """

    def __init__(
        self,
        store: KeyValueStore,
        config: Optional[StoreConfig] = None,
        audit=None
    ):
        self._store = store
        self._config = config or StoreConfig()
        self._keys = StoreKeys(self._config.prefix)
        self._audit = audit

    @property
    def store(self) -> KeyValueStore:
        return self._store

    @property
    def keys(self) -> StoreKeys:
        return self._keys

    # =========================================================================
    # STATE
    # =========================================================================

    def get_state(self, session_id: str) -> Optional[NarrativeLedger]:
        key = self._keys.state(session_id)
        return self._decode(key, self._store.get(key), deserialize_ledger)

    def get_or_create_state(
        self,
        story_id: str,
        session_id: str,
        include_default_characters: bool = True,
        include_default_themes: bool = True
    ) -> NarrativeLedger:
        existing = self.get_state(session_id)
        if existing is not None:
            return existing
        ledger = create_ledger(
            story_id, session_id,
            include_default_characters=include_default_characters,
            include_default_themes=include_default_themes,
        )
        return self.save_state(ledger)

    def save_state(self, ledger: NarrativeLedger) -> NarrativeLedger:
        """Stamp ``updated_at``, write the ledger and mark its session current."""
        ledger = replace(ledger, updated_at=utc_now_iso())
        self._store.set_with_expiry(
            self._keys.state(ledger.session_id),
            self._config.state_ttl_seconds,
            serialize_ledger(ledger),
        )
        self._store.set(self._keys.current_state(), ledger.session_id)
        self._record("state_saved", ledger.session_id, beats=len(ledger.beats))
        return ledger

    def get_current_session(self) -> Optional[str]:
        return self._store.get(self._keys.current_state())

    def set_current_session(self, session_id: str) -> None:
        self._store.set(self._keys.current_state(), session_id)

    # =========================================================================
    # BEATS
    # =========================================================================

    def add_beat_to_session(self, session_id: str, beat: Beat) -> Optional[NarrativeLedger]:
        """
        Store the beat, index it under the session and append it to the
        session's ledger. Returns the saved ledger, or None when the
        session has no state (the beat itself is still stored).
        """
        ttl = self._config.beat_ttl_seconds
        beats_key = self._keys.beats(session_id)
        self._store.set_with_expiry(self._keys.beat(beat.id), ttl, serialize_beat(beat))
        self._store.append_to_list(beats_key, beat.id)
        self._store.set_expiry(beats_key, ttl)

        ledger = self.get_state(session_id)
        if ledger is None:
            logger.warning("Beat %s stored for session %s with no saved state", beat.id, session_id)
            return None
        return self.save_state(append_beat(ledger, beat))

    def get_beat(self, beat_id: str) -> Optional[Beat]:
        key = self._keys.beat(beat_id)
        return self._decode(key, self._store.get(key), deserialize_beat)

    def get_recent_beats(self, session_id: str, count: int = 10) -> List[Beat]:
        """Up to ``count`` beats, most recent first. Expired beats are skipped."""
        if count <= 0:
            return []
        beat_ids = self._store.range_list(self._keys.beats(session_id), -count, -1)
        beats = []
        for beat_id in reversed(beat_ids):
            beat = self.get_beat(beat_id)
            if beat is not None:
                beats.append(beat)
        return beats

    # =========================================================================
    # ANALYSIS CACHE
    # =========================================================================

    def cache_event_analysis(self, event_id: str, analysis: SynthesisResult) -> None:
        self._store.set_with_expiry(
            self._keys.event_analysis(event_id),
            self._config.event_cache_ttl_seconds,
            serialize_analysis(analysis),
        )

    def get_cached_analysis(self, event_id: str) -> Optional[SynthesisResult]:
        key = self._keys.event_analysis(event_id)
        return self._decode(key, self._store.get(key), deserialize_analysis)

    # =========================================================================
    # ROUTING
    # =========================================================================

    def record_routing_decision(
        self,
        session_id: str,
        decision: RoutingDecision
    ) -> Optional[NarrativeLedger]:
        """Push to the bounded history and fold the decision into the ledger."""
        key = self._keys.routing_history(session_id)
        self._store.append_to_list(key, json.dumps(routing_decision_to_dict(decision)))
        self._store.trim_list(key, -self._config.routing_history_limit, -1)

        ledger = self.get_state(session_id)
        if ledger is None:
            return None
        return self.save_state(refresh_coherence(append_routing_decision(ledger, decision)))

    def get_routing_history(self, session_id: str, count: int = 50) -> List[RoutingDecision]:
        """Up to ``count`` decisions, oldest first. Malformed entries are skipped."""
        if count <= 0:
            return []
        key = self._keys.routing_history(session_id)
        decisions = []
        for raw in self._store.range_list(key, -count, -1):
            decision = self._decode(key, raw, _routing_decision_from_json)
            if decision is not None:
                decisions.append(decision)
        return decisions

    # =========================================================================
    # EPISODES
    # =========================================================================

    def start_new_episode(self, session_id: str, episode_id: str) -> bool:
        ledger = self.get_state(session_id)
        if ledger is None:
            return False
        self.save_state(start_new_episode(ledger, episode_id))
        return True

    def save_episode(self, episode_id: str, beat_ids: Sequence[str]) -> None:
        self._store.set_with_expiry(
            self._keys.episode(episode_id),
            self._config.beat_ttl_seconds,
            json.dumps({"beat_ids": list(beat_ids)}),
        )

    def get_episode_beats(self, episode_id: str) -> List[Beat]:
        """Beats of an episode in stored order; missing beats are skipped."""
        key = self._keys.episode(episode_id)
        beat_ids = self._decode(key, self._store.get(key), _episode_beat_ids)
        if not beat_ids:
            return []
        beats = []
        for beat_id in beat_ids:
            beat = self.get_beat(beat_id)
            if beat is not None:
                beats.append(beat)
        return beats

    # =========================================================================
    # UTILITY
    # =========================================================================

    def list_sessions(self) -> List[str]:
        current = self._keys.current_state()
        return sorted(
            self._keys.session_from_state_key(key)
            for key in self._store.list_keys(self._keys.state_pattern())
            if key != current
        )

    def delete_session(self, session_id: str) -> bool:
        """Remove the session's state, beat index, beats and routing history."""
        beats_key = self._keys.beats(session_id)
        beat_ids = self._store.range_list(beats_key, 0, -1)
        if beat_ids:
            self._store.delete(*(self._keys.beat(b) for b in beat_ids))
        removed = self._store.delete(
            self._keys.state(session_id),
            beats_key,
            self._keys.routing_history(session_id),
        )
        if self.get_current_session() == session_id:
            self._store.delete(self._keys.current_state())
        self._record("session_deleted", session_id, keys=removed)
        logger.info("Deleted session %s", session_id)
        return removed > 0

    def health_check(self) -> Dict[str, Any]:
        start = time.perf_counter()
        try:
            connected = self._store.ping()
        except Exception as e:
            logger.warning("Store health check failed: %s", e)
            return {
                "status": "unhealthy",
                "connected": False,
                "error": str(e),
                "timestamp": utc_now_iso(),
            }
        result = {
            "status": "healthy" if connected else "unhealthy",
            "connected": connected,
            "latencyMs": round((time.perf_counter() - start) * 1000, 3),
            "timestamp": utc_now_iso(),
        }
        if not connected:
            result["error"] = "ping failed"
        return result

    def close(self) -> None:
        self._store.close()

    # =========================================================================
    # INTERNAL
    # =========================================================================

    def _decode(self, key: str, raw: Optional[str], build):
        if raw is None:
            return None
        try:
            return build(raw)
        except SerializationError as e:
            logger.warning("Malformed stored value at %s: %s", key, e)
            if self._audit is not None:
                self._audit.record(
                    AuditEventType.ERROR, "storage", "malformed_state",
                    entity_id=key, error=str(e)
                )
            return None

    def _record(self, action: str, entity_id: str, **metadata) -> None:
        if self._audit is not None:
            self._audit.record(
                AuditEventType.PERSISTENCE, "storage", action,
                entity_id=entity_id, **metadata
            )


def _routing_decision_from_json(raw: str) -> RoutingDecision:
    try:
        data = json.loads(raw)
        return routing_decision_from_dict(data)
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise SerializationError(f"{type(e).__name__}: {e}") from e


def _episode_beat_ids(raw: str) -> List[str]:
    try:
        data = json.loads(raw)
        beat_ids = data.get("beat_ids") or []
    except (ValueError, AttributeError) as e:
        raise SerializationError(f"{type(e).__name__}: {e}") from e
    if not isinstance(beat_ids, list):
        raise SerializationError("beat_ids is not a list")
    return [str(b) for b in beat_ids]


def create_state_manager(config: Optional[EngineConfig] = None, audit=None) -> NarrativeStateManager:
    """
    Build a manager from config. A redis backend that does not answer
    degrades to memory when the store config allows it; otherwise the
    StoreUnavailable error propagates.
    """
    config = config or EngineConfig()
    store_config = config.store
    try:
        store = build_store(store_config)
    except StoreUnavailable:
        if audit is not None:
            audit.record(AuditEventType.ERROR, "storage", "store_unavailable",
                         backend=store_config.backend)
        raise
    if store_config.backend == "redis" and isinstance(store, InMemoryStore) and audit is not None:
        audit.record(AuditEventType.PERSISTENCE, "storage", "degraded_to_memory")
    return NarrativeStateManager(store, store_config, audit)
