"""
Narrative State Manager Tests
=============================

INVARIANTS TESTED:
1. Saved ledgers read back equal, with updated_at stamped
2. Malformed stored JSON reads as absent and is logged, never raised
3. Beat index and routing history keep append order; history is bounded
4. Keys expire after their configured TTLs
5. Deleting a session removes its state, beats and history
"""

import json
import logging

import pytest

from trilens.config import EngineConfig, StoreConfig
from trilens.contracts.events import AuditEventType
from trilens.ledger import create_ledger, create_routing_decision
from trilens.observability import AuditLog
from trilens.storage import InMemoryStore, NarrativeStateManager, StoreUnavailable, create_state_manager

from tests.fixtures import FakeClock, make_analysis, make_beat


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def audit():
    return AuditLog()


@pytest.fixture
def manager(clock, audit):
    return NarrativeStateManager(InMemoryStore(clock=clock), StoreConfig(), audit)


def decision(coherence=0.7, decision_id=None):
    ledger = create_ledger("story", "s1")
    return create_routing_decision("engineer", "bug_fix", make_analysis(coherence=coherence),
                                   ledger.position, 0.8, decision_id=decision_id)


class TestState:

    def test_get_or_create_persists(self, manager):
        created = manager.get_or_create_state("story", "s1")
        assert manager.get_state("s1") == created
        assert manager.get_current_session() == "s1"

    def test_get_or_create_returns_existing(self, manager):
        manager.get_or_create_state("story", "s1")
        again = manager.get_or_create_state("other-story", "s1")
        assert again.story_id == "story"

    def test_create_without_defaults(self, manager):
        ledger = manager.get_or_create_state("story", "s1", include_default_characters=False)
        assert ledger.characters == {}
        assert ledger.themes != {}

    def test_missing_state(self, manager):
        assert manager.get_state("nobody") is None

    def test_malformed_state_is_absent(self, manager, audit, caplog):
        manager.store.set(manager.keys.state("s1"), "not json")
        with caplog.at_level(logging.WARNING, logger="trilens.storage.manager"):
            assert manager.get_state("s1") is None
        assert "Malformed stored value" in caplog.text
        assert [e.action for e in audit.entries(layer="storage", event_type=AuditEventType.ERROR)] == [
            "malformed_state"
        ]

    def test_state_ttl(self, clock, audit):
        manager = NarrativeStateManager(InMemoryStore(clock=clock), StoreConfig(state_ttl_hours=1), audit)
        manager.get_or_create_state("story", "s1")
        clock.advance(3600)
        assert manager.get_state("s1") is None

    def test_save_recorded(self, manager, audit):
        manager.get_or_create_state("story", "s1")
        entries = audit.entries(layer="storage", event_type=AuditEventType.PERSISTENCE)
        assert [(e.action, e.entity_id) for e in entries] == [("state_saved", "s1")]

    def test_custom_prefix(self, clock):
        manager = NarrativeStateManager(InMemoryStore(clock=clock), StoreConfig(prefix="saga"))
        manager.get_or_create_state("story", "s1")
        assert manager.store.get("saga:state:current") == "s1"


class TestBeats:

    def test_add_beat_updates_ledger(self, manager):
        manager.get_or_create_state("story", "s1")
        ledger = manager.add_beat_to_session("s1", make_beat(1))
        assert ledger.position.beat_count == 1
        assert manager.get_state("s1").beats[0].id == "beat_1"
        assert manager.get_beat("beat_1") == make_beat(1)

    def test_add_beat_without_state(self, manager, caplog):
        with caplog.at_level(logging.WARNING, logger="trilens.storage.manager"):
            assert manager.add_beat_to_session("ghost", make_beat(1)) is None
        assert manager.get_beat("beat_1") is not None
        assert "no saved state" in caplog.text

    def test_recent_beats_newest_first(self, manager):
        manager.get_or_create_state("story", "s1")
        for n in range(1, 6):
            manager.add_beat_to_session("s1", make_beat(n))
        assert [b.sequence for b in manager.get_recent_beats("s1", 3)] == [5, 4, 3]
        assert manager.get_recent_beats("s1", 0) == []

    def test_expired_beats_skipped(self, clock):
        manager = NarrativeStateManager(InMemoryStore(clock=clock), StoreConfig(beat_ttl_hours=1))
        manager.add_beat_to_session("s1", make_beat(1))
        clock.advance(3600)
        assert manager.get_recent_beats("s1") == []


class TestAnalysisCache:

    def test_round_trip(self, manager):
        analysis = make_analysis()
        manager.cache_event_analysis("evt-1", analysis)
        assert manager.get_cached_analysis("evt-1") == analysis

    def test_expires(self, manager, clock):
        manager.cache_event_analysis("evt-1", make_analysis())
        clock.advance(24 * 3600)
        assert manager.get_cached_analysis("evt-1") is None


class TestRouting:

    def test_history_oldest_first(self, manager):
        manager.get_or_create_state("story", "s1")
        manager.record_routing_decision("s1", decision(decision_id="route_a"))
        manager.record_routing_decision("s1", decision(decision_id="route_b"))
        assert [d.id for d in manager.get_routing_history("s1")] == ["route_a", "route_b"]

    def test_history_bounded(self, clock):
        manager = NarrativeStateManager(InMemoryStore(clock=clock), StoreConfig(routing_history_limit=3))
        for n in range(5):
            manager.record_routing_decision("s1", decision(decision_id=f"route_{n}"))
        assert [d.id for d in manager.get_routing_history("s1")] == ["route_2", "route_3", "route_4"]

    def test_record_refreshes_coherence(self, manager):
        manager.get_or_create_state("story", "s1")
        manager.record_routing_decision("s1", decision(0.4))
        ledger = manager.record_routing_decision("s1", decision(0.8))
        assert ledger.overall_coherence == pytest.approx(0.6)
        assert len(manager.get_state("s1").routing_decisions) == 2

    def test_record_without_state(self, manager):
        assert manager.record_routing_decision("ghost", decision()) is None
        assert len(manager.get_routing_history("ghost")) == 1

    def test_malformed_entry_skipped(self, manager):
        key = manager.keys.routing_history("s1")
        manager.store.append_to_list(key, "{broken")
        manager.record_routing_decision("s1", decision(decision_id="route_ok"))
        assert [d.id for d in manager.get_routing_history("s1")] == ["route_ok"]


class TestEpisodes:

    def test_start_new_episode(self, manager):
        manager.get_or_create_state("story", "s1")
        manager.add_beat_to_session("s1", make_beat(1))
        assert manager.start_new_episode("s1", "s1-b1") is True
        ledger = manager.get_state("s1")
        assert ledger.current_episode_id == "s1-b1"
        assert ledger.episode_beats_count == 0

    def test_start_new_episode_without_state(self, manager):
        assert manager.start_new_episode("ghost", "e1") is False

    def test_episode_beats(self, manager):
        manager.add_beat_to_session("s1", make_beat(1))
        manager.add_beat_to_session("s1", make_beat(2))
        manager.save_episode("e1", ["beat_2", "beat_1", "beat_missing"])
        assert [b.id for b in manager.get_episode_beats("e1")] == ["beat_2", "beat_1"]
        assert json.loads(manager.store.get("ncp:episode:e1")) == {
            "beat_ids": ["beat_2", "beat_1", "beat_missing"]
        }

    def test_unknown_episode(self, manager):
        assert manager.get_episode_beats("nothing") == []


class TestSessions:

    def test_list_sessions_sorted_without_current(self, manager):
        for sid in ("s2", "s1", "s3"):
            manager.get_or_create_state("story", sid)
        assert manager.list_sessions() == ["s1", "s2", "s3"]

    def test_delete_session(self, manager):
        manager.get_or_create_state("story", "s1")
        manager.add_beat_to_session("s1", make_beat(1))
        manager.record_routing_decision("s1", decision())
        assert manager.delete_session("s1") is True
        assert manager.get_state("s1") is None
        assert manager.get_beat("beat_1") is None
        assert manager.get_routing_history("s1") == []
        assert manager.get_current_session() is None

    def test_delete_unknown_session(self, manager):
        assert manager.delete_session("ghost") is False

    def test_set_current_session(self, manager):
        manager.set_current_session("s9")
        assert manager.get_current_session() == "s9"

    def test_health_check(self, manager):
        health = manager.health_check()
        assert health["status"] == "healthy"
        assert health["connected"] is True
        assert health["latencyMs"] >= 0


class TestCreateStateManager:

    def test_default_memory(self):
        manager = create_state_manager()
        assert isinstance(manager.store, InMemoryStore)

    def test_degraded_redis_audited(self):
        audit = AuditLog()
        config = EngineConfig(store=StoreConfig(backend="redis", url="redis://localhost:1/0",
                                                socket_timeout=0.5))
        manager = create_state_manager(config, audit)
        assert isinstance(manager.store, InMemoryStore)
        assert [e.action for e in audit.entries(layer="storage")] == ["degraded_to_memory"]

    def test_unavailable_redis_audited_and_raised(self):
        audit = AuditLog()
        config = EngineConfig(store=StoreConfig(backend="redis", url="redis://localhost:1/0",
                                                socket_timeout=0.5, degrade_to_memory=False))
        with pytest.raises(StoreUnavailable):
            create_state_manager(config, audit)
        assert [e.action for e in audit.entries(layer="storage")] == ["store_unavailable"]
