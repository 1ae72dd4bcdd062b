"""
Audit Log Tests
===============

INVARIANTS TESTED:
1. Entries are only appended; reads return copies
2. Unknown layers get a collector instead of being dropped
3. Metadata is stored as sorted string pairs
"""

from trilens.contracts.events import AuditEventType
from trilens.observability import AuditLog


class TestAuditLog:

    def test_record_returns_entry(self):
        audit = AuditLog()
        entry = audit.record(AuditEventType.LEDGER, "ledger", "unknown_theme", entity_id="t1", b=2, a="x")
        assert entry.entry_id.startswith("audit_")
        assert entry.metadata == (("a", "x"), ("b", "2"))
        assert audit.entry_count == 1

    def test_filter_by_layer_and_type(self):
        audit = AuditLog()
        audit.record(AuditEventType.LEDGER, "ledger", "one")
        audit.record(AuditEventType.ERROR, "ledger", "two")
        audit.record(AuditEventType.ERROR, "storage", "three")
        assert [e.action for e in audit.entries(layer="ledger")] == ["one", "two"]
        assert [e.action for e in audit.entries(event_type=AuditEventType.ERROR)] == ["two", "three"]
        assert audit.entries(layer="missing") == []

    def test_unknown_layer_collected(self):
        audit = AuditLog()
        audit.record(AuditEventType.SYNTHESIS, "custom", "ran")
        assert len(audit.entries(layer="custom")) == 1

    def test_reads_are_copies(self):
        audit = AuditLog()
        audit.record(AuditEventType.LEDGER, "ledger", "one")
        audit.entries(layer="ledger").clear()
        assert audit.entry_count == 1

    def test_entry_ids_unique(self):
        audit = AuditLog()
        ids = {audit.record(AuditEventType.LEDGER, "ledger", "same").entry_id for _ in range(5)}
        assert len(ids) == 5

    def test_report_counts(self):
        audit = AuditLog()
        audit.record(AuditEventType.LEDGER, "ledger", "one")
        audit.record(AuditEventType.ERROR, "storage", "two")
        report = audit.report()
        assert report["total_entries"] == 2
        assert report["by_layer"] == {"ledger": 1, "storage": 1}
        assert report["by_event_type"] == {"ledger": 1, "error": 1}
