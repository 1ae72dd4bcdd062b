"""
Observability & Audit Layer

RESPONSIBILITY: Append-only audit trail of classification, synthesis,
ledger, coherence and persistence activity.
ALLOWED INPUTS: AuditLogEntry records from any layer
OUTPUTS: Filtered entry lists, summary reports

WHAT THIS LAYER MUST NOT DO:
============================
- Modify system behavior
- Filter or interpret events at collection time (only record them)
- Make decisions based on logged data

BOUNDARY ENFORCEMENT:
=====================
- Entries are frozen dataclasses; collectors only append
- Unknown layers get a collector on first use rather than being dropped
- Read access returns copies
"""

from __future__ import annotations
from typing import Dict, List, Optional
import hashlib

from .contracts.base import utc_now_iso
from .contracts.events import AuditLogEntry, AuditEventType


DEFAULT_LAYERS = ("lenses", "synthesis", "ledger", "coherence", "storage", "api")


# =============================================================================
# LOG COLLECTOR (One per layer)
# =============================================================================

class LogCollector:
    """
    Append-only collector for one layer's audit entries.
    """

    def __init__(self, layer_name: str):
        self._layer_name = layer_name
        self._entries: List[AuditLogEntry] = []

    def collect(self, entry: AuditLogEntry):
        """Collect an audit entry (append-only)."""
        self._entries.append(entry)

    def get_entries(
        self,
        event_type: Optional[AuditEventType] = None
    ) -> List[AuditLogEntry]:
        """Get entries, optionally filtered by event type."""
        if event_type is None:
            return list(self._entries)
        return [e for e in self._entries if e.event_type == event_type]

    @property
    def layer_name(self) -> str:
        return self._layer_name

    @property
    def entry_count(self) -> int:
        return len(self._entries)


# =============================================================================
# AUDIT LOG (Orchestrates all collectors)
# =============================================================================

class AuditLog:
    """
    Central audit log shared by the processor, coherence engine and
    state manager of one deployment.
    """

    def __init__(self, layers=DEFAULT_LAYERS):
        self._collectors: Dict[str, LogCollector] = {
            name: LogCollector(name) for name in layers
        }
        self._sequence = 0

    def collect(self, entry: AuditLogEntry):
        """Collect an audit log entry from any layer."""
        collector = self._collectors.get(entry.layer)
        if collector is None:
            collector = LogCollector(entry.layer)
            self._collectors[entry.layer] = collector
        collector.collect(entry)

    def record(
        self,
        event_type: AuditEventType,
        layer: str,
        action: str,
        entity_id: Optional[str] = None,
        **metadata
    ) -> AuditLogEntry:
        """Build, collect and return an entry. Metadata values are stringified."""
        self._sequence += 1
        timestamp = utc_now_iso()
        digest = hashlib.sha256(
            f"{layer}_{action}|{timestamp}|{self._sequence}".encode()
        ).hexdigest()[:16]

        entry = AuditLogEntry(
            entry_id=f"audit_{digest}",
            event_type=event_type,
            timestamp=timestamp,
            layer=layer,
            action=action,
            entity_id=entity_id,
            metadata=tuple((key, str(value)) for key, value in sorted(metadata.items()))
        )
        self.collect(entry)
        return entry

    def entries(
        self,
        layer: Optional[str] = None,
        event_type: Optional[AuditEventType] = None
    ) -> List[AuditLogEntry]:
        """Unified log across all layers (or one), in timestamp order."""
        if layer is not None:
            collector = self._collectors.get(layer)
            return collector.get_entries(event_type) if collector else []

        all_entries = []
        for collector in self._collectors.values():
            all_entries.extend(collector.get_entries(event_type))
        all_entries.sort(key=lambda e: e.timestamp)
        return all_entries

    @property
    def entry_count(self) -> int:
        return sum(c.entry_count for c in self._collectors.values())

    def report(self) -> Dict:
        """Counts by layer and event type."""
        entries = self.entries()

        by_layer = {}
        by_type = {}
        for entry in entries:
            by_layer[entry.layer] = by_layer.get(entry.layer, 0) + 1
            by_type[entry.event_type.value] = by_type.get(entry.event_type.value, 0) + 1

        return {
            'total_entries': len(entries),
            'by_layer': by_layer,
            'by_event_type': by_type,
            'generated_at': utc_now_iso()
        }
