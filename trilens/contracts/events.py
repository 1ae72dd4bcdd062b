"""
Event Contracts

Closed set of event envelope shapes the lenses can read, plus the audit
records the observability layer collects.

CLOSED WORLD:
=============
Each supported payload shape has exactly one variant class and is
selected by an explicit EventKind tag. Variants are built once from the
raw payload (trilens.lenses.envelope.parse_event) and are read-only
afterward; lens code never inspects raw dicts.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple, Union


class EventKind(Enum):
    """Types of events that can be processed."""
    GITHUB_PUSH = "github.push"
    GITHUB_ISSUE = "github.issue"
    GITHUB_PR = "github.pull_request"
    GITHUB_COMMENT = "github.comment"
    GITHUB_REVIEW = "github.review"
    USER_INPUT = "user.input"
    AGENT_ACTION = "agent.action"
    SYSTEM_EVENT = "system.event"


def _dedupe(names) -> Tuple[str, ...]:
    seen = []
    for name in names:
        if name and name not in seen:
            seen.append(name)
    return tuple(seen) if seen else ("unknown",)


# =============================================================================
# ENVELOPE VARIANTS
# =============================================================================

@dataclass(frozen=True)
class Commit:
    message: str
    author: Optional[str] = None


@dataclass(frozen=True)
class PushEvent:
    kind: EventKind
    commits: Tuple[Commit, ...] = field(default_factory=tuple)
    sender: Optional[str] = None
    head_commit_id: Optional[str] = None
    event_id: Optional[str] = None

    def content(self) -> str:
        return " ".join(commit.message for commit in self.commits if commit.message)

    def contributors(self) -> Tuple[str, ...]:
        return _dedupe([self.sender] + [commit.author for commit in self.commits])

    def commit_count(self) -> int:
        return len(self.commits)

    def source_event_id(self) -> Optional[str]:
        return self.head_commit_id


@dataclass(frozen=True)
class IssueEvent:
    kind: EventKind
    title: str = ""
    body: str = ""
    author: Optional[str] = None
    sender: Optional[str] = None
    issue_id: Optional[str] = None
    event_id: Optional[str] = None

    def content(self) -> str:
        return " ".join(part for part in (self.title, self.body) if part)

    def contributors(self) -> Tuple[str, ...]:
        return _dedupe([self.sender, self.author])

    def commit_count(self) -> int:
        return 0

    def source_event_id(self) -> Optional[str]:
        return self.issue_id


@dataclass(frozen=True)
class PullRequestEvent:
    kind: EventKind
    title: str = ""
    body: str = ""
    author: Optional[str] = None
    sender: Optional[str] = None
    pr_id: Optional[str] = None
    event_id: Optional[str] = None

    def content(self) -> str:
        return " ".join(part for part in (self.title, self.body) if part)

    def contributors(self) -> Tuple[str, ...]:
        return _dedupe([self.sender, self.author])

    def commit_count(self) -> int:
        return 0

    def source_event_id(self) -> Optional[str]:
        return self.pr_id


@dataclass(frozen=True)
class CommentEvent:
    kind: EventKind
    body: str = ""
    author: Optional[str] = None
    sender: Optional[str] = None
    event_id: Optional[str] = None

    def content(self) -> str:
        return self.body

    def contributors(self) -> Tuple[str, ...]:
        return _dedupe([self.sender, self.author])

    def commit_count(self) -> int:
        return 0

    def source_event_id(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class TextEvent:
    """Free text: user prompts, agent actions, system notices."""
    kind: EventKind
    text: str = ""
    sender: Optional[str] = None
    event_id: Optional[str] = None

    def content(self) -> str:
        return self.text

    def contributors(self) -> Tuple[str, ...]:
        return _dedupe([self.sender])

    def commit_count(self) -> int:
        return 0

    def source_event_id(self) -> Optional[str]:
        return None


EventEnvelope = Union[PushEvent, IssueEvent, PullRequestEvent, CommentEvent, TextEvent]


# =============================================================================
# AUDIT RECORDS
# =============================================================================

class AuditEventType(Enum):
    """Explicit audit event types."""
    CLASSIFICATION = "classification"
    SYNTHESIS = "synthesis"
    FALLBACK = "fallback"
    LEDGER = "ledger"
    COHERENCE = "coherence"
    PERSISTENCE = "persistence"
    ERROR = "error"


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable audit log entry."""
    entry_id: str
    event_type: AuditEventType
    timestamp: str
    layer: str
    action: str
    entity_id: Optional[str] = None
    metadata: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)
