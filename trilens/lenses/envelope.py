"""
Event Envelope Parsing

Turns raw event dicts into one of the closed envelope variants in
trilens.contracts.events. The event kind is an explicit tag; the only
place that looks at payload keys to guess a kind is infer_webhook_kind.

Raw shape accepted:

    {
        "event_id": "...",          # or "eventId" / "id"
        "event_type": "github.push",
        "sender": "alice",
        "content": "free text",     # text kinds
        "payload": {...}            # GitHub kinds
    }

Malformed envelopes (wrong types, missing keys) parse to a variant with
empty content. Nothing here raises on bad input.
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Union

from ..contracts.events import (
    EventKind, Commit, PushEvent, IssueEvent, PullRequestEvent,
    CommentEvent, TextEvent, EventEnvelope
)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return ""


def _optional_str(value: Any) -> Optional[str]:
    text = _as_str(value)
    return text or None


def _login(user: Any) -> Optional[str]:
    """GitHub user objects carry ``login``; plain strings are accepted too."""
    if isinstance(user, dict):
        return _optional_str(user.get("login") or user.get("name"))
    return _optional_str(user)


def _sender(raw: Dict[str, Any]) -> Optional[str]:
    return _login(raw.get("sender"))


def _event_id(raw: Dict[str, Any]) -> Optional[str]:
    for key in ("event_id", "eventId", "id"):
        value = _optional_str(raw.get(key))
        if value:
            return value
    return None


def find_kind(value: Union[EventKind, str, None]) -> Optional[EventKind]:
    if isinstance(value, EventKind):
        return value
    for kind in EventKind:
        if kind.value == value:
            return kind
    return None


def infer_webhook_kind(raw: Any) -> EventKind:
    """
    Guess the kind of a GitHub webhook from its payload keys.

    Checked in order issue, pull_request, comment; anything else is a push.
    """
    payload = _as_dict(_as_dict(raw).get("payload"))
    if payload.get("issue"):
        return EventKind.GITHUB_ISSUE
    if payload.get("pull_request"):
        return EventKind.GITHUB_PR
    if payload.get("comment"):
        return EventKind.GITHUB_COMMENT
    return EventKind.GITHUB_PUSH


# =============================================================================
# ONE EXTRACTOR PER SHAPE
# =============================================================================

def _parse_push(raw: Dict[str, Any], kind: EventKind) -> PushEvent:
    payload = _as_dict(raw.get("payload"))
    commits = []
    raw_commits = payload.get("commits")
    if isinstance(raw_commits, list):
        for item in raw_commits:
            entry = _as_dict(item)
            author = entry.get("author")
            commits.append(Commit(
                message=_as_str(entry.get("message")),
                author=_optional_str(_as_dict(author).get("name")) if isinstance(author, dict) else _optional_str(author)
            ))
    return PushEvent(
        kind=kind,
        commits=tuple(commits),
        sender=_sender(raw),
        head_commit_id=_optional_str(_as_dict(payload.get("head_commit")).get("id")),
        event_id=_event_id(raw)
    )


def _parse_issue(raw: Dict[str, Any], kind: EventKind) -> IssueEvent:
    issue = _as_dict(_as_dict(raw.get("payload")).get("issue"))
    return IssueEvent(
        kind=kind,
        title=_as_str(issue.get("title")),
        body=_as_str(issue.get("body")),
        author=_login(issue.get("user")),
        sender=_sender(raw),
        issue_id=_optional_str(issue.get("id")),
        event_id=_event_id(raw)
    )


def _parse_pull_request(raw: Dict[str, Any], kind: EventKind) -> PullRequestEvent:
    pr = _as_dict(_as_dict(raw.get("payload")).get("pull_request"))
    return PullRequestEvent(
        kind=kind,
        title=_as_str(pr.get("title")),
        body=_as_str(pr.get("body")),
        author=_login(pr.get("user")),
        sender=_sender(raw),
        pr_id=_optional_str(pr.get("id")),
        event_id=_event_id(raw)
    )


def _parse_comment(raw: Dict[str, Any], kind: EventKind) -> CommentEvent:
    payload = _as_dict(raw.get("payload"))
    comment = _as_dict(payload.get("comment") or payload.get("review"))
    return CommentEvent(
        kind=kind,
        body=_as_str(comment.get("body")),
        author=_login(comment.get("user")),
        sender=_sender(raw),
        event_id=_event_id(raw)
    )


def _parse_text(raw: Dict[str, Any], kind: EventKind) -> TextEvent:
    text = _as_str(raw.get("content")) or _as_str(raw.get("message"))
    return TextEvent(kind=kind, text=text, sender=_sender(raw), event_id=_event_id(raw))


_PARSERS = {
    EventKind.GITHUB_PUSH: _parse_push,
    EventKind.GITHUB_ISSUE: _parse_issue,
    EventKind.GITHUB_PR: _parse_pull_request,
    EventKind.GITHUB_COMMENT: _parse_comment,
    EventKind.GITHUB_REVIEW: _parse_comment,
    EventKind.USER_INPUT: _parse_text,
    EventKind.AGENT_ACTION: _parse_text,
    EventKind.SYSTEM_EVENT: _parse_text,
}

_missing = [kind for kind in EventKind if kind not in _PARSERS]
if _missing:
    raise RuntimeError(f"no envelope parser for: {_missing}")


def parse_event(raw: Any, kind: Union[EventKind, str, None] = None) -> EventEnvelope:
    """
    Parse a raw event dict into its envelope variant.

    ``kind`` wins when given; otherwise the raw ``event_type`` tag is used,
    and untagged events are treated as user input.
    """
    if isinstance(raw, (PushEvent, IssueEvent, PullRequestEvent, CommentEvent, TextEvent)):
        return raw

    data = _as_dict(raw)
    resolved = find_kind(kind)
    if resolved is None:
        resolved = find_kind(data.get("event_type") or data.get("eventType")) or EventKind.USER_INPUT
    return _PARSERS[resolved](data, resolved)
