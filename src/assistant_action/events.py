"""Typed views over GitHub webhook payloads.

Each supported event kind maps to one frozen dataclass. Anything else becomes an
`UnknownEvent` carrying a best-effort entity number, so callers branch on a closed
set of types instead of probing dicts.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    """Event names as reported in GITHUB_EVENT_NAME."""

    ISSUE_COMMENT = "issue_comment"
    PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"
    PULL_REQUEST_REVIEW = "pull_request_review"
    ISSUES = "issues"
    PULL_REQUEST = "pull_request"
    PULL_REQUEST_TARGET = "pull_request_target"
    WORKFLOW_DISPATCH = "workflow_dispatch"


@dataclass(frozen=True, slots=True)
class IssueCommentEvent:
    """A comment on an issue or on a pull request's conversation tab."""

    action: str
    issue_number: int | None
    is_pr: bool
    comment_id: int | None
    comment_body: str


@dataclass(frozen=True, slots=True)
class PullRequestReviewCommentEvent:
    """A comment on a pull request diff."""

    action: str
    pr_number: int | None
    comment_id: int | None
    comment_body: str


@dataclass(frozen=True, slots=True)
class PullRequestReviewEvent:
    """A submitted pull request review."""

    action: str
    pr_number: int | None
    review_body: str


@dataclass(frozen=True, slots=True)
class IssuesEvent:
    """Issue opened/assigned/labeled/etc."""

    action: str
    issue_number: int | None
    assignee_login: str
    label_name: str


@dataclass(frozen=True, slots=True)
class PullRequestEvent:
    """Pull request opened/synchronize/etc. (also pull_request_target)."""

    action: str
    pr_number: int | None


@dataclass(frozen=True, slots=True)
class WorkflowDispatchEvent:
    """Manual run; carries string inputs instead of an entity."""

    inputs: dict[str, Any] = field(default_factory=dict)
    ref: str = ""


@dataclass(frozen=True, slots=True)
class UnknownEvent:
    """Any other event, with whatever number could be found in the payload."""

    name: str
    number: int | None
    is_pr: bool


GitHubEvent = Union[
    IssueCommentEvent,
    PullRequestReviewCommentEvent,
    PullRequestReviewEvent,
    IssuesEvent,
    PullRequestEvent,
    WorkflowDispatchEvent,
    UnknownEvent,
]


def coerce_number(value: Any) -> int | None:
    """Return a non-negative int from an int or digit string, else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, str):
        text = value.strip()
        if text.isascii() and text.isdigit():
            try:
                return int(text)
            except ValueError:
                # Beyond the interpreter's int conversion limit.
                return None
    return None


def _obj(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, dict) else {}


def _str(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key)
    return value if isinstance(value, str) else ""


def _best_effort(name: str, payload: dict[str, Any]) -> UnknownEvent:
    issue = _obj(payload, "issue")
    if issue:
        return UnknownEvent(
            name=name,
            number=coerce_number(issue.get("number")),
            is_pr=bool(issue.get("pull_request")),
        )
    pull_request = _obj(payload, "pull_request")
    if pull_request:
        return UnknownEvent(name=name, number=coerce_number(pull_request.get("number")), is_pr=True)
    return UnknownEvent(name=name, number=coerce_number(payload.get("number")), is_pr=False)


def parse_event(event_name: str, payload: dict[str, Any]) -> GitHubEvent:
    """Build the typed event for a payload. Never raises."""
    if not isinstance(payload, dict):
        payload = {}
    action = _str(payload, "action")

    if event_name == EventKind.ISSUE_COMMENT.value:
        issue = _obj(payload, "issue")
        comment = _obj(payload, "comment")
        return IssueCommentEvent(
            action=action,
            issue_number=coerce_number(issue.get("number")),
            is_pr=bool(issue.get("pull_request")),
            comment_id=coerce_number(comment.get("id")),
            comment_body=_str(comment, "body"),
        )

    if event_name == EventKind.PULL_REQUEST_REVIEW_COMMENT.value:
        comment = _obj(payload, "comment")
        return PullRequestReviewCommentEvent(
            action=action,
            pr_number=coerce_number(_obj(payload, "pull_request").get("number")),
            comment_id=coerce_number(comment.get("id")),
            comment_body=_str(comment, "body"),
        )

    if event_name == EventKind.PULL_REQUEST_REVIEW.value:
        return PullRequestReviewEvent(
            action=action,
            pr_number=coerce_number(_obj(payload, "pull_request").get("number")),
            review_body=_str(_obj(payload, "review"), "body"),
        )

    if event_name == EventKind.ISSUES.value:
        return IssuesEvent(
            action=action,
            issue_number=coerce_number(_obj(payload, "issue").get("number")),
            assignee_login=_str(_obj(payload, "assignee"), "login"),
            label_name=_str(_obj(payload, "label"), "name"),
        )

    if event_name in (EventKind.PULL_REQUEST.value, EventKind.PULL_REQUEST_TARGET.value):
        number = coerce_number(_obj(payload, "pull_request").get("number"))
        if number is None:
            number = coerce_number(payload.get("number"))
        return PullRequestEvent(action=action, pr_number=number)

    if event_name == EventKind.WORKFLOW_DISPATCH.value:
        return WorkflowDispatchEvent(inputs=dict(_obj(payload, "inputs")), ref=_str(payload, "ref"))

    return _best_effort(event_name, payload)


def entity_of(event: GitHubEvent) -> tuple[int | None, bool]:
    """Return (number, is_pr) as carried natively by the event."""
    if isinstance(event, IssueCommentEvent):
        return event.issue_number, event.is_pr
    if isinstance(event, (PullRequestReviewCommentEvent, PullRequestReviewEvent, PullRequestEvent)):
        return event.pr_number, True
    if isinstance(event, IssuesEvent):
        return event.issue_number, False
    if isinstance(event, WorkflowDispatchEvent):
        # Dispatch runs identify their target through ISSUE_DATA / inputs instead.
        return None, False
    return event.number, event.is_pr


def load_event_payload(event_path: str) -> dict[str, Any]:
    """Read the webhook payload the runner wrote to GITHUB_EVENT_PATH.

    A missing path or unreadable/invalid file yields an empty payload.
    """
    if not event_path:
        return {}
    path = Path(event_path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError, RecursionError) as exc:
        # ValueError covers undecodable bytes as well as malformed JSON.
        logger.warning("Could not read event payload: %s", type(exc).__name__)
        return {}
    if not isinstance(data, dict):
        logger.warning("Event payload is not a JSON object; ignoring it")
        return {}
    return data
