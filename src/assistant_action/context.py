"""GitHub context resolution.

Turns the runner environment and the triggering event payload into one immutable
`GitHubContext` that every later step reads.

Failure policy: optional input that is malformed (ISSUE_DATA JSON, numbers, flags)
degrades to a default and is logged. Only a missing run id is fatal.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from typing import Any

from .config import DEFAULT_BRANCH_PREFIX, DEFAULT_TRIGGER_PHRASE, ActionEnvironment, parse_bool_flag
from .errors import missing_required
from .events import GitHubEvent, WorkflowDispatchEvent, coerce_number, entity_of, parse_event
from .parsing import parse_additional_permissions, parse_multiline_input

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """Repository identity."""

    owner: str
    repo: str
    full_name: str


@dataclass(frozen=True, slots=True)
class ActionInputs:
    """The action's `with:` inputs after parsing."""

    trigger_phrase: str = DEFAULT_TRIGGER_PHRASE
    assignee_trigger: str = ""
    label_trigger: str = ""
    allowed_tools: tuple[str, ...] = ()
    disallowed_tools: tuple[str, ...] = ()
    custom_instructions: str = ""
    direct_prompt: str = ""
    override_prompt: str = ""
    branch_prefix: str = DEFAULT_BRANCH_PREFIX
    use_sticky_comment: bool = False
    disable_comments: bool = False
    additional_permissions: dict[str, str] = field(default_factory=dict)
    use_commit_signing: bool = False


@dataclass(frozen=True, slots=True)
class GitHubContext:
    """Canonical, per-run view of what triggered the action."""

    run_id: str
    event_name: str
    event: GitHubEvent
    repository: RepositoryRef
    actor: str
    payload: dict[str, Any]
    entity_number: int
    is_pr: bool
    inputs: ActionInputs


def _parse_issue_data(raw: str) -> dict[str, Any] | None:
    """Decode ISSUE_DATA, treating anything but a JSON object as absent."""
    if not raw or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring ISSUE_DATA: invalid JSON (%s)", exc.msg)
        return None
    except (ValueError, RecursionError) as exc:
        # Integer literals past the conversion limit, or nesting past the recursion limit.
        logger.warning("Ignoring ISSUE_DATA: unparseable JSON (%s)", type(exc).__name__)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring ISSUE_DATA: expected a JSON object")
        return None
    return data


def _resolve_dispatch_entity(env: ActionEnvironment, event: WorkflowDispatchEvent) -> tuple[int, bool]:
    issue_data = _parse_issue_data(env.issue_data)

    number: int | None = None
    is_pr = False
    if issue_data is not None:
        number = coerce_number(issue_data.get("number"))
        is_pr = bool(issue_data.get("pull_request"))

    if number is None:
        number = coerce_number(event.inputs.get("issue_number"))

    return (number if number is not None else 0), is_pr


def _resolve_entity(env: ActionEnvironment, event: GitHubEvent) -> tuple[int, bool]:
    if isinstance(event, WorkflowDispatchEvent):
        return _resolve_dispatch_entity(env, event)
    number, is_pr = entity_of(event)
    if number is None:
        return 0, is_pr
    return number, is_pr


def _resolve_repository(env: ActionEnvironment, payload: dict[str, Any]) -> RepositoryRef:
    owner, sep, name = env.repository.partition("/")
    if sep and owner and name:
        return RepositoryRef(owner=owner, repo=name, full_name=env.repository)

    repo_obj = payload.get("repository")
    if not isinstance(repo_obj, dict):
        repo_obj = {}
    owner_obj = repo_obj.get("owner")
    owner = owner_obj.get("login", "") if isinstance(owner_obj, dict) else ""
    name = repo_obj.get("name", "") or ""
    full_name = repo_obj.get("full_name", "") or (f"{owner}/{name}" if owner and name else "")
    return RepositoryRef(owner=owner, repo=name, full_name=full_name)


def _resolve_actor(env: ActionEnvironment, payload: dict[str, Any]) -> str:
    if env.actor:
        return env.actor
    sender = payload.get("sender")
    if isinstance(sender, dict) and isinstance(sender.get("login"), str):
        return sender["login"]
    return ""


def parse_action_inputs(env: ActionEnvironment, event: GitHubEvent | None = None) -> ActionInputs:
    """Parse the action's inputs from the environment snapshot."""
    direct_prompt = env.direct_prompt
    if not direct_prompt and isinstance(event, WorkflowDispatchEvent):
        prompt = event.inputs.get("prompt")
        if isinstance(prompt, str):
            direct_prompt = prompt

    return ActionInputs(
        trigger_phrase=env.trigger_phrase or DEFAULT_TRIGGER_PHRASE,
        assignee_trigger=env.assignee_trigger,
        label_trigger=env.label_trigger,
        allowed_tools=tuple(parse_multiline_input(env.allowed_tools)),
        disallowed_tools=tuple(parse_multiline_input(env.disallowed_tools)),
        custom_instructions=env.custom_instructions,
        direct_prompt=direct_prompt,
        override_prompt=env.override_prompt,
        branch_prefix=env.branch_prefix or DEFAULT_BRANCH_PREFIX,
        use_sticky_comment=parse_bool_flag(env.use_sticky_comment),
        disable_comments=parse_bool_flag(env.disable_comments),
        additional_permissions=parse_additional_permissions(env.additional_permissions),
        use_commit_signing=parse_bool_flag(env.use_commit_signing),
    )


def parse_github_context(env: ActionEnvironment, payload: dict[str, Any] | None = None) -> GitHubContext:
    """Resolve the run's context from an environment snapshot and event payload.

    Raises:
        ActionError: If GITHUB_RUN_ID is not set.
    """
    if not env.run_id:
        raise missing_required("GITHUB_RUN_ID")

    payload = payload if isinstance(payload, dict) else {}
    event = parse_event(env.event_name, payload)
    entity_number, is_pr = _resolve_entity(env, event)

    context = GitHubContext(
        run_id=env.run_id,
        event_name=env.event_name,
        event=event,
        repository=_resolve_repository(env, payload),
        actor=_resolve_actor(env, payload),
        payload=payload,
        entity_number=entity_number,
        is_pr=is_pr,
        inputs=parse_action_inputs(env, event),
    )
    logger.info(
        "Resolved %s context for %s #%s (%s)",
        context.event_name or "<unknown>",
        context.repository.full_name or "<unknown>",
        context.entity_number,
        "pull request" if context.is_pr else "issue",
    )
    return context


def context_to_dict(context: GitHubContext, *, include_payload: bool = False) -> dict[str, Any]:
    """Serialize a context for logs and step outputs."""
    out: dict[str, Any] = {
        "runId": context.run_id,
        "eventName": context.event_name,
        "repository": asdict(context.repository),
        "actor": context.actor,
        "entityNumber": context.entity_number,
        "isPR": context.is_pr,
        "inputs": {
            "triggerPhrase": context.inputs.trigger_phrase,
            "assigneeTrigger": context.inputs.assignee_trigger,
            "labelTrigger": context.inputs.label_trigger,
            "allowedTools": list(context.inputs.allowed_tools),
            "disallowedTools": list(context.inputs.disallowed_tools),
            "customInstructions": context.inputs.custom_instructions,
            "directPrompt": context.inputs.direct_prompt,
            "overridePrompt": context.inputs.override_prompt,
            "branchPrefix": context.inputs.branch_prefix,
            "useStickyComment": context.inputs.use_sticky_comment,
            "disableComments": context.inputs.disable_comments,
            "additionalPermissions": dict(context.inputs.additional_permissions),
            "useCommitSigning": context.inputs.use_commit_signing,
        },
    }
    if include_payload:
        out["payload"] = context.payload
    return out
