"""Configuration loading for assistant-action.

Configuration is supplied by the GitHub Actions runner and the action's `with:` inputs,
both of which arrive as environment variables. Everything is read once at process
entry into frozen records; nothing below the entry points touches `os.environ`.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .errors import ActionError, missing_required

DEFAULT_TRIGGER_PHRASE = "@claude"
DEFAULT_BRANCH_PREFIX = "claude/"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_SERVER_URL = "https://github.com"


@dataclass(frozen=True, slots=True)
class ClientLimits:
    """Network limits for the GitHub REST client."""

    total_timeout_s: float = 30.0
    connect_timeout_s: float = 5.0
    read_timeout_s: float = 20.0

    max_attempts: int = 3
    max_backoff_s: float = 5.0


@dataclass(frozen=True, slots=True)
class ActionEnvironment:
    """Raw snapshot of the environment variables the context resolver consumes.

    Values are kept as the strings the runner provided; interpretation (booleans,
    tool lists, permission blocks, JSON) happens in the resolver.
    """

    run_id: str = ""
    event_name: str = ""
    event_path: str = ""
    repository: str = ""
    actor: str = ""
    issue_data: str = ""

    trigger_phrase: str = ""
    assignee_trigger: str = ""
    label_trigger: str = ""
    allowed_tools: str = ""
    disallowed_tools: str = ""
    custom_instructions: str = ""
    direct_prompt: str = ""
    override_prompt: str = ""
    branch_prefix: str = ""
    use_sticky_comment: str = ""
    disable_comments: str = ""
    additional_permissions: str = ""
    use_commit_signing: str = ""


@dataclass(frozen=True, slots=True)
class WiringConfig:
    """Values the CLI passes through to downstream steps without interpreting them."""

    github_token: str
    comment_id: str
    additional_mcp_config: str
    api_url: str
    server_url: str
    output_path: str


@dataclass(frozen=True, slots=True)
class CommentServerConfig:
    """Configuration for the comment tool server process."""

    github_token: str
    owner: str
    repo: str
    comment_id: int | None
    event_name: str
    api_url: str
    limits: ClientLimits


_ENV_FIELDS: dict[str, str] = {
    "run_id": "GITHUB_RUN_ID",
    "event_name": "GITHUB_EVENT_NAME",
    "event_path": "GITHUB_EVENT_PATH",
    "repository": "GITHUB_REPOSITORY",
    "actor": "GITHUB_ACTOR",
    "issue_data": "ISSUE_DATA",
    "trigger_phrase": "TRIGGER_PHRASE",
    "assignee_trigger": "ASSIGNEE_TRIGGER",
    "label_trigger": "LABEL_TRIGGER",
    "allowed_tools": "ALLOWED_TOOLS",
    "disallowed_tools": "DISALLOWED_TOOLS",
    "custom_instructions": "CUSTOM_INSTRUCTIONS",
    "direct_prompt": "DIRECT_PROMPT",
    "override_prompt": "OVERRIDE_PROMPT",
    "branch_prefix": "BRANCH_PREFIX",
    "use_sticky_comment": "USE_STICKY_COMMENT",
    "disable_comments": "DISABLE_COMMENTS",
    "additional_permissions": "ADDITIONAL_PERMISSIONS",
    "use_commit_signing": "USE_COMMIT_SIGNING",
}


def parse_bool_flag(value: str | None) -> bool:
    """Return True only for the string "true", compared case-insensitively."""
    if value is None:
        return False
    return value.lower() == "true"


def load_environment(environ: Mapping[str, str] | None = None) -> ActionEnvironment:
    """Snapshot the resolver's environment variables.

    Unset variables become empty strings. This never raises; required values are
    checked where they are used.
    """
    env = os.environ if environ is None else environ
    values = {field: env.get(name, "") for field, name in _ENV_FIELDS.items()}
    return ActionEnvironment(**values)


def load_wiring_config(environ: Mapping[str, str] | None = None) -> WiringConfig:
    """Load pass-through values used by the CLI when building outputs."""
    env = os.environ if environ is None else environ
    return WiringConfig(
        github_token=env.get("GITHUB_TOKEN", ""),
        comment_id=env.get("CLAUDE_COMMENT_ID", ""),
        additional_mcp_config=env.get("MCP_CONFIG", ""),
        api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
        server_url=env.get("GITHUB_SERVER_URL") or DEFAULT_SERVER_URL,
        output_path=env.get("GITHUB_OUTPUT", ""),
    )


def load_comment_server_config(environ: Mapping[str, str] | None = None) -> CommentServerConfig:
    """Load and validate the comment server configuration.

    Raises:
        ActionError: If the token or repository coordinates are missing, or the
            comment id is not an integer.
    """
    env = os.environ if environ is None else environ

    token = env.get("GITHUB_TOKEN", "")
    owner = env.get("REPO_OWNER", "")
    repo = env.get("REPO_NAME", "")
    for name, value in (("GITHUB_TOKEN", token), ("REPO_OWNER", owner), ("REPO_NAME", repo)):
        if not value:
            raise missing_required(name)

    comment_id: int | None = None
    comment_id_raw = env.get("CLAUDE_COMMENT_ID", "").strip()
    if comment_id_raw:
        try:
            comment_id = int(comment_id_raw)
        except ValueError as exc:
            raise ActionError(code="Config", message="CLAUDE_COMMENT_ID must be an integer") from exc

    return CommentServerConfig(
        github_token=token,
        owner=owner,
        repo=repo,
        comment_id=comment_id,
        event_name=env.get("GITHUB_EVENT_NAME", ""),
        api_url=env.get("GITHUB_API_URL") or DEFAULT_API_URL,
        limits=ClientLimits(),
    )
