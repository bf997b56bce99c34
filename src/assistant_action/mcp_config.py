"""MCP server configuration for the assistant.

Builds the `{"mcpServers": {...}}` document the assistant CLI is started with. Built-in
servers are added based on the context; a user-supplied JSON document can add servers
or override built-ins by name.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable
from typing import Any

from .config import DEFAULT_API_URL, DEFAULT_SERVER_URL
from .context import GitHubContext
from .permissions import build_token_permissions, grants

logger = logging.getLogger(__name__)

COMMENT_SERVER_NAME = "github_comment"
GITHUB_SERVER_NAME = "github"
GITHUB_MCP_IMAGE = "ghcr.io/github/github-mcp-server:v0.5.0"
GITHUB_MCP_TOOL_PREFIX = "mcp__github__"
GITHUB_MCP_BASE_TOOLSETS: tuple[str, ...] = ("repos", "issues", "pull_requests")


def _comment_server(
    *,
    github_token: str,
    owner: str,
    repo: str,
    event_name: str,
    comment_id: str | None,
    api_url: str,
) -> dict[str, Any]:
    env = {
        "GITHUB_TOKEN": github_token,
        "REPO_OWNER": owner,
        "REPO_NAME": repo,
        "GITHUB_EVENT_NAME": event_name,
        "GITHUB_API_URL": api_url,
    }
    if comment_id:
        env["CLAUDE_COMMENT_ID"] = comment_id
    return {
        "command": sys.executable,
        "args": ["-m", "assistant_action.comment_server"],
        "env": env,
    }


def _github_server(*, github_token: str, server_url: str, context: GitHubContext) -> dict[str, Any]:
    toolsets = list(GITHUB_MCP_BASE_TOOLSETS)
    permissions = build_token_permissions(context.inputs.additional_permissions)
    if grants(permissions, "actions", "read"):
        toolsets.append("actions")
    return {
        "command": "docker",
        "args": [
            "run",
            "-i",
            "--rm",
            "-e",
            "GITHUB_PERSONAL_ACCESS_TOKEN",
            "-e",
            "GITHUB_HOST",
            "-e",
            "GITHUB_TOOLSETS",
            GITHUB_MCP_IMAGE,
        ],
        "env": {
            "GITHUB_PERSONAL_ACCESS_TOKEN": github_token,
            "GITHUB_HOST": server_url,
            "GITHUB_TOOLSETS": ",".join(toolsets),
        },
    }


def _merge_additional(base: dict[str, Any], additional_mcp_config: str) -> dict[str, Any]:
    try:
        extra = json.loads(additional_mcp_config)
    except json.JSONDecodeError as exc:
        logger.warning("Ignoring additional MCP config: invalid JSON (%s)", exc.msg)
        return base
    except (ValueError, RecursionError) as exc:
        logger.warning("Ignoring additional MCP config: unparseable JSON (%s)", type(exc).__name__)
        return base
    if not isinstance(extra, dict):
        logger.warning("Ignoring additional MCP config: expected a JSON object")
        return base

    extra_servers = extra.get("mcpServers")
    if extra_servers is not None and not isinstance(extra_servers, dict):
        logger.warning("Ignoring additional MCP config: mcpServers must be an object")
        return base

    logger.info("Merging additional MCP server configuration with built-in servers")
    merged = {**base, **extra}
    merged["mcpServers"] = {**base["mcpServers"], **(extra_servers or {})}
    return merged


def build_mcp_config(
    *,
    github_token: str,
    owner: str,
    repo: str,
    context: GitHubContext,
    allowed_tools: Iterable[str] = (),
    disable_comments: bool | None = None,
    comment_id: str | None = None,
    additional_mcp_config: str = "",
    api_url: str = DEFAULT_API_URL,
    server_url: str = DEFAULT_SERVER_URL,
) -> dict[str, Any]:
    """Build the MCP configuration document.

    `disable_comments` defaults to the context's input. The comment server is
    present iff comments are enabled.
    """
    if disable_comments is None:
        disable_comments = context.inputs.disable_comments

    servers: dict[str, Any] = {}
    if not disable_comments:
        servers[COMMENT_SERVER_NAME] = _comment_server(
            github_token=github_token,
            owner=owner,
            repo=repo,
            event_name=context.event_name,
            comment_id=comment_id,
            api_url=api_url,
        )

    if any(tool.startswith(GITHUB_MCP_TOOL_PREFIX) for tool in allowed_tools):
        servers[GITHUB_SERVER_NAME] = _github_server(github_token=github_token, server_url=server_url, context=context)

    config: dict[str, Any] = {"mcpServers": servers}
    if additional_mcp_config and additional_mcp_config.strip():
        config = _merge_additional(config, additional_mcp_config)
    return config


def prepare_mcp_config(**kwargs: Any) -> str:
    """Return the MCP configuration as pretty-printed JSON text.

    Accepts the same keyword arguments as `build_mcp_config`.
    """
    return json.dumps(build_mcp_config(**kwargs), indent=2)
