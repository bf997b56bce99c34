"""MCP server that lets the assistant update its tracking comment.

Started by the assistant CLI from the `github_comment` entry of the MCP config:

  python -m assistant_action.comment_server
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Any

try:
    from mcp.server import Server
    from mcp.types import TextContent, Tool
except ImportError as exc:  # pragma: no cover
    raise ImportError("MCP library not installed. Install with: pip install mcp") from exc

from .config import CommentServerConfig, load_comment_server_config
from .errors import ActionError
from .events import EventKind
from .github_client import GitHubClient
from .safety import validate_no_secrets

logger = logging.getLogger(__name__)

UPDATE_COMMENT_TOOL = "update_comment"

TOOL_METADATA: dict[str, dict[str, Any]] = {
    UPDATE_COMMENT_TOOL: {
        "description": "Replace the body of the assistant's tracking comment on the issue or pull request.",
        "inputSchema": {
            "type": "object",
            "required": ["body"],
            "properties": {
                "body": {"type": "string", "minLength": 1, "description": "New comment body (markdown)"},
            },
            "additionalProperties": False,
        },
    },
}

server = Server("github-comment")

_CONFIG: CommentServerConfig | None = None


def error_result(code: str, message: str, hint: str | None = None) -> dict[str, Any]:
    """Build the `{"ok": false, ...}` result the assistant receives for a failed call."""
    out: dict[str, Any] = {"ok": False, "code": code, "message": message}
    if hint:
        out["hint"] = hint
    return out


def get_config() -> CommentServerConfig:
    """Load and cache the server configuration from the environment."""
    global _CONFIG  # pylint: disable=global-statement
    if _CONFIG is None:
        _CONFIG = load_comment_server_config()
    return _CONFIG


def comment_path(config: CommentServerConfig) -> str:
    """Return the REST path of the tracking comment.

    Review comments on a diff live under pulls/, everything else under issues/.
    """
    kind = "pulls" if config.event_name == EventKind.PULL_REQUEST_REVIEW_COMMENT.value else "issues"
    return f"/repos/{config.owner}/{config.repo}/{kind}/comments/{config.comment_id}"


async def update_comment(config: CommentServerConfig, client: GitHubClient, body: str) -> dict[str, Any]:
    """Replace the tracking comment's body.

    Without a configured comment id there is nothing to update; that is reported as
    a successful no-op so the assistant can carry on.
    """
    if config.comment_id is None:
        logger.info("No tracking comment configured; skipping update")
        return {"ok": True, "skipped": True, "message": "No tracking comment to update"}

    validate_no_secrets(body, what="Comment body")

    data = await client.request_json(method="PATCH", path=comment_path(config), json_body={"body": body})
    if not isinstance(data, dict) or not isinstance(data.get("id"), int):
        raise ActionError(code="GitHub", message="Unexpected comment response")
    return {"ok": True, "comment": {"id": data["id"], "url": data.get("html_url", "")}}


async def dispatch_tool(name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    """Validate arguments and run a tool, always returning an envelope."""
    if name not in TOOL_METADATA:
        available = ", ".join(sorted(TOOL_METADATA))
        return error_result("UserInput", f"Unknown tool: {name}", hint=f"Available tools: {available}")

    body = arguments.get("body")
    if not isinstance(body, str) or not body:
        return error_result("UserInput", "Field 'body' is required")

    try:
        config = get_config()
        client = GitHubClient(token=config.github_token, limits=config.limits, api_base_url=config.api_url)
        return await update_comment(config, client, body)
    except ActionError as exc:
        logger.warning("Tool %s failed: %s", name, exc.message)
        return error_result(exc.code, exc.message, exc.hint)


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List all available tools."""
    return [
        Tool(name=tool_name, description=metadata["description"], inputSchema=metadata["inputSchema"])
        for tool_name, metadata in TOOL_METADATA.items()
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Execute a tool and return MCP-compliant TextContent."""
    if not isinstance(arguments, dict):
        arguments = {}

    logger.info("Tool called: %s", name)

    try:
        result = await dispatch_tool(name, arguments)
    except Exception as exc:  # pylint: disable=broad-exception-caught
        logger.error("Tool %s failed: %s", name, exc)
        result = error_result("Internal", "Tool execution failed")
    return [TextContent(type="text", text=json.dumps(result, indent=2, default=str))]


async def run_server() -> None:
    """Run the server over stdio."""
    # Fail fast on missing configuration.
    try:
        _ = get_config()
    except ActionError as exc:
        logger.error("Startup configuration error: %s", exc.message)
        raise

    from mcp.server.stdio import stdio_server

    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """Entry point for `python -m assistant_action.comment_server`."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        print("\nServer stopped by user", file=sys.stderr)


if __name__ == "__main__":
    main()
