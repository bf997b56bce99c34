#!/usr/bin/env python3
"""assistant-action entry point.

Run:
  python -m assistant_action context          # print the resolved context as JSON
  python -m assistant_action prepare          # write mcp_config/permissions step outputs
  python -m assistant_action comment-server   # run the comment tool server (stdio)
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Mapping
from typing import Any

from assistant_action.comment_server import run_server
from assistant_action.config import load_environment, load_wiring_config
from assistant_action.context import GitHubContext, context_to_dict, parse_github_context
from assistant_action.errors import ActionError
from assistant_action.events import load_event_payload
from assistant_action.mcp_config import prepare_mcp_config
from assistant_action.outputs import escape_workflow_command, write_outputs
from assistant_action.permissions import build_token_permissions
from assistant_action.safety import redact_text

logger = logging.getLogger("assistant_action")


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(prog="assistant_action", add_help=True)
    sub = parser.add_subparsers(dest="command", required=True)

    ctx = sub.add_parser("context", help="Print the resolved GitHub context as JSON.")
    ctx.add_argument("--include-payload", action="store_true", help="Include the raw event payload.")

    sub.add_parser("prepare", help="Build MCP config and token permissions for the assistant step.")
    sub.add_parser("comment-server", help="Run the comment tool server over stdio.")
    return parser.parse_args(argv)


def _resolve(environ: Mapping[str, str] | None) -> GitHubContext:
    env = load_environment(environ)
    payload = load_event_payload(env.event_path)
    return parse_github_context(env, payload)


def cmd_context(args: argparse.Namespace, environ: Mapping[str, str] | None = None) -> int:
    """Print the resolved context."""
    context = _resolve(environ)
    print(json.dumps(context_to_dict(context, include_payload=args.include_payload), indent=2, default=str))
    return 0


def _redact_server_env(mcp_config: dict[str, Any], token: str) -> dict[str, Any]:
    """Replace every server env value equal to the token, whatever its format."""
    servers = mcp_config.get("mcpServers")
    if not token or not isinstance(servers, dict):
        return mcp_config
    for server in servers.values():
        env = server.get("env") if isinstance(server, dict) else None
        if isinstance(env, dict):
            for key, value in env.items():
                if value == token:
                    env[key] = "<redacted>"
    return mcp_config


def cmd_prepare(environ: Mapping[str, str] | None = None) -> int:
    """Resolve the context and emit the assistant step's configuration."""
    context = _resolve(environ)
    wiring = load_wiring_config(environ)

    mcp_config = prepare_mcp_config(
        github_token=wiring.github_token,
        owner=context.repository.owner,
        repo=context.repository.repo,
        context=context,
        allowed_tools=context.inputs.allowed_tools,
        comment_id=wiring.comment_id or None,
        additional_mcp_config=wiring.additional_mcp_config,
        api_url=wiring.api_url,
        server_url=wiring.server_url,
    )
    permissions = build_token_permissions(context.inputs.additional_permissions)

    outputs = {
        "mcp_config": mcp_config,
        "permissions": json.dumps(permissions, sort_keys=True),
        "entity_number": str(context.entity_number),
        "is_pr": "true" if context.is_pr else "false",
    }
    if wiring.output_path:
        write_outputs(wiring.output_path, outputs)
        logger.info("Wrote %s step outputs", len(outputs))
    else:
        printable = _redact_server_env(json.loads(mcp_config), wiring.github_token)
        print(redact_text(json.dumps({**outputs, "mcp_config": printable}, indent=2)))
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI dispatcher."""
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    try:
        if args.command == "context":
            return cmd_context(args)
        if args.command == "prepare":
            return cmd_prepare()
        asyncio.run(run_server())
        return 0
    except ActionError as exc:
        print(f"::error::{escape_workflow_command(exc.message)}")
        return 1
    except KeyboardInterrupt:
        print("\nStopped by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
