"""disable_comments: flag parsing and its effect on the MCP configuration."""

from __future__ import annotations

import json

import pytest
from assistant_action.config import load_environment
from assistant_action.context import ActionInputs, GitHubContext, RepositoryRef, parse_github_context
from assistant_action.events import IssuesEvent
from assistant_action.mcp_config import prepare_mcp_config


def _context_from_env(monkeypatch: pytest.MonkeyPatch, value: str | None) -> GitHubContext:
    monkeypatch.setenv("GITHUB_RUN_ID", "test-run-id")
    if value is None:
        monkeypatch.delenv("DISABLE_COMMENTS", raising=False)
    else:
        monkeypatch.setenv("DISABLE_COMMENTS", value)
    return parse_github_context(load_environment(), {})


@pytest.mark.parametrize(
    "value,expected",
    [("true", True), ("false", False), (None, False), ("TrUe", True), ("on", False)],
)
def test_disable_comments_from_environment(monkeypatch: pytest.MonkeyPatch, value: str | None, expected: bool) -> None:
    assert _context_from_env(monkeypatch, value).inputs.disable_comments is expected


def _test_context(disable_comments: bool = False) -> GitHubContext:
    return GitHubContext(
        run_id="test-run-id",
        event_name="issues",
        event=IssuesEvent(action="opened", issue_number=123, assignee_login="", label_name=""),
        repository=RepositoryRef(owner="test-owner", repo="test-repo", full_name="test-owner/test-repo"),
        actor="test-actor",
        payload={},
        entity_number=123,
        is_pr=False,
        inputs=ActionInputs(disable_comments=disable_comments),
    )


def test_comment_server_excluded_when_comments_disabled() -> None:
    config = json.loads(
        prepare_mcp_config(
            github_token="test-token",
            owner="test-owner",
            repo="test-repo",
            context=_test_context(True),
            disable_comments=True,
        )
    )

    assert "github_comment" not in config["mcpServers"]


def test_comment_server_included_when_comments_enabled() -> None:
    config = json.loads(
        prepare_mcp_config(
            github_token="test-token",
            owner="test-owner",
            repo="test-repo",
            context=_test_context(False),
            disable_comments=False,
            comment_id="12345",
        )
    )

    server = config["mcpServers"]["github_comment"]
    assert server["args"] == ["-m", "assistant_action.comment_server"]
    assert server["env"]["CLAUDE_COMMENT_ID"] == "12345"
    assert server["env"]["REPO_OWNER"] == "test-owner"
    assert server["env"]["GITHUB_EVENT_NAME"] == "issues"


def test_comment_server_included_by_default() -> None:
    config = json.loads(
        prepare_mcp_config(
            github_token="test-token",
            owner="test-owner",
            repo="test-repo",
            context=_test_context(False),
            comment_id="12345",
        )
    )

    assert "github_comment" in config["mcpServers"]


def test_disable_comments_defaults_to_context_input() -> None:
    config = json.loads(
        prepare_mcp_config(github_token="t", owner="o", repo="r", context=_test_context(True))
    )

    assert config["mcpServers"] == {}


def test_comment_server_without_comment_id_omits_env_entry() -> None:
    config = json.loads(prepare_mcp_config(github_token="t", owner="o", repo="r", context=_test_context()))

    assert "CLAUDE_COMMENT_ID" not in config["mcpServers"]["github_comment"]["env"]
