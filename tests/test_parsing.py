"""Tool-list and permission-block parser tests."""

from __future__ import annotations

import pytest
from assistant_action.parsing import parse_additional_permissions, parse_multiline_input

EXPECTED_TOOLS = ["Bash(bun install)", "Bash(bun test:*)", "Bash(bun typecheck)"]


@pytest.mark.parametrize(
    "text",
    [
        "Bash(bun install),Bash(bun test:*),Bash(bun typecheck)",
        "Bash(bun install)\nBash(bun test:*)\nBash(bun typecheck)",
        "Bash(bun install),Bash(bun test:*)\nBash(bun typecheck)",
    ],
)
def test_parse_multiline_input_comma_and_newline_forms(text: str) -> None:
    assert parse_multiline_input(text) == EXPECTED_TOOLS


def test_parse_multiline_input_ignores_comments() -> None:
    text = "Bash(bun install),\nBash(bun test:*) # For testing\n# For type checking\nBash(bun typecheck)\n"
    assert parse_multiline_input(text) == EXPECTED_TOOLS


def test_parse_multiline_input_empty_string() -> None:
    assert parse_multiline_input("") == []


def test_parse_multiline_input_only_comments_and_blanks() -> None:
    assert parse_multiline_input("# nothing\n\n , ,\n   # still nothing") == []


def test_parse_multiline_input_keeps_duplicates_and_order() -> None:
    assert parse_multiline_input("b, a\na ,b") == ["b", "a", "a", "b"]


def test_parse_multiline_input_hash_always_starts_comment() -> None:
    # No escaping: a literal '#' cuts the token.
    assert parse_multiline_input("Bash(echo a#b), Edit") == ["Bash(echo a"]


def test_parse_multiline_input_handles_crlf() -> None:
    assert parse_multiline_input("Edit\r\nRead\r\n") == ["Edit", "Read"]


def test_parse_additional_permissions_single() -> None:
    out = parse_additional_permissions("actions: read")
    assert out == {"actions": "read"}


def test_parse_additional_permissions_multiple() -> None:
    out = parse_additional_permissions("actions: read\npackages: write\ncontents: read")
    assert out == {"actions": "read", "packages": "write", "contents": "read"}
    assert len(out) == 3


def test_parse_additional_permissions_empty() -> None:
    assert parse_additional_permissions("") == {}


def test_parse_additional_permissions_whitespace_and_blank_lines() -> None:
    out = parse_additional_permissions("\n    actions: read\n\n    packages: write\n    ")
    assert out == {"actions": "read", "packages": "write"}


def test_parse_additional_permissions_skips_lines_without_colon() -> None:
    out = parse_additional_permissions("actions: read\ninvalid line\npackages: write")
    assert out == {"actions": "read", "packages": "write"}


def test_parse_additional_permissions_trims_key_and_value() -> None:
    assert parse_additional_permissions("  actions  :  read  ") == {"actions": "read"}


def test_parse_additional_permissions_last_write_wins() -> None:
    out = parse_additional_permissions("a:1\nb:x\na:2")
    assert out == {"b": "x", "a": "2"}
    assert list(out) == ["b", "a"]


def test_parse_additional_permissions_splits_on_first_colon_only() -> None:
    assert parse_additional_permissions("url: https://example.com:8443") == {"url": "https://example.com:8443"}


def test_parse_additional_permissions_drops_empty_key() -> None:
    assert parse_additional_permissions(" : write\nissues: read") == {"issues": "read"}
