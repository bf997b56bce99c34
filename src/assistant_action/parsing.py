"""Parsers for free-form action inputs.

Workflow authors write tool lists and permission blocks as YAML block scalars, so
both parsers accept messy human input and never raise.
"""

from __future__ import annotations


def parse_multiline_input(text: str) -> list[str]:
    """Split a comma/newline separated list into tokens, in document order.

    Everything after a `#` on a line is a comment. There is no escape for a literal
    `#`, so tokens cannot contain one. Empty fragments are dropped; duplicates are kept.
    """
    if not text:
        return []

    tokens: list[str] = []
    for line in text.splitlines():
        line = line.split("#", 1)[0]
        for fragment in line.split(","):
            fragment = fragment.strip()
            if fragment:
                tokens.append(fragment)
    return tokens


def parse_additional_permissions(text: str) -> dict[str, str]:
    """Parse `scope: level` lines into a mapping.

    Lines without a colon are ignored. Only the first colon separates key from value.
    A repeated scope overwrites the earlier one and moves to the end of the mapping.
    """
    permissions: dict[str, str] = {}
    if not text:
        return permissions

    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        if not key:
            continue
        # Re-insert so iteration order reflects the last occurrence.
        permissions.pop(key, None)
        permissions[key] = value.strip()
    return permissions
