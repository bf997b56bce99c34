"""Permission scoping for the assistant's GitHub token.

The assistant always gets write access to contents, issues and pull requests.
`additional_permissions` can widen (or narrow) individual scopes, e.g. `actions: read`
to let it inspect CI runs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_PERMISSIONS: dict[str, str] = {
    "contents": "write",
    "issues": "write",
    "pull_requests": "write",
}

PERMISSION_LEVELS: tuple[str, ...] = ("none", "read", "write")


def normalize_scope(scope: str) -> str:
    """Normalize a scope name to the token API spelling (`pull-requests` -> `pull_requests`)."""
    return scope.strip().lower().replace("-", "_")


def build_token_permissions(additional: Mapping[str, str]) -> dict[str, str]:
    """Merge additional permissions over the defaults.

    Unknown levels are dropped with a warning rather than failing the run.
    """
    permissions = dict(DEFAULT_TOKEN_PERMISSIONS)
    for raw_scope, raw_level in additional.items():
        scope = normalize_scope(raw_scope)
        level = raw_level.strip().lower()
        if not scope:
            continue
        if level not in PERMISSION_LEVELS:
            logger.warning("Ignoring additional permission %s: unsupported level %r", scope, raw_level)
            continue
        permissions[scope] = level
    return permissions


def grants(permissions: Mapping[str, str], scope: str, level: str) -> bool:
    """Return True if `permissions` grants at least `level` on `scope`."""
    wanted = level.strip().lower()
    if wanted not in PERMISSION_LEVELS:
        return False
    held = permissions.get(normalize_scope(scope), "none")
    if held not in PERMISSION_LEVELS:
        return False
    return PERMISSION_LEVELS.index(held) >= PERMISSION_LEVELS.index(wanted)
