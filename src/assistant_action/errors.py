"""Error types.

Errors surfaced to the workflow log or to the assistant must be stable and must
never include secrets (tokens, raw environment dumps).
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ActionError(Exception):
    """An error safe to show in the job log or return to the assistant."""

    code: str
    message: str
    hint: str | None = None
    status_code: int | None = None

    def __str__(self) -> str:
        return self.message


def missing_required(name: str) -> ActionError:
    """Return a Config error for a required environment variable that is unset."""
    return ActionError(
        code="Config",
        message=f"Missing required environment variable: {name}",
        hint="Set it in the environment of the step running this command",
    )


def github_auth_forbidden(*, status_code: int) -> ActionError:
    """Return a Forbidden error for GitHub 401/403 responses."""
    return ActionError(
        code="Forbidden",
        message="GitHub token is not authorized for this repository or operation",
        hint="Check the workflow's permissions block and the token passed to the action",
        status_code=status_code,
    )
