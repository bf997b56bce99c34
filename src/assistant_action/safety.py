"""Secret detection helpers.

Comment bodies are public. If the assistant tries to post something that looks like a
credential, the comment server rejects it without echoing the value.
"""

from __future__ import annotations

import re

from .errors import ActionError

_TOKEN_PREFIXES = (
    "ghp_",
    "gho_",
    "ghu_",
    "ghs_",
    "ghr_",
    "github_pat_",
    "sk-ant-",
)

_TOKEN_RE = re.compile(r"\b(?:" + "|".join(re.escape(p) for p in _TOKEN_PREFIXES) + r")[A-Za-z0-9_-]{8,}")
_BEARER_RE = re.compile(r"\bbearer\s+[A-Za-z0-9._~+/=-]{16,}", re.IGNORECASE)


def looks_like_secret_value(value: str) -> bool:
    """Return True if the value is itself a credential (prefix match after trimming)."""
    if not isinstance(value, str):
        return False
    lowered = value.lstrip().lower()
    if lowered.startswith("bearer "):
        return True
    return lowered.startswith(_TOKEN_PREFIXES)


def contains_secret(text: str) -> bool:
    """Return True if a credential-looking substring appears anywhere in `text`."""
    if not isinstance(text, str):
        return False
    return bool(_TOKEN_RE.search(text) or _BEARER_RE.search(text))


def validate_no_secrets(text: str, *, what: str) -> None:
    """Reject text that embeds credentials.

    Raises:
        ActionError: Without echoing the suspected secret.
    """
    if contains_secret(text):
        raise ActionError(code="UserInput", message=f"{what} contains a credential-like value")


def redact_text(text: str) -> str:
    """Return a representation of `text` safe for logs."""
    if not isinstance(text, str):
        return "<non-string>"
    if looks_like_secret_value(text):
        return "<redacted>"
    return _BEARER_RE.sub("<redacted>", _TOKEN_RE.sub("<redacted>", text))
