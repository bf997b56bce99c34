"""GitHub Actions step outputs and workflow commands."""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from pathlib import Path


def escape_workflow_command(value: str) -> str:
    """Escape a string for `::error::`-style workflow commands."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_output(name: str, value: str) -> str:
    """Format one `name=value` entry, using a heredoc delimiter for multi-line values."""
    if "\n" not in value and "\r" not in value:
        return f"{name}={value}\n"
    delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def write_outputs(output_path: str, outputs: Mapping[str, str]) -> None:
    """Append outputs to the file named by GITHUB_OUTPUT."""
    with Path(output_path).open("a", encoding="utf-8") as f:
        for name, value in outputs.items():
            f.write(format_output(name, value))
