"""GitHub Actions glue for triggering an AI coding assistant.

Normalizes the triggering event, workflow inputs and environment into a single
context record, and builds the MCP tool-server configuration handed to the assistant.

Run with: python -m assistant_action prepare
"""

__version__ = "0.3.0"
