"""Validator and handler registry for the cascade thinking MCP tool.

Field-level validation belongs to the engine, which reports it as a
structured failure payload. The validator here only guards the transport:
the arguments must be JSON-serializable and reasonably small.
"""

import json
import os
from typing import Any, Callable, Dict

from cascade_thinking.core import ThinkingEngine
from cascade_thinking.mcp.tool_definitions import TOOL_NAME
from cascade_thinking.types import ThoughtResult

DEFAULT_MAX_ARGUMENT_BYTES = 64 * 1024


def max_argument_bytes() -> int:
    raw = os.environ.get("CASCADE_MAX_ARGUMENT_BYTES", "")
    try:
        value = int(raw)
    except ValueError:
        return DEFAULT_MAX_ARGUMENT_BYTES
    return value if value > 0 else DEFAULT_MAX_ARGUMENT_BYTES


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def validate_cascade_thinking(arguments: Dict[str, Any]) -> Dict[str, Any]:
    try:
        payload = json.dumps(arguments, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        raise ValueError(f"arguments are not JSON-serializable: {e}") from e

    limit = max_argument_bytes()
    payload_size = len(payload.encode("utf-8"))
    if payload_size > limit:
        raise ValueError(f"arguments payload too large ({payload_size} bytes, max {limit})")

    return dict(arguments)


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def handle_cascade_thinking(arguments: Dict[str, Any], engine: ThinkingEngine) -> ThoughtResult:
    return engine.process_thought(arguments)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

HANDLERS: Dict[str, Callable] = {
    TOOL_NAME: handle_cascade_thinking,
}

VALIDATORS: Dict[str, Callable] = {
    TOOL_NAME: validate_cascade_thinking,
}
