"""Structural validation of raw thought requests.

``validate_thought_data`` turns an untyped argument mapping (as received
from the MCP transport) into a :class:`~cascade_thinking.types.ThoughtDraft`
or raises a :class:`~cascade_thinking.errors.ThoughtValidationError`. Only
shape is checked here; whether positions and references make sense against
engine state is decided by the engine.
"""

import logging
import math
import re
from typing import Any, Dict, Optional

from cascade_thinking.core.references import parse_reference, parse_retrieve_pattern
from cascade_thinking.core.utils import MAX_RECENT_THOUGHTS_LIMIT
from cascade_thinking.errors import (
    InvalidReferenceFormatError,
    InvalidTotalError,
    ThoughtValidationError,
)
from cascade_thinking.types import ResponseMode, ThoughtDraft

logger = logging.getLogger(__name__)

_THOUGHT_NUMBER_RE = re.compile(r"^[Ss](\d+)$")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_STRING_FIELDS = {
    "branchId": "branch_id",
    "branchDescription": "branch_description",
    "sequenceDescription": "sequence_description",
    "toolSource": "tool_source",
    "switchToBranch": "switch_to_branch",
}

_BOOLEAN_FIELDS = {
    "isRevision": "is_revision",
    "needsMoreThoughts": "needs_more_thoughts",
    "startNewSequence": "start_new_sequence",
    "isolatedContext": "isolated_context",
}

_REFERENCE_FIELDS = {
    "revisesThought": "revises_thought",
    "branchFromThought": "branch_from_thought",
}


def sanitize_string(value: str) -> str:
    """Remove null bytes and control characters except newlines and tabs."""
    return _CONTROL_CHARS_RE.sub("", value)


def _optional_string(arguments: Dict[str, Any], field_name: str) -> Optional[str]:
    value = arguments.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ThoughtValidationError(f"Invalid {field_name}: must be a string")
    # Empty optional strings behave as if the field was omitted
    return sanitize_string(value) or None


def _optional_bool(arguments: Dict[str, Any], field_name: str) -> Optional[bool]:
    value = arguments.get(field_name)
    if value is None:
        return None
    if not isinstance(value, bool):
        raise ThoughtValidationError(f"Invalid {field_name}: must be a boolean")
    return value


def _is_integral(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _validate_thought_number(value: Any, switching: bool) -> Optional[int]:
    if value is None and switching:
        return None
    if not isinstance(value, str):
        raise ThoughtValidationError(
            "Invalid thoughtNumber: must be a string with S prefix (e.g., 'S1', 'S2')"
        )
    match = _THOUGHT_NUMBER_RE.match(value.strip())
    if match is None:
        raise ThoughtValidationError(
            "Invalid thoughtNumber: must match pattern S{n} or s{n} (e.g., 'S1', 's2')"
        )
    return int(match.group(1))


def _validate_total(value: Any) -> int:
    if (
        isinstance(value, bool)
        or not isinstance(value, (int, float))
        or (isinstance(value, float) and (math.isnan(value) or math.isinf(value)))
    ):
        raise ThoughtValidationError("Invalid totalThoughts: must be a number")
    if not _is_integral(value):
        raise ThoughtValidationError("Invalid totalThoughts: must be an integer")
    if value < 1:
        raise InvalidTotalError("Invalid totalThoughts: must be at least 1")
    return int(value)


def _validate_reference(arguments: Dict[str, Any], field_name: str) -> Optional[str]:
    value = arguments.get(field_name)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ThoughtValidationError(f"Invalid {field_name}: must be a string")
    try:
        parse_reference(value)
    except InvalidReferenceFormatError as e:
        raise ThoughtValidationError(
            f"Invalid {field_name}: must match pattern A{{n}} or S{{n}} (e.g., 'A47', 'S3')"
        ) from e
    return value.strip()


def _validate_recent_limit(value: Any) -> Optional[int]:
    if value is None:
        return None
    if not _is_integral(value):
        raise ThoughtValidationError("recentThoughtsLimit must be an integer")
    if value < 0:
        raise ThoughtValidationError("recentThoughtsLimit must be non-negative")
    if value > MAX_RECENT_THOUGHTS_LIMIT:
        raise ThoughtValidationError(
            f"recentThoughtsLimit must not exceed {MAX_RECENT_THOUGHTS_LIMIT}"
        )
    return int(value)


def _validate_response_mode(value: Any) -> ResponseMode:
    if value is None:
        return ResponseMode.STANDARD
    if not isinstance(value, str):
        raise ThoughtValidationError("responseMode must be a string")
    try:
        return ResponseMode(value)
    except ValueError:
        valid = ", ".join(m.value for m in ResponseMode)
        raise ThoughtValidationError(f"responseMode must be one of: {valid}") from None


def validate_thought_data(arguments: Any) -> ThoughtDraft:
    """Validate a raw request and return a typed draft.

    Args:
        arguments: The tool arguments, normally a dict decoded from JSON.

    Returns:
        A ThoughtDraft with parsed positions and normalised options.

    Raises:
        ThoughtValidationError: On the first field that has the wrong shape.
    """
    if not isinstance(arguments, dict):
        raise ThoughtValidationError("Invalid thought: must be a string")

    thought = arguments.get("thought")
    if not isinstance(thought, str) or not thought:
        raise ThoughtValidationError("Invalid thought: must be a string")

    switching = bool(arguments.get("switchToBranch"))
    thought_number = _validate_thought_number(arguments.get("thoughtNumber"), switching)
    total_thoughts = _validate_total(arguments.get("totalThoughts"))

    next_thought_needed = arguments.get("nextThoughtNeeded")
    if not isinstance(next_thought_needed, bool):
        raise ThoughtValidationError("Invalid nextThoughtNeeded: must be a boolean")

    options: Dict[str, Any] = {}
    for field_name, attr in _REFERENCE_FIELDS.items():
        options[attr] = _validate_reference(arguments, field_name)
    for field_name, attr in _STRING_FIELDS.items():
        options[attr] = _optional_string(arguments, field_name)
    for field_name, attr in _BOOLEAN_FIELDS.items():
        options[attr] = _optional_bool(arguments, field_name)

    options["recent_thoughts_limit"] = _validate_recent_limit(
        arguments.get("recentThoughtsLimit")
    )
    options["response_mode"] = _validate_response_mode(arguments.get("responseMode"))

    retrieve = arguments.get("retrieveThoughts")
    if retrieve is not None:
        if not isinstance(retrieve, str):
            raise ThoughtValidationError("retrieveThoughts must be a string")
        options["retrieve_thoughts"] = parse_retrieve_pattern(retrieve)

    return ThoughtDraft(
        thought=sanitize_string(thought),
        thought_number=thought_number,
        total_thoughts=total_thoughts,
        next_thought_needed=next_thought_needed,
        **options,
    )
