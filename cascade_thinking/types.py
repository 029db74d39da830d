"""
Shared types for cascade_thinking.

These dataclasses are the vocabulary between the validator, the engine
mixins, the renderer and the MCP layer. Field names are snake_case here;
the camelCase wire names only appear when a response payload is built.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Union

# Reserved branch name for the first parentless sequence.
MAIN_BRANCH = "main"

# Source tag assigned to callers that do not name themselves.
DEFAULT_TOOL_SOURCE = "user"


def utc_now() -> str:
    """Get current timestamp as ISO string in UTC."""
    return datetime.now(timezone.utc).isoformat()


def is_default_source(tool_source: Optional[str]) -> bool:
    """True when a thought came from the primary (user) caller."""
    return tool_source is None or tool_source == DEFAULT_TOOL_SOURCE


# === Enums ===


class ResponseMode(str, Enum):
    """How much state a response carries. Each mode includes the previous one."""

    MINIMAL = "minimal"
    STANDARD = "standard"
    VERBOSE = "verbose"


class ReferenceKind(str, Enum):
    """Coordinate system of a thought reference."""

    ABSOLUTE = "A"  # Global position across all sequences
    SEQUENCE = "S"  # Position inside the current sequence


# === References ===


@dataclass(frozen=True)
class Reference:
    """A parsed ``A{n}`` or ``S{n}`` reference."""

    kind: ReferenceKind
    number: int

    def __str__(self) -> str:
        return f"{self.kind.value}{self.number}"


@dataclass(frozen=True)
class LastN:
    """Retrieve the most recent ``count`` thoughts."""

    count: int


@dataclass(frozen=True)
class ReferenceRange:
    """Inclusive range of positions in one coordinate system."""

    kind: ReferenceKind
    start: int
    end: int


@dataclass(frozen=True)
class ReferenceList:
    """Explicit list of references, resolved one by one."""

    references: List[Reference]


RetrievalPattern = Union[LastN, ReferenceRange, ReferenceList]


# === Ledger records ===


@dataclass(frozen=True)
class Thought:
    """An accepted thought. Never modified after it enters the ledger."""

    content: str
    sequence_position: int
    absolute_position: int
    sequence_id: str
    total_thoughts: int
    next_thought_needed: bool
    is_revision: bool = False
    revises_thought: Optional[int] = None  # absolute position
    branch_from_thought: Optional[int] = None  # absolute position
    branch_id: Optional[str] = None
    branch_description: Optional[str] = None
    needs_more_thoughts: bool = False
    start_new_sequence: bool = False
    sequence_description: Optional[str] = None
    tool_source: Optional[str] = None


@dataclass
class RecentThought:
    """Truncated view of a thought used in windows and branch context."""

    absolute: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {"absolute": self.absolute, "content": self.content}


@dataclass
class SequenceMetadata:
    """A contiguous run of thoughts sharing a sequence id."""

    id: str
    summary: str
    started_at: str
    absolute_start_thought: int
    total_thoughts: int = 0
    branches: List[str] = field(default_factory=list)
    branch_context: Optional[List[RecentThought]] = None
    parent_branch_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "summary": self.summary,
            "startedAt": self.started_at,
            "absoluteStartThought": self.absolute_start_thought,
            "totalThoughts": self.total_thoughts,
            "branches": list(self.branches),
        }
        if self.branch_context is not None:
            data["branchContext"] = [t.to_dict() for t in self.branch_context]
        if self.parent_branch_id is not None:
            data["parentBranchId"] = self.parent_branch_id
        return data


@dataclass
class BranchMetadata:
    """A named alternative line of reasoning."""

    branch_id: str
    from_sequence_id: str
    from_absolute_thought: int
    from_sequence_thought: int
    current_sequence_id: str
    created_at: str
    description: Optional[str] = None
    thoughts_in_branch: int = 1

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "branchId": self.branch_id,
            "fromSequenceId": self.from_sequence_id,
            "fromAbsoluteThought": self.from_absolute_thought,
            "fromSequenceThought": self.from_sequence_thought,
            "currentSequenceId": self.current_sequence_id,
            "createdAt": self.created_at,
            "thoughtsInBranch": self.thoughts_in_branch,
        }
        if self.description is not None:
            data["description"] = self.description
        return data


@dataclass
class GapInfo:
    """Thoughts created by other callers since the user's last thought."""

    has_gap: bool
    gap_size: int
    explanation: str
    created_by: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hasGap": self.has_gap,
            "gapSize": self.gap_size,
            "explanation": self.explanation,
            "createdBy": list(self.created_by),
        }


# === Inputs and outputs ===


@dataclass
class ThoughtDraft:
    """A structurally valid thought request, not yet accepted.

    ``thought_number`` is the parsed integer of ``S{n}`` and may be None
    only when ``switch_to_branch`` is set.
    """

    thought: str
    total_thoughts: int
    next_thought_needed: bool
    thought_number: Optional[int] = None
    is_revision: Optional[bool] = None
    revises_thought: Optional[str] = None
    branch_from_thought: Optional[str] = None
    branch_id: Optional[str] = None
    branch_description: Optional[str] = None
    needs_more_thoughts: Optional[bool] = None
    response_mode: ResponseMode = ResponseMode.STANDARD
    start_new_sequence: Optional[bool] = None
    sequence_description: Optional[str] = None
    tool_source: Optional[str] = None
    isolated_context: Optional[bool] = None
    switch_to_branch: Optional[str] = None
    recent_thoughts_limit: Optional[int] = None
    retrieve_thoughts: Optional[RetrievalPattern] = None

    @property
    def founds_branch(self) -> bool:
        """Branch creation needs both an origin and an id."""
        return bool(self.branch_from_thought and self.branch_id)


@dataclass
class ThoughtResult:
    """Outcome of one call: a success payload or a failure payload."""

    payload: Dict[str, Any]
    is_error: bool = False

    @classmethod
    def failure(cls, message: str) -> "ThoughtResult":
        return cls({"error": message, "status": "failed"}, is_error=True)

    @property
    def text(self) -> str:
        return json.dumps(self.payload, indent=2, ensure_ascii=False)
