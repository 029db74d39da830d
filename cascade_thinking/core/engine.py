"""ThinkingEngine: the thought acceptance pipeline.

The engine is composed from mixins, one per bookkeeping concern, the same
way the rest of the package groups behaviour. All checks for a thought run
before anything is written, so a rejected call leaves the engine exactly
as it was.
"""

import logging
import math
import threading
from typing import Any, Dict, List, Optional

from cascade_thinking.core.branches import BranchesMixin
from cascade_thinking.core.gaps import GapsMixin
from cascade_thinking.core.references import ReferencesMixin
from cascade_thinking.core.responses import AcceptedThought, ResponseMixin
from cascade_thinking.core.sequences import SequencesMixin
from cascade_thinking.core.utils import (
    DEFAULT_RECENT_THOUGHTS_LIMIT,
    EXPANSION_FACTOR,
    MIN_EXPANSION,
)
from cascade_thinking.core.validation import validate_thought_data
from cascade_thinking.errors import CascadeError, MutuallyExclusiveOptionsError
from cascade_thinking.formatter import format_thought
from cascade_thinking.logging_config import (
    THOUGHT_LOGGER_NAME,
    log_thought_event,
    thought_logging_disabled,
)
from cascade_thinking.types import (
    BranchMetadata,
    SequenceMetadata,
    Thought,
    ThoughtDraft,
    ThoughtResult,
    is_default_source,
)

logger = logging.getLogger(__name__)
thought_logger = logging.getLogger(THOUGHT_LOGGER_NAME)


class ThinkingEngine(
    ReferencesMixin,
    SequencesMixin,
    BranchesMixin,
    GapsMixin,
    ResponseMixin,
):
    """Stateful bookkeeping for multi-sequence, branching thought streams.

    Examples:
        engine = ThinkingEngine()
        result = engine.process_thought({
            "thought": "Outline the problem",
            "thoughtNumber": "S1",
            "totalThoughts": 3,
            "nextThoughtNeeded": True,
        })
        result.payload["absoluteThoughtNumber"]  # "A1"
    """

    def __init__(self, disable_thought_logging: Optional[bool] = None):
        """
        Args:
            disable_thought_logging: Skip rendering thought boxes to the log.
                Defaults to the DISABLE_THOUGHT_LOGGING environment variable.
        """
        self._thoughts: List[Thought] = []
        self._sequences: Dict[str, SequenceMetadata] = {}
        self._sequence_thoughts: Dict[str, List[int]] = {}
        self._branches: Dict[str, BranchMetadata] = {}
        self._current_sequence_id: Optional[str] = None
        self._last_user_absolute: Optional[int] = None
        self._isolated_engines: Dict[str, "ThinkingEngine"] = {}
        self._lock = threading.Lock()

        if disable_thought_logging is None:
            disable_thought_logging = thought_logging_disabled()
        self._disable_thought_logging = disable_thought_logging

    @property
    def absolute_counter(self) -> int:
        return len(self._thoughts)

    @property
    def thoughts(self) -> List[Thought]:
        return list(self._thoughts)

    def snapshot(self) -> Dict[str, Any]:
        """Counters and ids describing the engine state, for inspection."""
        return {
            "absoluteCounter": len(self._thoughts),
            "currentSequenceId": self._current_sequence_id,
            "currentBranch": self.current_branch_id(),
            "sequences": {sid: len(ids) for sid, ids in self._sequence_thoughts.items()},
            "branches": {bid: b.thoughts_in_branch for bid, b in self._branches.items()},
            "lastUserAbsolute": self._last_user_absolute,
            "isolatedContexts": sorted(self._isolated_engines),
        }

    # =========================================================================
    # Entry points
    # =========================================================================

    def process_thought(self, arguments: Any) -> ThoughtResult:
        """Validate, accept and describe one thought.

        Never raises for caller errors: they come back as a failure result.
        """
        try:
            draft = validate_thought_data(arguments)
        except CascadeError as e:
            return self._reject(e)

        if draft.isolated_context and draft.tool_source:
            return self.isolated_engine(draft.tool_source).accept(draft)
        return self.accept(draft)

    def isolated_engine(self, tool_source: str) -> "ThinkingEngine":
        """The private engine for ``tool_source``, created on first use."""
        with self._lock:
            engine = self._isolated_engines.get(tool_source)
            if engine is None:
                engine = ThinkingEngine(disable_thought_logging=self._disable_thought_logging)
                self._isolated_engines[tool_source] = engine
                logger.info(f"Created isolated context for {tool_source}")
        return engine

    def accept(self, draft: ThoughtDraft) -> ThoughtResult:
        """Run a validated draft through the pipeline on this engine."""
        with self._lock:
            try:
                accepted = self._accept(draft)
            except CascadeError as e:
                return self._reject(e)
            except Exception as e:
                logger.exception(f"Unexpected error processing thought: {e}")
                return ThoughtResult.failure(str(e))

            self._render(accepted.thought)
            return ThoughtResult(self.compose_response(accepted))

    # =========================================================================
    # Pipeline
    # =========================================================================

    def _accept(self, draft: ThoughtDraft) -> AcceptedThought:
        if draft.switch_to_branch and draft.start_new_sequence:
            raise MutuallyExclusiveOptionsError(
                "Cannot combine switchToBranch with startNewSequence. "
                "Please use one or the other."
            )

        base_sequence_id = self._current_sequence_id
        if draft.switch_to_branch:
            target = self.resolve_switch_target(draft.switch_to_branch)
            if target is not None:
                base_sequence_id = target

        origin: Optional[int] = None
        branch_context = None
        if draft.founds_branch:
            origin = self.resolve_reference(draft.branch_from_thought, base_sequence_id)
            branch_context = self.capture_branch_context(origin)

        force_new = bool(draft.start_new_sequence) or draft.founds_branch
        landing = self.plan_landing_sequence(base_sequence_id, force_new)
        position = self.check_position(
            draft.thought_number, self.expected_position(landing), draft.tool_source
        )

        gap = self.detect_gap(draft.tool_source)

        total = max(draft.total_thoughts, position)
        expanded = bool(draft.needs_more_thoughts)
        if expanded:
            total = position + max(MIN_EXPANSION, math.ceil(total * EXPANSION_FACTOR))

        revises = None
        if draft.revises_thought:
            revises = self.resolve_reference(draft.revises_thought, landing)
        branch_from = origin
        if draft.branch_from_thought and branch_from is None:
            branch_from = self.resolve_reference(draft.branch_from_thought, landing)

        # Every check has passed; commit.
        if landing is None:
            description = draft.sequence_description
            if draft.founds_branch and not description:
                description = f"Branch: {draft.branch_description or draft.branch_id}"
            sequence_id = self.obtain_sequence(
                True,
                description,
                branch_context,
                draft.branch_id if draft.founds_branch else None,
            )
        else:
            sequence_id = landing
            if sequence_id != self._current_sequence_id:
                logger.debug(f"Switched to {draft.switch_to_branch} ({sequence_id})")
            self._current_sequence_id = sequence_id

        absolute = len(self._thoughts) + 1
        thought = Thought(
            content=draft.thought,
            sequence_position=position,
            absolute_position=absolute,
            sequence_id=sequence_id,
            total_thoughts=total,
            next_thought_needed=draft.next_thought_needed,
            is_revision=bool(draft.is_revision),
            revises_thought=revises,
            branch_from_thought=branch_from,
            branch_id=draft.branch_id,
            branch_description=draft.branch_description,
            needs_more_thoughts=expanded,
            start_new_sequence=bool(draft.start_new_sequence),
            sequence_description=draft.sequence_description,
            tool_source=draft.tool_source,
        )
        self._thoughts.append(thought)
        self._record_in_sequence(sequence_id, absolute)

        if draft.founds_branch:
            self.found_branch(draft.branch_id, origin, sequence_id, draft.branch_description)
        else:
            branch = self.branch_for_sequence(sequence_id)
            if branch is not None:
                branch.thoughts_in_branch += 1

        if is_default_source(draft.tool_source):
            self._last_user_absolute = absolute

        log_thought_event(
            "accepted",
            absolute=f"A{absolute}",
            position=f"S{position}",
            sequence=sequence_id,
            branch=self.current_branch_id(),
            source=draft.tool_source,
        )

        retrieved = None
        if draft.retrieve_thoughts is not None:
            retrieved = self.retrieve_thoughts(draft.retrieve_thoughts)

        recent_limit = draft.recent_thoughts_limit
        if recent_limit is None:
            recent_limit = DEFAULT_RECENT_THOUGHTS_LIMIT

        return AcceptedThought(
            thought=thought,
            mode=draft.response_mode,
            recent_limit=recent_limit,
            gap=gap,
            expanded=expanded,
            founded_branch=draft.founds_branch,
            retrieved=retrieved,
        )

    def _render(self, thought: Thought) -> None:
        if self._disable_thought_logging:
            return
        thought_logger.info("\n" + format_thought(thought, self.current_branch_id()))

    @staticmethod
    def _reject(error: CascadeError) -> ThoughtResult:
        logger.warning(f"Rejected thought: {error}")
        log_thought_event("rejected", error=type(error).__name__)
        return ThoughtResult.failure(str(error))
