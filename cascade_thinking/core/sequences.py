"""Sequence bookkeeping: minting sequences and validating positions."""

import logging
from typing import Dict, List, Optional

from cascade_thinking.errors import InvalidPositionError
from cascade_thinking.types import (
    RecentThought,
    SequenceMetadata,
    Thought,
    is_default_source,
    utc_now,
)

logger = logging.getLogger(__name__)


class SequencesMixin:
    """Owns the sequence table and the per-sequence thought counters."""

    _thoughts: List[Thought]
    _sequences: Dict[str, SequenceMetadata]
    _sequence_thoughts: Dict[str, List[int]]
    _current_sequence_id: Optional[str]

    @property
    def current_sequence_id(self) -> Optional[str]:
        return self._current_sequence_id

    @property
    def current_sequence(self) -> Optional[SequenceMetadata]:
        if self._current_sequence_id is None:
            return None
        return self._sequences[self._current_sequence_id]

    def sequence_thought_count(self, sequence_id: Optional[str]) -> int:
        """Number of thoughts in a sequence (0 for one not yet minted)."""
        if sequence_id is None:
            return 0
        return len(self._sequence_thoughts.get(sequence_id, []))

    def get_sequence(self, sequence_id: str) -> Optional[SequenceMetadata]:
        return self._sequences.get(sequence_id)

    def list_sequences(self) -> List[SequenceMetadata]:
        return list(self._sequences.values())

    def main_sequence_id(self) -> Optional[str]:
        """The first sequence with no parent branch, i.e. the "main" line."""
        for sequence in self._sequences.values():
            if sequence.parent_branch_id is None:
                return sequence.id
        return None

    def plan_landing_sequence(self, base_sequence_id: Optional[str], force_new: bool) -> Optional[str]:
        """Pick the sequence a thought will land in without creating it.

        Returns None when a new sequence must be minted at commit.
        """
        if force_new or base_sequence_id is None:
            return None
        return base_sequence_id

    def expected_position(self, landing_sequence_id: Optional[str]) -> int:
        return self.sequence_thought_count(landing_sequence_id) + 1

    def check_position(
        self,
        given: Optional[int],
        expected: int,
        tool_source: Optional[str],
    ) -> int:
        """Return the position the thought will be recorded at.

        The user must supply exactly the next position. Other callers
        (agents, tasks) cannot know it, so their position is replaced.
        """
        if given is None:
            return expected
        if given == expected:
            return given
        if is_default_source(tool_source):
            raise InvalidPositionError(expected, given)
        logger.debug(f"Auto-correcting S{given} to S{expected} for source {tool_source}")
        return expected

    def obtain_sequence(
        self,
        force_new: bool,
        description: Optional[str] = None,
        branch_context: Optional[List[RecentThought]] = None,
        parent_branch_id: Optional[str] = None,
    ) -> str:
        """Return the current sequence id, minting a new sequence when asked
        or when none exists yet. A minted sequence becomes current."""
        if not force_new and self._current_sequence_id is not None:
            return self._current_sequence_id

        sequence_id = f"seq_{len(self._sequences) + 1}"
        next_absolute = len(self._thoughts) + 1
        self._sequences[sequence_id] = SequenceMetadata(
            id=sequence_id,
            summary=description or f"Sequence starting at A{next_absolute}",
            started_at=utc_now(),
            absolute_start_thought=next_absolute,
            branch_context=branch_context,
            parent_branch_id=parent_branch_id,
        )
        self._sequence_thoughts[sequence_id] = []
        self._current_sequence_id = sequence_id
        logger.debug(f"Started sequence {sequence_id} at A{next_absolute}")
        return sequence_id

    def _record_in_sequence(self, sequence_id: str, absolute_position: int) -> None:
        self._sequence_thoughts[sequence_id].append(absolute_position)
        self._sequences[sequence_id].total_thoughts += 1
