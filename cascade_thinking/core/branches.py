"""Branch bookkeeping.

A branch is a named alternative line of reasoning forked from an existing
thought. Founding a branch always starts a fresh sequence whose
``parent_branch_id`` names the branch; the current branch is derived from
the current sequence rather than stored separately.
"""

import logging
from typing import Dict, List, Optional, Set

from cascade_thinking.core.utils import BRANCH_CONTEXT_SIZE, format_branch_label, preview
from cascade_thinking.errors import UnknownBranchError
from cascade_thinking.types import (
    MAIN_BRANCH,
    BranchMetadata,
    RecentThought,
    SequenceMetadata,
    Thought,
    utc_now,
)

logger = logging.getLogger(__name__)


class BranchesMixin:
    """Branch records, switching and the branch tree."""

    _thoughts: List[Thought]
    _sequences: Dict[str, SequenceMetadata]
    _branches: Dict[str, BranchMetadata]
    _current_sequence_id: Optional[str]

    @property
    def branches(self) -> Dict[str, BranchMetadata]:
        return dict(self._branches)

    def get_branch(self, branch_id: str) -> Optional[BranchMetadata]:
        return self._branches.get(branch_id)

    def resolve_switch_target(self, branch_id: str) -> Optional[str]:
        """Return the sequence id a switch to ``branch_id`` lands on.

        ``"main"`` maps to the first parentless sequence, or None when no
        sequence exists yet.
        """
        if branch_id == MAIN_BRANCH:
            return self.main_sequence_id()
        branch = self._branches.get(branch_id)
        if branch is None:
            raise UnknownBranchError(branch_id, list(self._branches))
        return branch.current_sequence_id

    def branch_for_sequence(self, sequence_id: Optional[str]) -> Optional[BranchMetadata]:
        if sequence_id is None:
            return None
        sequence = self._sequences.get(sequence_id)
        if sequence is None or sequence.parent_branch_id is None:
            return None
        return self._branches.get(sequence.parent_branch_id)

    def current_branch_id(self) -> str:
        branch = self.branch_for_sequence(self._current_sequence_id)
        return branch.branch_id if branch else MAIN_BRANCH

    def capture_branch_context(self, origin_absolute: int) -> List[RecentThought]:
        """The last few thoughts up to and including the branch origin."""
        start = max(0, origin_absolute - BRANCH_CONTEXT_SIZE)
        return [preview(t) for t in self._thoughts[start:origin_absolute]]

    def found_branch(
        self,
        branch_id: str,
        origin_absolute: int,
        sequence_id: str,
        description: Optional[str] = None,
    ) -> BranchMetadata:
        """Create (or overwrite) a branch rooted at ``origin_absolute``."""
        origin = self._thoughts[origin_absolute - 1]
        if branch_id in self._branches:
            logger.info(f"Branch '{branch_id}' already exists, overwriting")

        branch = BranchMetadata(
            branch_id=branch_id,
            from_sequence_id=origin.sequence_id,
            from_absolute_thought=origin_absolute,
            from_sequence_thought=origin.sequence_position,
            current_sequence_id=sequence_id,
            created_at=utc_now(),
            description=description,
            thoughts_in_branch=1,
        )
        self._branches[branch_id] = branch

        origin_sequence = self._sequences[origin.sequence_id]
        if branch_id not in origin_sequence.branches:
            origin_sequence.branches.append(branch_id)
        return branch

    def active_branch_count(self, sequence_id: Optional[str]) -> int:
        """Branches spawned from, or represented by, a sequence."""
        if sequence_id is None:
            return 0
        related: Set[str] = set(self._sequences[sequence_id].branches)
        own = self.branch_for_sequence(sequence_id)
        if own is not None:
            related.add(own.branch_id)
        return len(related)

    def build_branch_tree(self) -> str:
        """Render every branch nested under the sequence it was forked from."""
        lines = ["Branch Tree Structure:"]
        main_id = self.main_sequence_id()
        visited: Set[str] = set()

        for sequence in self._sequences.values():
            if sequence.parent_branch_id is not None:
                continue
            children = self._branches_from([sequence.id])
            if sequence.id == main_id:
                label = "Main"
            elif children:
                label = sequence.summary
            else:
                continue
            lines.append(f"📋 {label} ({sequence.total_thoughts} thoughts)")
            self._render_branches(children, "", lines, visited)

        return "\n".join(lines)

    def _branches_from(self, sequence_ids: List[str]) -> List[BranchMetadata]:
        return [b for b in self._branches.values() if b.from_sequence_id in sequence_ids]

    def _render_branches(
        self,
        children: List[BranchMetadata],
        prefix: str,
        lines: List[str],
        visited: Set[str],
    ) -> None:
        children = [b for b in children if b.branch_id not in visited]
        for index, branch in enumerate(children):
            visited.add(branch.branch_id)
            last = index == len(children) - 1
            connector = "└─ " if last else "├─ "
            label = format_branch_label(branch.branch_id, branch.description)
            lines.append(f"{prefix}{connector}🌿 {label} [{branch.thoughts_in_branch} thoughts]")

            own_sequences = [
                s.id for s in self._sequences.values() if s.parent_branch_id == branch.branch_id
            ]
            self._render_branches(
                self._branches_from(own_sequences),
                prefix + ("   " if last else "│  "),
                lines,
                visited,
            )
