"""Compose response payloads for accepted thoughts.

Response modes are additive: every field of ``minimal`` is in ``standard``
and every field of ``standard`` is in ``verbose``. Payload keys use the
camelCase names of the tool protocol.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from cascade_thinking.core.utils import (
    DEFAULT_RECENT_THOUGHTS_LIMIT,
    SUMMARY_THRESHOLD,
    preview,
)
from cascade_thinking.types import (
    MAIN_BRANCH,
    BranchMetadata,
    GapInfo,
    RecentThought,
    ResponseMode,
    SequenceMetadata,
    Thought,
    is_default_source,
)


@dataclass
class AcceptedThought:
    """What the pipeline knows about a thought once it is committed."""

    thought: Thought
    mode: ResponseMode
    recent_limit: int = DEFAULT_RECENT_THOUGHTS_LIMIT
    gap: Optional[GapInfo] = None
    expanded: bool = False
    founded_branch: bool = False
    retrieved: Optional[List[RecentThought]] = None


class ResponseMixin:
    """Builds the payload returned for an accepted thought."""

    _thoughts: List[Thought]
    _sequences: Dict[str, SequenceMetadata]
    _branches: Dict[str, BranchMetadata]

    def compose_response(self, accepted: AcceptedThought) -> Dict[str, Any]:
        thought = accepted.thought
        sequence = self._sequences[thought.sequence_id]
        branch_id = self.current_branch_id()

        response: Dict[str, Any] = {
            "thoughtNumber": f"S{thought.sequence_position}",
            "absoluteThoughtNumber": f"A{thought.absolute_position}",
            "totalThoughts": thought.total_thoughts,
            "nextThoughtNeeded": thought.next_thought_needed,
            "hint": self.build_hint(accepted),
        }
        if thought.next_thought_needed:
            response["expectedThoughtNumber"] = f"S{thought.sequence_position + 1}"
        if accepted.expanded:
            response["needsMoreThoughts"] = True
            response["adjustedTotalThoughts"] = thought.total_thoughts
        if accepted.retrieved is not None:
            response["retrievedThoughts"] = [t.to_dict() for t in accepted.retrieved]

        if accepted.mode is ResponseMode.MINIMAL:
            if (
                branch_id != MAIN_BRANCH
                or accepted.founded_branch
                or thought.is_revision
                or thought.branch_from_thought is not None
            ):
                response["currentBranch"] = branch_id
            if thought.is_revision:
                response["currentSequence"] = self._sequence_view(sequence)
            return response

        response["currentSequence"] = self._sequence_view(sequence)
        response["recentThoughts"] = [
            t.to_dict() for t in self.recent_thoughts(accepted.recent_limit)
        ]
        if accepted.recent_limit != DEFAULT_RECENT_THOUGHTS_LIMIT:
            response["recentThoughtsLimit"] = accepted.recent_limit
        response["totalSequences"] = len(self._sequences)
        response["totalThoughtsAllTime"] = len(self._thoughts)
        response["activeBranches"] = self.active_branch_count(sequence.id)
        response["currentBranch"] = branch_id
        if self._branches:
            response["availableBranches"] = [
                self._branch_view(b) for b in self._branches.values()
            ]
        if accepted.gap is not None:
            response["gapInfo"] = accepted.gap.to_dict()
        if sequence.total_thoughts > SUMMARY_THRESHOLD:
            response["sequenceSummary"] = self.summarize_sequence(sequence, thought)
        if not is_default_source(thought.tool_source):
            response["toolSource"] = thought.tool_source

        if accepted.mode is ResponseMode.VERBOSE:
            response["sequenceHistory"] = [s.to_dict() for s in self._sequences.values()]
            response["branches"] = {bid: b.to_dict() for bid, b in self._branches.items()}
            if self._branches:
                response["branchTree"] = self.build_branch_tree()

        return response

    def recent_thoughts(self, limit: int = DEFAULT_RECENT_THOUGHTS_LIMIT) -> List[RecentThought]:
        """The last ``limit`` thoughts of the whole ledger, oldest first."""
        if limit <= 0:
            return []
        return [preview(t) for t in self._thoughts[-limit:]]

    def build_hint(self, accepted: AcceptedThought) -> str:
        thought = accepted.thought
        branch = self.branch_for_sequence(thought.sequence_id)

        if branch is not None:
            hint = f"On branch '{branch.branch_id}'"
            if branch.description:
                hint += f" ({branch.description})"
            hint += f" with {branch.thoughts_in_branch} thoughts"
        else:
            hint = f"Continuing: {self._sequences[thought.sequence_id].summary}"

        if self._branches:
            roster = ", ".join(
                f"{b.branch_id}({b.thoughts_in_branch})" for b in self._branches.values()
            )
            hint += f" | Branches: {roster}"
        if not is_default_source(thought.tool_source):
            hint += f" (created by {thought.tool_source})"
        if accepted.gap is not None:
            hint += " [Note: Some thoughts created by other tools]"
        if accepted.expanded:
            hint += " [Total thoughts expanded]"
        return hint

    def summarize_sequence(self, sequence: SequenceMetadata, latest: Thought) -> str:
        members = [t for t in self._thoughts if t.sequence_id == sequence.id]
        revisions = sum(1 for t in members if t.is_revision)
        expansions = sum(1 for t in members if t.needs_more_thoughts)

        parts = []
        if revisions:
            parts.append(f"Key revisions: {revisions} thoughts revised")
        if sequence.branches:
            parts.append(f"Branches created: {', '.join(sequence.branches)}")
        if expansions:
            parts.append(f"Expanded thinking {expansions} time(s)")
        total = max(latest.total_thoughts, 1)
        progress = round(sequence.total_thoughts / total * 100)
        parts.append(f"Progress: {progress}% ({sequence.total_thoughts}/{total})")
        return "Sequence summary: " + " | ".join(parts)

    @staticmethod
    def _sequence_view(sequence: SequenceMetadata) -> Dict[str, Any]:
        return {
            "id": sequence.id,
            "summary": sequence.summary,
            "thoughtsInSequence": sequence.total_thoughts,
        }

    @staticmethod
    def _branch_view(branch: BranchMetadata) -> Dict[str, Any]:
        view: Dict[str, Any] = {"branchId": branch.branch_id}
        if branch.description is not None:
            view["description"] = branch.description
        view["thoughtCount"] = branch.thoughts_in_branch
        view["fromThought"] = f"A{branch.from_absolute_thought}"
        return view
