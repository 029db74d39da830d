"""Reference parsing, resolution and retrieval.

Two coordinate systems address thoughts: ``A{n}`` is the global absolute
position, ``S{n}`` is the position inside the current sequence. Prefixes
are case-insensitive.
"""

import logging
import re
from typing import Dict, List, Optional

from cascade_thinking.core.utils import preview
from cascade_thinking.errors import (
    CascadeError,
    InvalidReferenceFormatError,
    ThoughtValidationError,
    UnknownAbsoluteReferenceError,
    UnknownSequenceReferenceError,
)
from cascade_thinking.types import (
    LastN,
    RecentThought,
    Reference,
    ReferenceKind,
    ReferenceList,
    ReferenceRange,
    RetrievalPattern,
    Thought,
)

logger = logging.getLogger(__name__)

_REFERENCE_RE = re.compile(r"^([AS])(\d+)$", re.IGNORECASE)
_LAST_N_RE = re.compile(r"^last:(\d+)$", re.IGNORECASE)

RETRIEVE_FORMAT_MESSAGE = (
    "retrieveThoughts must be in format: 'last:N', 'A10-A15', 'S3-S7', or 'A3,A17,S5'"
)


def parse_reference(text: str) -> Reference:
    """Parse ``A{n}``/``S{n}`` (either case) into a Reference.

    Raises:
        InvalidReferenceFormatError: For anything else, e.g. ``"123"``,
            ``"AA1"``, ``"X1"`` or a bare prefix.
    """
    match = _REFERENCE_RE.match(text.strip()) if isinstance(text, str) else None
    if match is None:
        raise InvalidReferenceFormatError(
            f"Invalid reference format: '{text}'. "
            "Use A{n} for absolute or S{n} for sequence-relative references"
        )
    return Reference(ReferenceKind(match.group(1).upper()), int(match.group(2)))


def parse_retrieve_pattern(text: str) -> RetrievalPattern:
    """Parse a retrieveThoughts pattern.

    Precedence is ``last:N``, then a same-kind range, then a comma list.
    """
    text = text.strip()

    match = _LAST_N_RE.match(text)
    if match:
        return LastN(int(match.group(1)))

    try:
        if "-" in text:
            start_text, _, end_text = text.partition("-")
            start = parse_reference(start_text)
            end = parse_reference(end_text)
            if start.kind != end.kind:
                raise ThoughtValidationError(RETRIEVE_FORMAT_MESSAGE)
            low, high = sorted((start.number, end.number))
            return ReferenceRange(start.kind, low, high)

        return ReferenceList([parse_reference(part) for part in text.split(",")])
    except InvalidReferenceFormatError as e:
        raise ThoughtValidationError(RETRIEVE_FORMAT_MESSAGE) from e


class ReferencesMixin:
    """Resolve references against the ledger. Never mutates state."""

    _thoughts: List[Thought]
    _sequence_thoughts: Dict[str, List[int]]
    _current_sequence_id: Optional[str]

    def resolve_reference(self, text: str, sequence_id: Optional[str]) -> int:
        """Resolve a reference to an absolute position.

        Sequence-relative references are looked up in ``sequence_id``. None
        stands for a sequence that has not been minted yet and so has no
        thoughts.
        """
        reference = parse_reference(text)

        if reference.kind is ReferenceKind.ABSOLUTE:
            if not 1 <= reference.number <= len(self._thoughts):
                raise UnknownAbsoluteReferenceError(reference.number, len(self._thoughts))
            return reference.number

        members = self._sequence_thoughts.get(sequence_id, []) if sequence_id else []
        if not 1 <= reference.number <= len(members):
            raise UnknownSequenceReferenceError(reference.number, len(members))
        return members[reference.number - 1]

    def get_thought(self, absolute_position: int) -> Optional[Thought]:
        if 1 <= absolute_position <= len(self._thoughts):
            return self._thoughts[absolute_position - 1]
        return None

    def retrieve_thoughts(self, pattern: RetrievalPattern) -> List[RecentThought]:
        """Return truncated views of the thoughts a pattern selects.

        Unresolvable entries of a comma list are skipped.
        """
        if isinstance(pattern, LastN):
            if pattern.count == 0:
                return []
            return [preview(t) for t in self._thoughts[-pattern.count :]]

        if isinstance(pattern, ReferenceRange):
            if pattern.kind is ReferenceKind.ABSOLUTE:
                selected = [
                    t
                    for t in self._thoughts
                    if pattern.start <= t.absolute_position <= pattern.end
                ]
            else:
                members = self._sequence_thoughts.get(self._current_sequence_id, [])
                selected = [
                    self._thoughts[absolute - 1]
                    for index, absolute in enumerate(members, start=1)
                    if pattern.start <= index <= pattern.end
                ]
            return [preview(t) for t in selected]

        found = []
        for reference in pattern.references:
            try:
                absolute = self.resolve_reference(str(reference), self._current_sequence_id)
            except CascadeError as e:
                logger.debug(f"Skipping unresolvable reference {reference}: {e}")
                continue
            found.append(preview(self._thoughts[absolute - 1]))
        return found
