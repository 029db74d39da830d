"""Detect thoughts recorded by other callers since the user's last one."""

from typing import List, Optional

from cascade_thinking.types import GapInfo, Thought, is_default_source


class GapsMixin:
    _thoughts: List[Thought]
    _last_user_absolute: Optional[int]

    def detect_gap(self, tool_source: Optional[str]) -> Optional[GapInfo]:
        """Return gap details for a user thought, or None when there is no gap."""
        if not is_default_source(tool_source) or self._last_user_absolute is None:
            return None

        counter = len(self._thoughts)
        if counter <= self._last_user_absolute:
            return None

        gap_size = counter - self._last_user_absolute
        created_by: List[str] = []
        for thought in self._thoughts[self._last_user_absolute :]:
            source = thought.tool_source or "unknown"
            if source not in created_by:
                created_by.append(source)

        return GapInfo(
            has_gap=True,
            gap_size=gap_size,
            explanation=(
                f"{gap_size} thoughts were created by other tools since your last thought "
                f"(A{self._last_user_absolute})"
            ),
            created_by=created_by,
        )
