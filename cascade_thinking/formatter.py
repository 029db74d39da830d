"""Boxed text rendering of accepted thoughts for the side-channel log."""

from typing import Optional

from cascade_thinking.types import MAIN_BRANCH, Thought

_SINGLE = {"tl": "┌", "tr": "┐", "bl": "└", "br": "┘", "h": "─", "v": "│", "ml": "├", "mr": "┤"}
_DOUBLE = {"tl": "╔", "tr": "╗", "bl": "╚", "br": "╝", "h": "═", "v": "║", "ml": "╠", "mr": "╣"}


def _prefix_and_context(thought: Thought, current_branch: Optional[str]) -> tuple:
    if thought.start_new_sequence:
        return "🆕 Thought", ""
    if thought.is_revision:
        context = ""
        if thought.revises_thought is not None:
            context = f" (revising absolute thought {thought.revises_thought})"
        return "🔄 Revision", context
    if thought.branch_from_thought is not None and thought.branch_id:
        return (
            "🌿 Branch",
            f" (from absolute thought {thought.branch_from_thought}, ID: {thought.branch_id})",
        )
    if current_branch and current_branch != MAIN_BRANCH:
        return "🌿 Thought", f" (on branch {current_branch})"
    return "💭 Thought", ""


def format_thought(thought: Thought, current_branch: Optional[str] = None) -> str:
    """Render a thought as a box.

    A thought that opened a new sequence gets a double-line border.
    """
    prefix, context = _prefix_and_context(thought, current_branch)
    expanding = " ⚡" if thought.needs_more_thoughts else ""
    header = (
        f"{prefix} S{thought.sequence_position}/{thought.total_thoughts}{expanding} "
        f"[Absolute: A{thought.absolute_position}]{context}"
    )

    if thought.start_new_sequence:
        sequence_line = f"New Sequence: {thought.sequence_description or thought.sequence_id}"
    else:
        sequence_line = f"Sequence: {thought.sequence_id}"
    if thought.needs_more_thoughts:
        sequence_line += " [Expanding thoughts...]"

    body = thought.content.splitlines() or [""]
    width = max(len(header), len(sequence_line), *(len(line) for line in body))
    box = _DOUBLE if thought.start_new_sequence else _SINGLE
    rule = box["h"] * (width + 2)

    lines = [
        f"{box['tl']}{rule}{box['tr']}",
        f"{box['v']} {header.ljust(width)} {box['v']}",
        f"{box['v']} {sequence_line.ljust(width)} {box['v']}",
        f"{box['ml']}{rule}{box['mr']}",
    ]
    lines.extend(f"{box['v']} {line.ljust(width)} {box['v']}" for line in body)
    lines.append(f"{box['bl']}{rule}{box['br']}")
    return "\n".join(lines)
