"""Small helpers and limits shared by the engine mixins."""

from typing import Optional

from cascade_thinking.types import RecentThought, Thought

# Content longer than this is cut and suffixed with "..."
CONTENT_PREVIEW_LENGTH = 100

DEFAULT_RECENT_THOUGHTS_LIMIT = 5
MAX_RECENT_THOUGHTS_LIMIT = 100

# Thoughts copied from the parent line into a new branch sequence
BRANCH_CONTEXT_SIZE = 10

# Sequences longer than this get a sequenceSummary
SUMMARY_THRESHOLD = 10

# needsMoreThoughts grows the total by at least this many
MIN_EXPANSION = 3
EXPANSION_FACTOR = 0.5


def truncate_content(content: str, limit: int = CONTENT_PREVIEW_LENGTH) -> str:
    """Cut content to ``limit`` characters, appending ``...`` when cut."""
    if len(content) <= limit:
        return content
    return content[:limit] + "..."


def preview(thought: Thought) -> RecentThought:
    return RecentThought(
        absolute=f"A{thought.absolute_position}",
        content=truncate_content(thought.content),
    )


def format_branch_label(branch_id: str, description: Optional[str]) -> str:
    if description:
        return f"{branch_id} ({description})"
    return branch_id
