"""
Cascade Thinking - Multi-sequence, branching thought bookkeeping.

Dual numbering (S{n} within a sequence, A{n} across everything) for
structured reasoning tools.
"""

from .core import ThinkingEngine, validate_thought_data
from .formatter import format_thought
from .types import ResponseMode, ThoughtResult

try:
    from importlib.metadata import version

    __version__ = version("cascade-thinking-mcp")
except Exception:
    __version__ = "0.0.0"

__all__ = [
    "ThinkingEngine",
    "ResponseMode",
    "ThoughtResult",
    "format_thought",
    "validate_thought_data",
]
