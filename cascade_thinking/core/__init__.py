"""Core bookkeeping for cascade thinking."""

from cascade_thinking.core.engine import ThinkingEngine
from cascade_thinking.core.validation import validate_thought_data

__all__ = ["ThinkingEngine", "validate_thought_data"]
