"""
Pytest fixtures and test configuration for cascade_thinking tests.
"""

from typing import Any, Dict

import pytest

from cascade_thinking.core import ThinkingEngine
from cascade_thinking.types import ThoughtResult


@pytest.fixture
def engine():
    """A fresh engine that does not render thought boxes."""
    return ThinkingEngine(disable_thought_logging=True)


@pytest.fixture
def think(engine):
    """Submit a thought to ``engine`` and return the decoded payload.

    Fails the test if the call is rejected, unless ``expect_error=True``.
    """

    def _think(
        thought: str = "A thought",
        thought_number: str = "S1",
        total: int = 3,
        next_needed: bool = True,
        expect_error: bool = False,
        target: ThinkingEngine = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        arguments: Dict[str, Any] = {
            "thought": thought,
            "totalThoughts": total,
            "nextThoughtNeeded": next_needed,
        }
        if thought_number is not None:
            arguments["thoughtNumber"] = thought_number
        arguments.update(extra)

        result: ThoughtResult = (target or engine).process_thought(arguments)
        if expect_error:
            assert result.is_error, f"expected rejection, got {result.payload}"
        else:
            assert not result.is_error, result.payload
        return result.payload

    return _think


@pytest.fixture
def main_line(think):
    """Three thoughts on the main sequence: A1-A3 / S1-S3."""
    for n in range(1, 4):
        think(f"Main thought {n}", f"S{n}", total=5)
    return think
