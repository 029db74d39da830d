"""Tests for reference parsing, resolution and retrieval."""

import pytest

from cascade_thinking.core.references import parse_reference, parse_retrieve_pattern
from cascade_thinking.errors import (
    InvalidReferenceFormatError,
    ThoughtValidationError,
    UnknownAbsoluteReferenceError,
    UnknownSequenceReferenceError,
)
from cascade_thinking.types import LastN, Reference, ReferenceKind, ReferenceList, ReferenceRange


class TestParseReference:
    """Tests for parse_reference."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("A1", Reference(ReferenceKind.ABSOLUTE, 1)),
            ("a47", Reference(ReferenceKind.ABSOLUTE, 47)),
            ("S3", Reference(ReferenceKind.SEQUENCE, 3)),
            ("s12", Reference(ReferenceKind.SEQUENCE, 12)),
        ],
    )
    def test_valid_references(self, text, expected):
        assert parse_reference(text) == expected

    @pytest.mark.parametrize("text", ["invalid format", "123", "AA123", "X123", "S", "A", ""])
    def test_invalid_references(self, text):
        with pytest.raises(InvalidReferenceFormatError):
            parse_reference(text)

    def test_str_round_trips_to_canonical_form(self):
        assert str(parse_reference("a5")) == "A5"


class TestParseRetrievePattern:
    """Tests for parse_retrieve_pattern."""

    def test_last_n(self):
        assert parse_retrieve_pattern("last:3") == LastN(3)

    def test_absolute_range_mixed_case(self):
        assert parse_retrieve_pattern("a1-A3") == ReferenceRange(ReferenceKind.ABSOLUTE, 1, 3)

    def test_sequence_range(self):
        assert parse_retrieve_pattern("S10-S12") == ReferenceRange(ReferenceKind.SEQUENCE, 10, 12)

    def test_reversed_range_is_normalised(self):
        assert parse_retrieve_pattern("A8-A5") == ReferenceRange(ReferenceKind.ABSOLUTE, 5, 8)

    def test_comma_list(self):
        pattern = parse_retrieve_pattern("A3, A7,s2")
        assert isinstance(pattern, ReferenceList)
        assert [str(r) for r in pattern.references] == ["A3", "A7", "S2"]

    @pytest.mark.parametrize("text", ["invalid-pattern", "A1-S3", "last:", "A1,,A2", "first:3"])
    def test_invalid_patterns(self, text):
        with pytest.raises(ThoughtValidationError, match="retrieveThoughts must be in format"):
            parse_retrieve_pattern(text)


class TestResolveReference:
    """Tests for ThinkingEngine.resolve_reference."""

    def test_absolute_resolves_to_itself(self, engine, main_line):
        assert engine.resolve_reference("A2", engine.current_sequence_id) == 2

    def test_sequence_resolves_within_current_sequence(self, engine, main_line, think):
        think("Other topic", "S1", startNewSequence=True)
        think("Other topic 2", "S2")
        # S1 of the second sequence is A4
        assert engine.resolve_reference("S1", engine.current_sequence_id) == 4
        assert engine.resolve_reference("s2", engine.current_sequence_id) == 5

    def test_unknown_absolute(self, engine, main_line):
        with pytest.raises(UnknownAbsoluteReferenceError) as exc_info:
            engine.resolve_reference("A999", engine.current_sequence_id)
        assert "Absolute thought A999 does not exist" in str(exc_info.value)
        assert "A1-A3" in str(exc_info.value)

    def test_unknown_absolute_on_empty_engine(self, engine):
        with pytest.raises(UnknownAbsoluteReferenceError, match="No thoughts have been recorded"):
            engine.resolve_reference("A1", None)

    def test_unknown_sequence(self, engine, main_line):
        with pytest.raises(UnknownSequenceReferenceError) as exc_info:
            engine.resolve_reference("S10", engine.current_sequence_id)
        assert "Sequence thought S10 does not exist" in str(exc_info.value)
        assert "S1-S3" in str(exc_info.value)

    def test_unminted_sequence_has_no_thoughts(self, engine, main_line):
        with pytest.raises(UnknownSequenceReferenceError, match="no thoughts yet"):
            engine.resolve_reference("S1", None)


class TestRetrieveThoughts:
    """Tests for retrieveThoughts in tool calls."""

    @pytest.fixture
    def long_line(self, think):
        for n in range(1, 16):
            think(f"Thought {n}", f"S{n}", total=20)
        return think

    def test_last_n_includes_current_thought(self, long_line):
        data = long_line("Thought 16", "S16", total=20, retrieveThoughts="last:3")
        assert [t["absolute"] for t in data["retrievedThoughts"]] == ["A14", "A15", "A16"]

    def test_absolute_range(self, long_line):
        data = long_line("Thought 16", "S16", total=20, retrieveThoughts="A5-A8")
        assert [t["absolute"] for t in data["retrievedThoughts"]] == ["A5", "A6", "A7", "A8"]
        assert data["retrievedThoughts"][0]["content"] == "Thought 5"

    def test_sequence_range_uses_current_sequence(self, long_line):
        data = long_line("Thought 16", "S16", total=20, retrieveThoughts="S10-S12")
        assert [t["absolute"] for t in data["retrievedThoughts"]] == ["A10", "A11", "A12"]

    def test_sequence_range_in_second_sequence(self, long_line):
        long_line("New 1", "S1", startNewSequence=True)
        data = long_line("New 2", "S2", retrieveThoughts="S1-S2")
        assert [t["absolute"] for t in data["retrievedThoughts"]] == ["A16", "A17"]

    def test_comma_list(self, long_line):
        data = long_line("Thought 16", "S16", total=20, retrieveThoughts="A3,A7,A15")
        assert [t["absolute"] for t in data["retrievedThoughts"]] == ["A3", "A7", "A15"]

    def test_unknown_references_are_skipped(self, long_line):
        data = long_line("Thought 16", "S16", total=20, retrieveThoughts="A999,A1000")
        assert data["retrievedThoughts"] == []

    def test_partial_list_keeps_resolvable_entries(self, long_line):
        data = long_line("Thought 16", "S16", total=20, retrieveThoughts="A2,A999,S3")
        assert [t["absolute"] for t in data["retrievedThoughts"]] == ["A2", "A3"]

    def test_retrieved_content_is_truncated(self, think):
        think("x" * 150, "S1")
        data = think("Short", "S2", retrieveThoughts="A1")
        content = data["retrievedThoughts"][0]["content"]
        assert len(content) == 103
        assert content.endswith("...")

    def test_retrieval_present_in_minimal_mode(self, long_line):
        data = long_line(
            "Thought 16", "S16", total=20, retrieveThoughts="last:1", responseMode="minimal"
        )
        assert data["retrievedThoughts"] == [{"absolute": "A16", "content": "Thought 16"}]

    def test_invalid_pattern_rejected(self, think):
        data = think("x", "S1", retrieveThoughts="invalid-pattern", expect_error=True)
        assert "retrieveThoughts must be in format" in data["error"]
        assert data["status"] == "failed"
