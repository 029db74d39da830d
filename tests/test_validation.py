"""Tests for structural validation of thought requests."""

import pytest

from cascade_thinking.core.validation import sanitize_string, validate_thought_data
from cascade_thinking.errors import InvalidTotalError, ThoughtValidationError
from cascade_thinking.types import LastN, ResponseMode


def _valid(**overrides):
    data = {
        "thought": "Test thought",
        "thoughtNumber": "S1",
        "totalThoughts": 3,
        "nextThoughtNeeded": True,
    }
    data.update(overrides)
    return data


class TestRequiredFields:
    """Tests for thought, thoughtNumber, totalThoughts, nextThoughtNeeded."""

    def test_valid_minimal_input(self):
        draft = validate_thought_data(_valid())
        assert draft.thought == "Test thought"
        assert draft.thought_number == 1
        assert draft.total_thoughts == 3
        assert draft.next_thought_needed is True
        assert draft.response_mode is ResponseMode.STANDARD

    @pytest.mark.parametrize("value", [None, 42, "", ["x"]])
    def test_invalid_thought(self, value):
        with pytest.raises(ThoughtValidationError, match="Invalid thought: must be a string"):
            validate_thought_data(_valid(thought=value))

    @pytest.mark.parametrize("arguments", [None, "text", 5, ["thought"]])
    def test_non_object_input(self, arguments):
        with pytest.raises(ThoughtValidationError, match="Invalid thought: must be a string"):
            validate_thought_data(arguments)

    def test_missing_thought_number(self):
        data = _valid()
        del data["thoughtNumber"]
        with pytest.raises(ThoughtValidationError, match="must be a string with S prefix"):
            validate_thought_data(data)

    def test_numeric_thought_number(self):
        with pytest.raises(ThoughtValidationError, match="must be a string with S prefix"):
            validate_thought_data(_valid(thoughtNumber=1))

    @pytest.mark.parametrize("value", ["1", "A1", "S", "SS1", "S1a"])
    def test_bad_thought_number_pattern(self, value):
        with pytest.raises(ThoughtValidationError, match=r"must match pattern S\{n\} or s\{n\}"):
            validate_thought_data(_valid(thoughtNumber=value))

    def test_lowercase_thought_number(self):
        assert validate_thought_data(_valid(thoughtNumber="s4")).thought_number == 4

    def test_thought_number_optional_when_switching(self):
        data = _valid(switchToBranch="main")
        del data["thoughtNumber"]
        draft = validate_thought_data(data)
        assert draft.thought_number is None
        assert draft.switch_to_branch == "main"

    @pytest.mark.parametrize("value", ["3", None, True, float("nan")])
    def test_total_must_be_number(self, value):
        with pytest.raises(ThoughtValidationError, match="Invalid totalThoughts: must be a number"):
            validate_thought_data(_valid(totalThoughts=value))

    @pytest.mark.parametrize("value", [0, -2])
    def test_total_at_least_one(self, value):
        with pytest.raises(InvalidTotalError, match="must be at least 1"):
            validate_thought_data(_valid(totalThoughts=value))

    def test_integral_float_total_accepted(self):
        assert validate_thought_data(_valid(totalThoughts=4.0)).total_thoughts == 4

    def test_fractional_total_rejected(self):
        with pytest.raises(ThoughtValidationError, match="must be an integer"):
            validate_thought_data(_valid(totalThoughts=2.5))

    @pytest.mark.parametrize("value", [None, "true", 1])
    def test_next_thought_needed_boolean(self, value):
        with pytest.raises(
            ThoughtValidationError, match="Invalid nextThoughtNeeded: must be a boolean"
        ):
            validate_thought_data(_valid(nextThoughtNeeded=value))


class TestOptionalFields:
    """Tests for optional string, boolean and reference fields."""

    @pytest.mark.parametrize(
        "field", ["branchId", "branchDescription", "sequenceDescription", "toolSource", "switchToBranch"]
    )
    def test_string_fields(self, field):
        with pytest.raises(ThoughtValidationError, match=f"Invalid {field}: must be a string"):
            validate_thought_data(_valid(**{field: 123}))

    @pytest.mark.parametrize(
        "field", ["isRevision", "needsMoreThoughts", "startNewSequence", "isolatedContext"]
    )
    def test_boolean_fields(self, field):
        with pytest.raises(ThoughtValidationError, match=f"Invalid {field}: must be a boolean"):
            validate_thought_data(_valid(**{field: "yes"}))

    @pytest.mark.parametrize("field", ["revisesThought", "branchFromThought"])
    @pytest.mark.parametrize("value", ["invalid format", "123", "AA123", "X123", "S", "A"])
    def test_reference_patterns(self, field, value):
        with pytest.raises(
            ThoughtValidationError, match=rf"Invalid {field}: must match pattern A\{{n\}} or S\{{n\}}"
        ):
            validate_thought_data(_valid(**{field: value}))

    @pytest.mark.parametrize("field", ["revisesThought", "branchFromThought"])
    def test_reference_must_be_string(self, field):
        with pytest.raises(ThoughtValidationError, match=f"Invalid {field}: must be a string"):
            validate_thought_data(_valid(**{field: 3}))

    def test_references_accept_either_case(self):
        draft = validate_thought_data(_valid(revisesThought="a1", branchFromThought="s2"))
        assert draft.revises_thought == "a1"
        assert draft.branch_from_thought == "s2"

    def test_empty_optional_string_treated_as_missing(self):
        draft = validate_thought_data(_valid(branchId="", toolSource=""))
        assert draft.branch_id is None
        assert draft.tool_source is None

    def test_founds_branch_needs_both_fields(self):
        assert not validate_thought_data(_valid(branchFromThought="A1")).founds_branch
        assert not validate_thought_data(_valid(branchId="b")).founds_branch
        assert validate_thought_data(_valid(branchFromThought="A1", branchId="b")).founds_branch

    def test_control_characters_stripped(self):
        draft = validate_thought_data(_valid(thought="line\x00one\nline two\x07"))
        assert draft.thought == "lineone\nline two"


class TestRecentThoughtsLimit:
    """Tests for recentThoughtsLimit."""

    @pytest.mark.parametrize("value", ["5", 3.14, True])
    def test_must_be_integer(self, value):
        with pytest.raises(ThoughtValidationError, match="recentThoughtsLimit must be an integer"):
            validate_thought_data(_valid(recentThoughtsLimit=value))

    def test_non_negative(self):
        with pytest.raises(ThoughtValidationError, match="must be non-negative"):
            validate_thought_data(_valid(recentThoughtsLimit=-1))

    def test_upper_bound(self):
        with pytest.raises(ThoughtValidationError, match="must not exceed 100"):
            validate_thought_data(_valid(recentThoughtsLimit=101))

    @pytest.mark.parametrize("value", [0, 1, 100])
    def test_bounds_accepted(self, value):
        assert validate_thought_data(_valid(recentThoughtsLimit=value)).recent_thoughts_limit == value


class TestResponseModeAndRetrieval:
    """Tests for responseMode and retrieveThoughts."""

    def test_response_mode_must_be_string(self):
        with pytest.raises(ThoughtValidationError, match="responseMode must be a string"):
            validate_thought_data(_valid(responseMode=1))

    def test_response_mode_enum(self):
        with pytest.raises(
            ThoughtValidationError,
            match="responseMode must be one of: minimal, standard, verbose",
        ):
            validate_thought_data(_valid(responseMode="loud"))

    def test_response_mode_parsed(self):
        assert validate_thought_data(_valid(responseMode="verbose")).response_mode is ResponseMode.VERBOSE

    def test_retrieve_must_be_string(self):
        with pytest.raises(ThoughtValidationError, match="retrieveThoughts must be a string"):
            validate_thought_data(_valid(retrieveThoughts=5))

    def test_retrieve_parsed(self):
        assert validate_thought_data(_valid(retrieveThoughts="last:4")).retrieve_thoughts == LastN(4)


class TestSanitizeString:
    def test_keeps_newlines_and_tabs(self):
        assert sanitize_string("a\tb\nc") == "a\tb\nc"

    def test_strips_nulls(self):
        assert sanitize_string("a\x00b") == "ab"
