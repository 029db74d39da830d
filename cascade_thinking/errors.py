"""Exception hierarchy for cascade_thinking.

Every rejection raised by the engine is a ``CascadeError``. It subclasses
``ValueError`` so the MCP layer's input-error handling applies unchanged.
"""


class CascadeError(ValueError):
    """Base exception for rejected thoughts."""

    pass


class ThoughtValidationError(CascadeError):
    """A field of the request has the wrong type or shape."""

    pass


class InvalidTotalError(ThoughtValidationError):
    """totalThoughts is below 1."""

    pass


class InvalidReferenceFormatError(CascadeError):
    """A reference does not match ``A{n}`` or ``S{n}``."""

    pass


class InvalidPositionError(CascadeError):
    """The user supplied a sequence position other than the next one."""

    def __init__(self, expected: int, given: int):
        super().__init__(
            f"Invalid thought number: expected S{expected} for current sequence, "
            f"but got S{given}. Thought numbers must be sequential within each sequence."
        )
        self.expected = expected
        self.given = given


class UnknownAbsoluteReferenceError(CascadeError):
    """An ``A{n}`` reference points past the ledger."""

    def __init__(self, number: int, counter: int):
        if counter:
            detail = f"Valid range: A1-A{counter}"
        else:
            detail = "No thoughts have been recorded yet"
        super().__init__(f"Absolute thought A{number} does not exist. {detail}")
        self.number = number


class UnknownSequenceReferenceError(CascadeError):
    """An ``S{n}`` reference points past the current sequence."""

    def __init__(self, number: int, count: int):
        if count:
            detail = f"Valid range: S1-S{count}"
        else:
            detail = "Current sequence has no thoughts yet"
        super().__init__(f"Sequence thought S{number} does not exist in current sequence. {detail}")
        self.number = number


class UnknownBranchError(CascadeError):
    """switchToBranch named a branch that was never created."""

    def __init__(self, branch_id: str, available: list):
        names = ", ".join(["main", *available])
        super().__init__(f"Branch '{branch_id}' does not exist. Available branches: {names}")
        self.branch_id = branch_id


class MutuallyExclusiveOptionsError(CascadeError):
    """Two options that cannot be combined were given together."""

    pass
