"""
Exceptions raised by the iTEBD machinery.

All of them are fatal for the operation that raises them: the caller
receives the exception instead of a corrupted state.
"""


class ITEBDError(Exception):
    """Base class for iTEBD errors."""


class IllPosedStateError(ITEBDError, ArithmeticError):
    """The transfer operator lacks a unique, positive dominant eigenvalue."""


class VanishingNormError(ITEBDError, ArithmeticError):
    """An operator annihilated the state (norm underflow)."""


class DimensionMismatchError(ITEBDError, ValueError):
    """Operator or tensor shape incompatible with the state."""

    def __init__(self, what: str, expected, actual):
        self.expected = tuple(expected)
        self.actual = tuple(actual)
        super().__init__(f"{what}: expected shape {self.expected}, got {self.actual}")
