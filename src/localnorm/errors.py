"""
Exceptions raised by localnorm.

All errors are deterministic: repeating a failed call with the same
arguments fails the same way.
"""

from __future__ import annotations


class LRNError(Exception):
    """Base class for every localnorm error."""


class UnsupportedRankError(LRNError, ValueError):
    """Input array rank is not 3 or 4."""

    def __init__(self, rank: int, expected: tuple = (3, 4)) -> None:
        self.rank = rank
        self.expected = expected
        allowed = " or ".join(str(r) for r in expected)
        super().__init__(
            f"Local response normalization is not implemented for rank {rank}; "
            f"expected rank {allowed}"
        )


class InvalidParameterError(LRNError, ValueError):
    """A normalization parameter has an invalid type or value."""

    def __init__(self, name: str, value, reason: str) -> None:
        self.name = name
        self.value = value
        super().__init__(f"Invalid {name}={value!r}: {reason}")


class DomainError(LRNError, ArithmeticError):
    """
    Negative normalization base raised to a fractional exponent.

    Attributes:
        count: Number of positions where the base is negative.
        min_base: Most negative base encountered.
        beta: The fractional exponent.
    """

    def __init__(self, count: int, min_base: float, beta: float) -> None:
        self.count = count
        self.min_base = min_base
        self.beta = beta
        super().__init__(
            f"bias + alpha * window_sum is negative at {count} position(s) "
            f"(min {min_base:.6g}) and beta={beta} is not an integer"
        )
