# rigidreg/errors.py
"""Exception hierarchy for registration failures."""

from __future__ import annotations


class RegistrationError(Exception):
    """Base class for every failure raised by the registration core."""


class InsufficientPoints(RegistrationError, ValueError):
    """Fewer points than a minimal sample were supplied."""

    def __init__(self, required: int, available: int, what: str = "points") -> None:
        super().__init__(f"At least {required} {what} required, got {available}")
        self.required = required
        self.available = available


class CardinalityMismatch(RegistrationError, ValueError):
    """Two sequences that must pair one-to-one have different lengths."""

    def __init__(self, first: int, second: int) -> None:
        super().__init__(f"Point sequences must have equal length, got {first} and {second}")
        self.first = first
        self.second = second


class DegenerateGeometry(RegistrationError):
    """Points are collinear or coincident, so the rotation is undetermined."""


class NoValidHypothesis(RegistrationError):
    """The iteration budget ended without a single scorable transform."""

    def __init__(self, iterations: int) -> None:
        super().__init__(f"No valid hypothesis found in {iterations} iterations")
        self.iterations = iterations


__all__ = [
    "CardinalityMismatch",
    "DegenerateGeometry",
    "InsufficientPoints",
    "NoValidHypothesis",
    "RegistrationError",
]
