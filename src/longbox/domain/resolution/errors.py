"""Errors raised by the resolution engine.

No-data conditions are never errors: a field without valid candidates simply
has no winner. These exceptions flag caller mistakes (missing or malformed
policy, unknown field names, illegal state transitions).
"""

from __future__ import annotations


class ResolutionError(RuntimeError):
    """Base class for resolution engine errors."""


class MissingPolicyError(ResolutionError):
    """Raised when an operation is invoked without a resolution policy."""

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} requires an explicit ResolutionPolicy")
        self.operation = operation


class InvalidPolicyError(ValueError):
    """Raised when a resolution policy violates its invariants."""


class UnknownFieldError(ResolutionError, KeyError):
    """Raised when a field name is not a canonical field of the requested kind."""

    def __init__(self, field_name: str, *, expected: str = "canonical field") -> None:
        super().__init__(f"{field_name!r} is not a known {expected}")
        self.field_name = field_name

    def __str__(self) -> str:
        return str(self.args[0])


class IllegalTransitionError(ResolutionError):
    """Raised when automatic resolution would replace a user override."""
