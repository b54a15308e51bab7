"""Shared type definitions for jobparam.

This module contains enums and dataclasses shared across subpackages
to avoid circular imports.
"""

from dataclasses import dataclass
from enum import Enum


class RunResult(str, Enum):
    """Recorded outcome of a finished run.

    Members are declared best first; that declaration order is the
    quality ordering used by ``is_better_or_equal_to``.
    """

    SUCCESS = "success"
    UNSTABLE = "unstable"
    FAILURE = "failure"
    NOT_BUILT = "not_built"
    ABORTED = "aborted"

    @property
    def ordinal(self) -> int:
        """Position in the quality ordering (0 is best)."""
        return list(RunResult).index(self)

    def is_better_or_equal_to(self, other: "RunResult") -> bool:
        """Check if this result is at least as good as ``other``."""
        return self.ordinal <= other.ordinal


class ValidationKind(str, Enum):
    """Outcome kind of an interactive form check."""

    OK = "ok"
    ERROR = "error"


@dataclass(frozen=True)
class FormValidation:
    """Result of an interactive field check."""

    kind: ValidationKind
    message: str | None = None

    @classmethod
    def ok(cls) -> "FormValidation":
        """Create a passing validation."""
        return cls(kind=ValidationKind.OK)

    @classmethod
    def error(cls, message: str) -> "FormValidation":
        """Create a failing validation with a user-facing message."""
        return cls(kind=ValidationKind.ERROR, message=message)

    @property
    def is_ok(self) -> bool:
        return self.kind is ValidationKind.OK

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {"kind": self.kind.value, "message": self.message}


@dataclass(frozen=True)
class ParameterValue:
    """A parameter value bound for one pipeline run."""

    name: str
    value: str
    description: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "value": self.value,
            "description": self.description,
        }


__all__ = [
    "FormValidation",
    "ParameterValue",
    "RunResult",
    "ValidationKind",
]
