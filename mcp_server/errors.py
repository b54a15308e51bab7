"""Error definitions for MCP tools.

This module defines structured error types with stable codes
that can be surfaced to MCP clients.
"""

from dataclasses import dataclass
from typing import Any

# Error code constants
VALIDATION_ERROR = "validation"
PERMISSION_ERROR = "permission_error"
JOB_NOT_FOUND = "job_not_found"
INTERNAL_ERROR = "internal_error"


@dataclass
class MCPError:
    """Structured error response for MCP tools.

    Attributes:
        code: Stable error code for programmatic handling.
        message: Human-readable error message.
        details: Optional additional error details.
    """

    code: str
    message: str
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


def make_error(
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> MCPError:
    """Create an MCPError instance.

    Args:
        code: Stable error code.
        message: Human-readable message.
        details: Optional additional details.

    Returns:
        MCPError instance.
    """
    return MCPError(code=code, message=message, details=details)


def validation_error(message: str, details: dict[str, Any] | None = None) -> MCPError:
    """Create a validation error."""
    return make_error(VALIDATION_ERROR, message, details)


def job_not_found(job_name: str, message: str | None = None) -> MCPError:
    """Create a job not found error."""
    return make_error(
        JOB_NOT_FOUND,
        message or f"Job not found: {job_name}",
        details={"job_name": job_name},
    )


def permission_error(principal: str | None) -> MCPError:
    """Create a permission error."""
    return make_error(
        PERMISSION_ERROR,
        f"Access denied for principal: {principal}",
        details={"principal": principal},
    )


__all__ = [
    "INTERNAL_ERROR",
    "JOB_NOT_FOUND",
    "MCPError",
    "PERMISSION_ERROR",
    "VALIDATION_ERROR",
    "job_not_found",
    "make_error",
    "permission_error",
    "validation_error",
]
