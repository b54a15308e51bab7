"""Pydantic models for job history import files.

A job file lists one or more jobs, each with its run history in
creation order (oldest first), plus optional read grants.
"""

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

from jobparam.types import RunResult

# Segments may not contain '/', which separates hierarchy levels
JOB_SEGMENT_PATTERN = re.compile(r"^[^/\s][^/]*$")


class RunSchema(BaseModel):
    """Schema for one run in a job history.

    Attributes:
        display_name: Optional custom display name.
        result: Recorded outcome; omit for a run that finished without one.
        building: Whether the run is still in progress.
    """

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(default=None, description="Display name")
    result: RunResult | None = Field(default=None, description="Run outcome")
    building: bool = Field(default=False, description="Run still in progress")


class JobSchema(BaseModel):
    """Schema for a job and its history."""

    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(description="Slash-separated job path")
    description: str | None = Field(default=None)
    runs: list[RunSchema] = Field(
        default_factory=list, description="Run history, oldest first"
    )
    readers: list[str] = Field(
        default_factory=list, description="Principals granted read access"
    )

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        """Validate every path segment is non-empty."""
        segments = v.strip().strip("/").split("/")
        for segment in segments:
            if not JOB_SEGMENT_PATTERN.match(segment):
                raise ValueError(f"invalid job path segment {segment!r} in '{v}'")
        return "/".join(segments)


class JobFileSchema(BaseModel):
    """Schema for a job import file."""

    model_config = ConfigDict(extra="forbid")

    jobs: list[JobSchema] = Field(default_factory=list)


class JobImportResult(BaseModel):
    """Result of importing a single job."""

    full_name: str
    success: bool
    runs_imported: int = 0
    error: str | None = None


class JobBulkImportResult(BaseModel):
    """Result of importing a job file."""

    total: int
    succeeded: int
    failed: int
    results: list[JobImportResult]


__all__ = [
    "JobBulkImportResult",
    "JobFileSchema",
    "JobImportResult",
    "JobSchema",
    "RunSchema",
]
