"""Pydantic schemas for MCP tool responses.

These schemas define the structured output formats for MCP tools,
ensuring consistent JSON responses across all tools.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class JobSummary(BaseModel):
    """Summary of a job for list responses."""

    model_config = ConfigDict(extra="forbid")

    full_name: str
    name: str
    description: str | None = None


class ListJobsResponse(BaseModel):
    """Response for list_jobs tool."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    jobs: list[JobSummary]
    total: int
    error: dict[str, Any] | None = None


class BuildChoicesResponse(BaseModel):
    """Response for get_build_choices tool."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    job_name: str
    choices: list[str]
    error: dict[str, Any] | None = None


class DefaultValueResponse(BaseModel):
    """Response for get_default_value tool."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    name: str
    value: str | None = None
    description: str | None = None
    error: dict[str, Any] | None = None


class CheckJobNameResponse(BaseModel):
    """Response for check_job_name tool."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    job_name: str
    error: dict[str, Any] | None = None


class SuggestJobNamesResponse(BaseModel):
    """Response for suggest_job_names tool."""

    model_config = ConfigDict(extra="forbid")

    success: bool
    suggestions: list[str]
    error: dict[str, Any] | None = None


__all__ = [
    "BuildChoicesResponse",
    "CheckJobNameResponse",
    "DefaultValueResponse",
    "JobSummary",
    "ListJobsResponse",
    "SuggestJobNamesResponse",
]
