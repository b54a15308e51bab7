"""MCP server implementation.

This module creates the FastMCP server and registers all tools.
Tools are thin, read-only wrappers around the jobparam resolver and
form helpers, and return structured errors with codes.
"""

from typing import Annotated, Any

from mcp.server.fastmcp import FastMCP
from pydantic import Field

from mcp_server.errors import (
    INTERNAL_ERROR,
    job_not_found,
    make_error,
    permission_error,
)
from mcp_server.schemas import (
    BuildChoicesResponse,
    CheckJobNameResponse,
    DefaultValueResponse,
    JobSummary,
    ListJobsResponse,
    SuggestJobNamesResponse,
)

# Create the FastMCP server instance
mcp = FastMCP(
    name="jobparam",
)

PrincipalField = Annotated[
    str | None,
    Field(description="Act as this principal (default: configured principal)"),
]


def _get_session_factory() -> Any:
    """Get the database session factory.

    Returns:
        Session factory callable.
    """
    from jobparam.db import create_all_tables, get_engine, get_session_factory

    engine = get_engine()
    create_all_tables(engine)
    return get_session_factory(engine)


def _principal(principal: str | None) -> str | None:
    from jobparam.config import get_settings

    return principal if principal is not None else get_settings().default_principal


def _definition(
    job_name: str,
    name: str,
    max_results: int | None,
    fallback_value: str | None,
) -> Any:
    from jobparam.config import get_settings
    from jobparam.parameters.definition import JobBuildNameParameterDefinition

    data: dict[str, Any] = {"name": name, "job_name": job_name}
    if max_results is not None:
        data["max_results"] = max_results
    if fallback_value is not None:
        data["fallback_value"] = fallback_value
    return JobBuildNameParameterDefinition.from_dict(data, get_settings())


@mcp.tool()
def list_jobs(principal: PrincipalField = None) -> ListJobsResponse:
    """List the jobs visible to a principal.

    Returns:
        ListJobsResponse with jobs ordered by full name, or error.
    """
    from jobparam.jobs.directory import SqlJobDirectory

    try:
        factory = _get_session_factory()
        with factory() as session:
            directory = SqlJobDirectory(session, _principal(principal))
            summaries = [
                JobSummary(
                    full_name=job.full_name,
                    name=job.name,
                    description=job.description,
                )
                for job in directory.all_jobs()
            ]
            return ListJobsResponse(
                success=True, jobs=summaries, total=len(summaries)
            )

    except Exception as e:
        error = make_error(INTERNAL_ERROR, str(e))
        return ListJobsResponse(success=False, jobs=[], total=0, error=error.to_dict())


@mcp.tool()
def get_build_choices(
    job_name: Annotated[str, Field(description="Source job, short or full name")],
    max_results: Annotated[
        int | None, Field(description="Build names to offer (0 = default)", ge=0)
    ] = None,
    fallback_value: Annotated[
        str | None, Field(description="Value offered when nothing qualifies")
    ] = None,
    principal: PrincipalField = None,
) -> BuildChoicesResponse:
    """Get the recent successful build names offered for a source job.

    The list is never empty: when the job is missing, hidden, or has no
    successful build, it holds the fallback value alone.

    Returns:
        BuildChoicesResponse with choices, newest first.
    """
    from jobparam.jobs.directory import SqlJobDirectory
    from jobparam.parameters.resolver import BuildNameResolver

    try:
        definition = _definition(job_name, "BUILD_NAME", max_results, fallback_value)
        factory = _get_session_factory()
        with factory() as session:
            directory = SqlJobDirectory(session, _principal(principal))
            choices = BuildNameResolver(directory).get_choices(definition)
            return BuildChoicesResponse(
                success=True, job_name=job_name, choices=choices
            )

    except Exception as e:
        error = make_error(INTERNAL_ERROR, str(e))
        return BuildChoicesResponse(
            success=False, job_name=job_name, choices=[], error=error.to_dict()
        )


@mcp.tool()
def get_default_value(
    job_name: Annotated[str, Field(description="Source job, short or full name")],
    name: Annotated[str, Field(description="Parameter name")] = "BUILD_NAME",
    max_results: Annotated[
        int | None, Field(description="Build names to offer (0 = default)", ge=0)
    ] = None,
    fallback_value: Annotated[
        str | None, Field(description="Value offered when nothing qualifies")
    ] = None,
    principal: PrincipalField = None,
) -> DefaultValueResponse:
    """Get a parameter's default value.

    Returns:
        DefaultValueResponse with the bound parameter value.
    """
    from jobparam.jobs.directory import SqlJobDirectory
    from jobparam.parameters.resolver import BuildNameResolver

    try:
        definition = _definition(job_name, name, max_results, fallback_value)
        factory = _get_session_factory()
        with factory() as session:
            directory = SqlJobDirectory(session, _principal(principal))
            value = BuildNameResolver(directory).default_parameter_value(definition)
            return DefaultValueResponse(
                success=True,
                name=value.name,
                value=value.value,
                description=value.description,
            )

    except Exception as e:
        error = make_error(INTERNAL_ERROR, str(e))
        return DefaultValueResponse(success=False, name=name, error=error.to_dict())


@mcp.tool()
def check_job_name(
    job_name: Annotated[str, Field(description="Job reference to check")],
    principal: PrincipalField = None,
) -> CheckJobNameResponse:
    """Check that a job reference resolves for a principal.

    Returns:
        CheckJobNameResponse; error code job_not_found when the job is
        missing or hidden, permission_error when the principal may not
        read any job.
    """
    from jobparam.jobs.directory import AccessDeniedError, SqlJobDirectory
    from jobparam.parameters.descriptor import check_job_name as svc_check_job_name

    try:
        factory = _get_session_factory()
        with factory() as session:
            directory = SqlJobDirectory(session, _principal(principal))
            try:
                directory.require_read()
            except AccessDeniedError as e:
                return CheckJobNameResponse(
                    success=False,
                    job_name=job_name,
                    error=permission_error(e.principal).to_dict(),
                )

            validation = svc_check_job_name(directory, job_name)
            if validation.is_ok:
                return CheckJobNameResponse(success=True, job_name=job_name)
            return CheckJobNameResponse(
                success=False,
                job_name=job_name,
                error=job_not_found(job_name, validation.message).to_dict(),
            )

    except Exception as e:
        error = make_error(INTERNAL_ERROR, str(e))
        return CheckJobNameResponse(
            success=False, job_name=job_name, error=error.to_dict()
        )


@mcp.tool()
def suggest_job_names(
    value: Annotated[
        str | None, Field(description="Text to match (blank lists all)")
    ] = None,
    principal: PrincipalField = None,
) -> SuggestJobNamesResponse:
    """Suggest visible job names containing a value, case-insensitively.

    Returns:
        SuggestJobNamesResponse with matching full job names.
    """
    from jobparam.jobs.directory import SqlJobDirectory
    from jobparam.parameters.descriptor import (
        suggest_job_names as svc_suggest_job_names,
    )

    try:
        factory = _get_session_factory()
        with factory() as session:
            directory = SqlJobDirectory(session, _principal(principal))
            return SuggestJobNamesResponse(
                success=True, suggestions=svc_suggest_job_names(directory, value)
            )

    except Exception as e:
        error = make_error(INTERNAL_ERROR, str(e))
        return SuggestJobNamesResponse(
            success=False, suggestions=[], error=error.to_dict()
        )


__all__ = [
    "check_job_name",
    "get_build_choices",
    "get_default_value",
    "list_jobs",
    "mcp",
    "suggest_job_names",
]
