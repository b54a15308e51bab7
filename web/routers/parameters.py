"""Job build-name parameter endpoints.

- POST /parameters/choices - Build names offered for a parameter definition
- POST /parameters/default - Default value of a parameter definition
- POST /parameters/value - Bind a submitted value
- POST /parameters/check-job-name - Check that a job reference resolves
- GET /parameters/auto-complete-job-name - Suggest job names
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status
from pydantic import BaseModel, Field

from jobparam.config import get_settings
from jobparam.jobs.directory import AccessDeniedError, SqlJobDirectory
from jobparam.parameters.definition import JobBuildNameParameterDefinition
from jobparam.parameters.descriptor import check_job_name, suggest_job_names
from jobparam.parameters.resolver import BuildNameResolver
from web.deps import get_directory

router = APIRouter()


class ParameterDefinitionRequest(BaseModel):
    """A job build-name parameter definition.

    Omitting max_results or fallback_value applies the configured
    defaults; an explicit null fallback_value defaults to the first choice.
    """

    name: str = Field(min_length=1)
    job_name: str
    description: str | None = None
    max_results: int | None = Field(default=None, ge=0)
    fallback_value: str | None = None

    def to_definition(self) -> JobBuildNameParameterDefinition:
        return JobBuildNameParameterDefinition.from_dict(
            self.model_dump(exclude_unset=True), get_settings()
        )


class ValueRequest(BaseModel):
    """A submitted parameter value for a definition."""

    definition: ParameterDefinitionRequest
    name: str | None = None
    value: str | None = None


@router.post("/choices")
def choices_endpoint(
    request: ParameterDefinitionRequest,
    directory: SqlJobDirectory = Depends(get_directory),
) -> dict[str, Any]:
    """Get the build names offered for a parameter; never empty."""
    definition = request.to_definition()
    choices = BuildNameResolver(directory).get_choices(definition)
    return {
        **definition.to_dict(),
        "max_results": definition.max_results,
        "choices": choices,
    }


@router.post("/default")
def default_endpoint(
    request: ParameterDefinitionRequest,
    directory: SqlJobDirectory = Depends(get_directory),
) -> dict[str, Any]:
    """Get a parameter's default value."""
    definition = request.to_definition()
    return BuildNameResolver(directory).default_parameter_value(definition).to_dict()


@router.post("/value")
def value_endpoint(request: ValueRequest) -> dict[str, Any]:
    """Bind a submitted value to a parameter.

    Any string is accepted; choices are not re-checked.

    Raises:
        HTTPException: If no value was submitted.
    """
    definition = request.definition.to_definition()
    submitted = {"name": request.name, "value": request.value}
    try:
        value = BuildNameResolver.create_value_from_json(definition, submitted)
    except ValueError as e:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail={"code": "validation", "message": str(e)},
        ) from None
    return value.to_dict()


@router.post("/check-job-name")
def check_job_name_endpoint(
    job_name: str = Query(..., description="Job reference to check"),
    directory: SqlJobDirectory = Depends(get_directory),
) -> dict[str, Any]:
    """Check that a job reference resolves for the acting principal.

    Raises:
        HTTPException: 403 if the principal may not read any job.
    """
    try:
        directory.require_read()
    except AccessDeniedError as e:
        raise HTTPException(
            status_code=http_status.HTTP_403_FORBIDDEN,
            detail={"code": e.code, "message": str(e)},
        ) from None
    return check_job_name(directory, job_name).to_dict()


@router.get("/auto-complete-job-name")
def auto_complete_job_name_endpoint(
    value: str | None = Query(None, description="Text to match"),
    directory: SqlJobDirectory = Depends(get_directory),
) -> dict[str, Any]:
    """Suggest visible job names containing ``value``."""
    return {"suggestions": suggest_job_names(directory, value)}
