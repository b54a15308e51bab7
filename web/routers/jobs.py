"""Job management endpoints.

- GET /jobs - List jobs visible to the acting principal
- POST /jobs - Register a job
- GET /jobs/{full_name}/runs - List runs, newest first
- POST /jobs/{full_name}/runs - Record a run
- POST /jobs/{full_name}/runs/{number}/finish - Finish an in-progress run
- POST /jobs/{full_name}/grants - Grant a principal read access
- GET /jobs/{full_name} - Get a job
- DELETE /jobs/{full_name} - Delete a job

Job full names contain slashes, so the routes with a suffix are declared
before the bare /jobs/{full_name} routes.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi import status as http_status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from jobparam.jobs.directory import SqlJobDirectory
from jobparam.jobs.models import Job, Run
from jobparam.jobs.service import (
    JobExistsError,
    JobNotFoundError,
    RunNotFoundError,
    create_job,
    delete_job,
    finish_run,
    grant_read,
    list_runs,
    record_run,
)
from jobparam.types import RunResult
from web.deps import get_db, get_directory

router = APIRouter()


class JobCreateRequest(BaseModel):
    """Request body for registering a job."""

    full_name: str = Field(min_length=1)
    description: str | None = None


class RunCreateRequest(BaseModel):
    """Request body for recording a run."""

    result: RunResult | None = None
    display_name: str | None = None
    building: bool = False


class RunFinishRequest(BaseModel):
    """Request body for finishing a run."""

    result: RunResult | None = None


class GrantRequest(BaseModel):
    """Request body for granting read access."""

    principal: str = Field(min_length=1)


def _job_to_dict(job: Job) -> dict[str, Any]:
    """Convert a job to a dictionary."""
    return {
        "full_name": job.full_name,
        "name": job.name,
        "description": job.description,
        "created_at": job.created_at.isoformat() if job.created_at else None,
    }


def _run_to_dict(run: Run) -> dict[str, Any]:
    """Convert a run to a dictionary."""
    return {
        "number": run.number,
        "display_name": run.display_name,
        "building": run.building,
        "result": run.result_value,
        "started_at": run.started_at.isoformat() if run.started_at else None,
        "finished_at": run.finished_at.isoformat() if run.finished_at else None,
    }


def _job_not_found(full_name: str) -> HTTPException:
    return HTTPException(
        status_code=http_status.HTTP_404_NOT_FOUND,
        detail={
            "code": "job_not_found",
            "message": f"Job not found: {full_name}",
        },
    )


def _require_visible(directory: SqlJobDirectory, full_name: str) -> Job:
    job = directory.find_by_full_name(full_name)
    if job is None:
        raise _job_not_found(full_name)
    return job


@router.get("")
def list_jobs_endpoint(
    directory: SqlJobDirectory = Depends(get_directory),
) -> list[dict[str, Any]]:
    """List jobs visible to the acting principal.

    Returns:
        List of jobs ordered by full name.
    """
    return [_job_to_dict(j) for j in directory.all_jobs()]


@router.post("", status_code=http_status.HTTP_201_CREATED)
def create_job_endpoint(
    request: JobCreateRequest,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Register a job.

    Raises:
        HTTPException: 409 if the job exists, 400 if the name is invalid.
    """
    try:
        job = create_job(db, request.full_name, description=request.description)
    except JobExistsError as e:
        raise HTTPException(
            status_code=http_status.HTTP_409_CONFLICT,
            detail={"code": e.code, "message": str(e)},
        ) from None
    except ValueError as e:
        raise HTTPException(
            status_code=http_status.HTTP_400_BAD_REQUEST,
            detail={"code": "validation", "message": str(e)},
        ) from None
    return _job_to_dict(job)


@router.get("/{full_name:path}/runs")
def list_runs_endpoint(
    full_name: str,
    limit: int = Query(100, ge=1, le=1000, description="Maximum results"),
    directory: SqlJobDirectory = Depends(get_directory),
) -> list[dict[str, Any]]:
    """List a visible job's runs, newest first."""
    _require_visible(directory, full_name)
    return [_run_to_dict(r) for r in list_runs(directory.session, full_name, limit)]


@router.post("/{full_name:path}/runs", status_code=http_status.HTTP_201_CREATED)
def record_run_endpoint(
    full_name: str,
    request: RunCreateRequest,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Record a run for a job."""
    try:
        run = record_run(
            db,
            full_name,
            result=request.result,
            display_name=request.display_name,
            building=request.building,
        )
    except JobNotFoundError:
        raise _job_not_found(full_name) from None
    return _run_to_dict(run)


@router.post("/{full_name:path}/runs/{number}/finish")
def finish_run_endpoint(
    full_name: str,
    number: int,
    request: RunFinishRequest,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Finish an in-progress run."""
    try:
        run = finish_run(db, full_name, number, request.result)
    except JobNotFoundError:
        raise _job_not_found(full_name) from None
    except RunNotFoundError as e:
        raise HTTPException(
            status_code=http_status.HTTP_404_NOT_FOUND,
            detail={"code": e.code, "message": str(e)},
        ) from None
    return _run_to_dict(run)


@router.post("/{full_name:path}/grants", status_code=http_status.HTTP_201_CREATED)
def grant_read_endpoint(
    full_name: str,
    request: GrantRequest,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Grant a principal read access to a job."""
    try:
        grant_read(db, request.principal, full_name)
    except JobNotFoundError:
        raise _job_not_found(full_name) from None
    return {"principal": request.principal, "full_name": full_name}


@router.get("/{full_name:path}")
def get_job_endpoint(
    full_name: str,
    directory: SqlJobDirectory = Depends(get_directory),
) -> dict[str, Any]:
    """Get a visible job by full name.

    Raises:
        HTTPException: If the job does not exist or is not visible.
    """
    return _job_to_dict(_require_visible(directory, full_name))


@router.delete("/{full_name:path}", status_code=http_status.HTTP_204_NO_CONTENT)
def delete_job_endpoint(
    full_name: str,
    db: Session = Depends(get_db),
) -> None:
    """Delete a job with its runs and grants."""
    try:
        delete_job(db, full_name)
    except JobNotFoundError:
        raise _job_not_found(full_name) from None
