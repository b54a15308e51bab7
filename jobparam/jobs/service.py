"""Job service for job, run, and grant management.

This module provides the write-side API for the SQL job directory:
registering jobs, recording runs, and granting read access. The
parameter resolver never calls into this module; it only reads through
jobparam.jobs.directory.
"""

import logging
from collections.abc import Sequence

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from jobparam.jobs.models import Job, JobGrant, Run
from jobparam.types import RunResult

logger = logging.getLogger(__name__)


class JobNotFoundError(Exception):
    """Raised when a job is not found."""

    def __init__(self, full_name: str, code: str = "job_not_found") -> None:
        super().__init__(f"Job not found: {full_name}")
        self.full_name = full_name
        self.code = code


class JobExistsError(Exception):
    """Raised when attempting to create a job that already exists."""

    def __init__(self, full_name: str, code: str = "job_exists") -> None:
        super().__init__(f"Job already exists: {full_name}")
        self.full_name = full_name
        self.code = code


class RunNotFoundError(Exception):
    """Raised when a run is not found."""

    def __init__(
        self, full_name: str, number: int, code: str = "run_not_found"
    ) -> None:
        super().__init__(f"Run not found: {full_name} #{number}")
        self.full_name = full_name
        self.number = number
        self.code = code


def normalize_full_name(full_name: str) -> str:
    """Normalize a job path for storage.

    Strips surrounding whitespace and slashes and collapses empty segments,
    so 'team//app/' is stored as 'team/app'.

    Raises:
        ValueError: If nothing remains after normalization.
    """
    segments = [s for s in full_name.strip().split("/") if s]
    if not segments:
        raise ValueError(f"Invalid job name: {full_name!r}")
    return "/".join(segments)


def short_name(full_name: str) -> str:
    """Return the last path segment of a job's full name."""
    return full_name.rsplit("/", 1)[-1]


def get_job_or_none(session: Session, full_name: str) -> Job | None:
    """Get a job by exact full name, regardless of visibility.

    Args:
        session: Database session.
        full_name: Job full name.

    Returns:
        Job if found, None otherwise.
    """
    stmt = select(Job).where(Job.full_name == full_name)
    return session.execute(stmt).scalar_one_or_none()


def get_job(session: Session, full_name: str) -> Job:
    """Get a job by exact full name.

    Raises:
        JobNotFoundError: If the job does not exist.
    """
    job = get_job_or_none(session, full_name)
    if job is None:
        raise JobNotFoundError(full_name)
    return job


def list_jobs(session: Session) -> Sequence[Job]:
    """List all jobs ordered by full name."""
    stmt = select(Job).order_by(Job.full_name)
    return session.execute(stmt).scalars().all()


def create_job(
    session: Session, full_name: str, description: str | None = None
) -> Job:
    """Register a new job.

    Args:
        session: Database session.
        full_name: Slash-separated job path.
        description: Optional description.

    Returns:
        Created Job (flushed, not committed).

    Raises:
        ValueError: If the name is empty.
        JobExistsError: If a job with this full name exists.
    """
    full_name = normalize_full_name(full_name)
    if get_job_or_none(session, full_name) is not None:
        raise JobExistsError(full_name)

    job = Job(full_name=full_name, name=short_name(full_name), description=description)
    session.add(job)
    session.flush()
    logger.info("Created job %s", full_name)
    return job


def delete_job(session: Session, full_name: str) -> None:
    """Delete a job together with its runs and grants.

    Raises:
        JobNotFoundError: If the job does not exist.
    """
    job = get_job(session, full_name)
    session.execute(delete(Run).where(Run.job_id == job.id))
    session.execute(delete(JobGrant).where(JobGrant.job_id == job.id))
    session.delete(job)
    session.flush()
    logger.info("Deleted job %s", full_name)


def record_run(
    session: Session,
    full_name: str,
    result: RunResult | None = None,
    display_name: str | None = None,
    building: bool = False,
) -> Run:
    """Append a run to a job's history.

    Runs are numbered sequentially per job, so the newest run always has
    the highest number.

    Args:
        session: Database session.
        full_name: Job full name.
        result: Recorded outcome; ignored while building.
        display_name: Optional custom display name.
        building: Record the run as still in progress.

    Returns:
        Created Run.

    Raises:
        JobNotFoundError: If the job does not exist.
    """
    job = get_job(session, full_name)
    run = Run(
        job_id=job.id,
        number=job.next_run_number(),
        custom_display_name=display_name,
        building=building,
    )
    if not building:
        run.mark_finished(result)
    session.add(run)
    session.flush()
    logger.info(
        "Recorded run %s #%d (%s)",
        full_name,
        run.number,
        "building" if building else (run.result_value or "no result"),
    )
    return run


def get_run(session: Session, full_name: str, number: int) -> Run:
    """Get a run by job and number.

    Raises:
        JobNotFoundError: If the job does not exist.
        RunNotFoundError: If the job has no such run.
    """
    job = get_job(session, full_name)
    stmt = select(Run).where(Run.job_id == job.id, Run.number == number)
    run = session.execute(stmt).scalar_one_or_none()
    if run is None:
        raise RunNotFoundError(full_name, number)
    return run


def finish_run(
    session: Session, full_name: str, number: int, result: RunResult | None
) -> Run:
    """Finish an in-progress run.

    Raises:
        JobNotFoundError: If the job does not exist.
        RunNotFoundError: If the job has no such run.
    """
    run = get_run(session, full_name, number)
    run.mark_finished(result)
    session.flush()
    logger.info("Finished run %s #%d", full_name, number)
    return run


def list_runs(session: Session, full_name: str, limit: int = 100) -> list[Run]:
    """List a job's runs, newest first.

    Raises:
        JobNotFoundError: If the job does not exist.
    """
    job = get_job(session, full_name)
    return list(job.runs.limit(limit))


def _find_grant(
    session: Session, principal: str, job_id: int | None
) -> JobGrant | None:
    job_clause = (
        JobGrant.job_id.is_(None) if job_id is None else JobGrant.job_id == job_id
    )
    stmt = select(JobGrant).where(JobGrant.principal == principal, job_clause)
    return session.execute(stmt).scalar_one_or_none()


def grant_read(
    session: Session, principal: str, full_name: str | None = None
) -> JobGrant:
    """Grant a principal read access to one job, or to all jobs.

    Granting twice is a no-op returning the existing grant.

    Args:
        session: Database session.
        principal: Identity receiving access.
        full_name: Job full name; None grants access to every job.

    Raises:
        JobNotFoundError: If the job does not exist.
    """
    job_id = None if full_name is None else get_job(session, full_name).id
    existing = _find_grant(session, principal, job_id)
    if existing is not None:
        return existing

    grant = JobGrant(principal=principal, job_id=job_id)
    session.add(grant)
    session.flush()
    logger.info("Granted %s read on %s", principal, full_name or "all jobs")
    return grant


def revoke_read(
    session: Session, principal: str, full_name: str | None = None
) -> bool:
    """Revoke a read grant.

    Returns:
        True if a grant was removed, False if none existed.

    Raises:
        JobNotFoundError: If the job does not exist.
    """
    job_id = None if full_name is None else get_job(session, full_name).id
    existing = _find_grant(session, principal, job_id)
    if existing is None:
        return False
    session.delete(existing)
    session.flush()
    logger.info("Revoked %s read on %s", principal, full_name or "all jobs")
    return True


__all__ = [
    "JobExistsError",
    "JobNotFoundError",
    "RunNotFoundError",
    "create_job",
    "delete_job",
    "finish_run",
    "get_job",
    "get_job_or_none",
    "get_run",
    "grant_read",
    "list_jobs",
    "list_runs",
    "normalize_full_name",
    "record_run",
    "revoke_read",
    "short_name",
]
