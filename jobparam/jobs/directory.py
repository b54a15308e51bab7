"""Job directory: job lookup and run enumeration.

The resolver only ever talks to the protocols defined here. Visibility
is a property of the directory: a job the acting principal may not read
is simply absent from both lookup and enumeration, so callers cannot
tell "hidden" apart from "does not exist".
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Protocol

from sqlalchemy import Select, exists, or_, select
from sqlalchemy.orm import Session

from jobparam.jobs.models import Job, JobGrant
from jobparam.types import RunResult

logger = logging.getLogger(__name__)


class RunRecord(Protocol):
    """Read-only view of one run."""

    @property
    def display_name(self) -> str: ...

    @property
    def is_building(self) -> bool: ...

    @property
    def result(self) -> RunResult | None: ...


class JobHandle(Protocol):
    """Read-only view of one job."""

    @property
    def name(self) -> str: ...

    @property
    def full_name(self) -> str: ...

    def runs_newest_first(self) -> Iterator[RunRecord]:
        """Yield runs from newest to oldest; restartable per call."""
        ...


class JobDirectory(Protocol):
    """Lookup and enumeration of the jobs visible to the caller."""

    def find_by_full_name(self, full_name: str) -> JobHandle | None:
        """Return the job at exactly this hierarchical path, if visible."""
        ...

    def all_jobs(self) -> Iterable[JobHandle]:
        """Return every visible job."""
        ...


class AccessDeniedError(Exception):
    """Raised when a principal may not use a directory entry point at all."""

    def __init__(self, principal: str | None, code: str = "permission_error") -> None:
        super().__init__(f"Access denied for principal: {principal}")
        self.principal = principal
        self.code = code


class SqlJobDirectory:
    """Job directory backed by the jobs tables.

    Args:
        session: Database session.
        principal: Acting identity. None is the system context, which
            sees every job.
    """

    def __init__(self, session: Session, principal: str | None = None) -> None:
        self.session = session
        self.principal = principal

    def __repr__(self) -> str:
        return f"<SqlJobDirectory(principal={self.principal!r})>"

    def _visible(self, stmt: Select[tuple[Job]]) -> Select[tuple[Job]]:
        """Restrict a Job select to the jobs the principal may read."""
        if self.principal is None:
            return stmt
        grant = exists().where(
            JobGrant.principal == self.principal,
            or_(JobGrant.job_id.is_(None), JobGrant.job_id == Job.id),
        )
        return stmt.where(grant)

    def find_by_full_name(self, full_name: str) -> Job | None:
        stmt = self._visible(select(Job).where(Job.full_name == full_name))
        return self.session.execute(stmt).scalar_one_or_none()

    def all_jobs(self) -> list[Job]:
        stmt = self._visible(select(Job).order_by(Job.full_name))
        return list(self.session.execute(stmt).scalars().all())

    def can_read(self) -> bool:
        """Check if the principal may read anything at all."""
        if self.principal is None:
            return True
        stmt = select(exists().where(JobGrant.principal == self.principal))
        return bool(self.session.execute(stmt).scalar())

    def require_read(self) -> None:
        """Raise AccessDeniedError unless the principal may read anything.

        Raises:
            AccessDeniedError: If the principal holds no grant.
        """
        if not self.can_read():
            logger.info("Denied directory access for principal %s", self.principal)
            raise AccessDeniedError(self.principal)


__all__ = [
    "AccessDeniedError",
    "JobDirectory",
    "JobHandle",
    "RunRecord",
    "SqlJobDirectory",
]
