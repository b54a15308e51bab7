"""Job directory ORM models.

This module defines the Job, Run, and JobGrant models that back the
SQL job directory: jobs addressed by a slash-separated full name, their
numbered run history, and per-principal read grants.
"""

from collections.abc import Iterator
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import DynamicMapped, Mapped, mapped_column, relationship

from jobparam.db import Base
from jobparam.types import RunResult

# Runs are streamed from the database in batches of this size so that
# callers which stop early never load the whole history.
RUN_FETCH_BATCH_SIZE = 25


class Job(Base):
    """ORM model for a job.

    Attributes:
        id: Primary key.
        full_name: Slash-separated hierarchical path (e.g. 'team/app/build').
        name: Short name, the last segment of full_name.
        description: Optional human-readable description.
        created_at: Timestamp when the job was registered.
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    full_name: Mapped[str] = mapped_column(
        String(500), nullable=False, unique=True, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    # Relationships
    runs: DynamicMapped["Run"] = relationship(
        "Run",
        back_populates="job",
        cascade="all, delete-orphan",
        lazy="dynamic",
        order_by="Run.number.desc()",
    )
    grants: Mapped[list["JobGrant"]] = relationship(
        "JobGrant", back_populates="job", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        """Return string representation of Job."""
        return f"<Job(id={self.id}, full_name='{self.full_name}')>"

    def runs_newest_first(self) -> Iterator["Run"]:
        """Iterate the run history from the newest run to the oldest."""
        return iter(self.runs.yield_per(RUN_FETCH_BATCH_SIZE))

    def next_run_number(self) -> int:
        """Return the number the next recorded run will receive."""
        latest = self.runs.first()
        return 1 if latest is None else latest.number + 1


class Run(Base):
    """ORM model for one execution of a job.

    Attributes:
        id: Primary key.
        job_id: Foreign key to Job.
        number: Sequence number within the job, starting at 1.
        custom_display_name: Name assigned to the run, if any.
        building: Whether the run is still in progress.
        result: Recorded RunResult value; None while building or when the
            run finished without recording one.
        started_at: Timestamp when the run started.
        finished_at: Timestamp when the run finished.
    """

    __tablename__ = "runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    job_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("jobs.id"), nullable=False, index=True
    )
    number: Mapped[int] = mapped_column(Integer, nullable=False)
    custom_display_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )

    building: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    result_value: Mapped[str | None] = mapped_column(
        "result", String(20), nullable=True
    )

    started_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    finished_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    job: Mapped["Job"] = relationship("Job", back_populates="runs")

    __table_args__ = (
        UniqueConstraint("job_id", "number", name="uq_runs_job_number"),
    )

    def __repr__(self) -> str:
        """Return string representation of Run."""
        return (
            f"<Run(id={self.id}, job_id={self.job_id}, number={self.number}, "
            f"result='{self.result_value}')>"
        )

    @property
    def display_name(self) -> str:
        """Assigned display name, or '#<number>' when none was set."""
        return self.custom_display_name or f"#{self.number}"

    @property
    def is_building(self) -> bool:
        return self.building

    @property
    def result(self) -> RunResult | None:
        if self.result_value is None:
            return None
        return RunResult(self.result_value)

    def mark_finished(self, result: RunResult | None) -> None:
        """Mark this run as finished with the given result.

        Args:
            result: Outcome to record; None finishes without a result.
        """
        self.building = False
        self.result_value = result.value if result is not None else None
        self.finished_at = datetime.now()


class JobGrant(Base):
    """ORM model granting a principal read access.

    A grant with no job grants read access to every job.

    Attributes:
        id: Primary key.
        principal: Identity the grant applies to.
        job_id: Foreign key to Job, or None for a global grant.
    """

    __tablename__ = "job_grants"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    principal: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    job_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("jobs.id"), nullable=True, index=True
    )

    job: Mapped["Job | None"] = relationship("Job", back_populates="grants")

    __table_args__ = (
        UniqueConstraint("principal", "job_id", name="uq_job_grants_principal_job"),
    )

    def __repr__(self) -> str:
        """Return string representation of JobGrant."""
        return f"<JobGrant(principal='{self.principal}', job_id={self.job_id})>"


__all__ = ["RUN_FETCH_BATCH_SIZE", "Job", "JobGrant", "Run"]
