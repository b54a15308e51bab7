"""Tests for jobs/service.py module."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from jobparam.db import Base
from jobparam.jobs.models import JobGrant, Run
from jobparam.jobs.service import (
    JobExistsError,
    JobNotFoundError,
    RunNotFoundError,
    create_job,
    delete_job,
    finish_run,
    get_job,
    get_job_or_none,
    get_run,
    grant_read,
    list_jobs,
    list_runs,
    normalize_full_name,
    record_run,
    revoke_read,
    short_name,
)
from jobparam.types import RunResult


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(bind=engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a session for testing."""
    session_factory = sessionmaker(bind=engine, autoflush=False)
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


class TestNames:
    """Tests for job name helpers."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("app", "app"),
            ("team/app", "team/app"),
            ("/team//app/", "team/app"),
            ("  team/app  ", "team/app"),
        ],
    )
    def test_normalize_full_name(self, raw, expected):
        assert normalize_full_name(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "/", "//"])
    def test_normalize_rejects_empty(self, raw):
        with pytest.raises(ValueError):
            normalize_full_name(raw)

    def test_short_name(self):
        assert short_name("a/b/c") == "c"
        assert short_name("c") == "c"


class TestCreateJob:
    """Tests for create_job and job lookup."""

    def test_create_job(self, session):
        """Created jobs get their short name from the last segment."""
        job = create_job(session, "team/app", description="App")
        assert job.id is not None
        assert job.name == "app"
        assert job.full_name == "team/app"
        assert job.description == "App"

    def test_create_job_normalizes(self, session):
        job = create_job(session, "/team/app/")
        assert job.full_name == "team/app"

    def test_create_duplicate(self, session):
        create_job(session, "team/app")
        with pytest.raises(JobExistsError) as exc_info:
            create_job(session, "team//app")
        assert exc_info.value.code == "job_exists"

    def test_get_job(self, session):
        created = create_job(session, "app")
        assert get_job(session, "app") is created
        assert get_job_or_none(session, "missing") is None

    def test_get_job_not_found(self, session):
        with pytest.raises(JobNotFoundError) as exc_info:
            get_job(session, "missing")
        assert exc_info.value.code == "job_not_found"
        assert exc_info.value.full_name == "missing"

    def test_list_jobs_sorted(self, session):
        for name in ("b", "a/z", "a"):
            create_job(session, name)
        assert [j.full_name for j in list_jobs(session)] == ["a", "a/z", "b"]


class TestDeleteJob:
    """Tests for delete_job."""

    def test_delete_job_removes_runs_and_grants(self, session):
        create_job(session, "app")
        record_run(session, "app", RunResult.SUCCESS)
        grant_read(session, "alice", "app")

        delete_job(session, "app")

        assert get_job_or_none(session, "app") is None
        assert session.query(Run).count() == 0
        assert session.query(JobGrant).count() == 0

    def test_delete_keeps_global_grants(self, session):
        create_job(session, "app")
        grant_read(session, "alice")
        delete_job(session, "app")
        assert session.query(JobGrant).count() == 1

    def test_delete_missing(self, session):
        with pytest.raises(JobNotFoundError):
            delete_job(session, "missing")


class TestRuns:
    """Tests for run recording."""

    def test_record_run_numbers_sequentially(self, session):
        create_job(session, "app")
        first = record_run(session, "app", RunResult.SUCCESS)
        second = record_run(session, "app", RunResult.FAILURE)
        assert (first.number, second.number) == (1, 2)
        assert second.result is RunResult.FAILURE
        assert second.finished_at is not None

    def test_record_run_with_display_name(self, session):
        create_job(session, "app")
        run = record_run(session, "app", RunResult.SUCCESS, display_name="1.0.0-1")
        assert run.display_name == "1.0.0-1"

    def test_record_building_run_ignores_result(self, session):
        create_job(session, "app")
        run = record_run(session, "app", RunResult.SUCCESS, building=True)
        assert run.is_building
        assert run.result is None

    def test_record_run_missing_job(self, session):
        with pytest.raises(JobNotFoundError):
            record_run(session, "missing", RunResult.SUCCESS)

    def test_finish_run(self, session):
        create_job(session, "app")
        record_run(session, "app", building=True)
        run = finish_run(session, "app", 1, RunResult.SUCCESS)
        assert not run.is_building
        assert run.result is RunResult.SUCCESS

    def test_get_run_not_found(self, session):
        create_job(session, "app")
        with pytest.raises(RunNotFoundError) as exc_info:
            get_run(session, "app", 9)
        assert exc_info.value.code == "run_not_found"
        assert exc_info.value.number == 9

    def test_list_runs_newest_first(self, session):
        create_job(session, "app")
        for _ in range(4):
            record_run(session, "app", RunResult.SUCCESS)
        assert [r.number for r in list_runs(session, "app")] == [4, 3, 2, 1]
        assert [r.number for r in list_runs(session, "app", limit=2)] == [4, 3]


class TestGrants:
    """Tests for grant_read and revoke_read."""

    def test_grant_job(self, session):
        job = create_job(session, "app")
        grant = grant_read(session, "alice", "app")
        assert grant.principal == "alice"
        assert grant.job_id == job.id

    def test_grant_is_idempotent(self, session):
        create_job(session, "app")
        first = grant_read(session, "alice", "app")
        second = grant_read(session, "alice", "app")
        assert first.id == second.id
        assert session.query(JobGrant).count() == 1

    def test_global_grant_is_idempotent(self, session):
        first = grant_read(session, "alice")
        second = grant_read(session, "alice")
        assert first.id == second.id
        assert first.job_id is None

    def test_grant_missing_job(self, session):
        with pytest.raises(JobNotFoundError):
            grant_read(session, "alice", "missing")

    def test_revoke(self, session):
        create_job(session, "app")
        grant_read(session, "alice", "app")
        assert revoke_read(session, "alice", "app") is True
        assert revoke_read(session, "alice", "app") is False
        assert session.query(JobGrant).count() == 0

    def test_revoke_global(self, session):
        grant_read(session, "alice")
        assert revoke_read(session, "alice") is True
