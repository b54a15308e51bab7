"""Tests for parameters/resolver.py module.

Uses an in-memory fake job directory so resolution policy is tested
independently of storage.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field

import pytest

from jobparam.parameters.definition import JobBuildNameParameterDefinition
from jobparam.parameters.resolver import BuildNameResolver, is_qualifying_run
from jobparam.types import ParameterValue, RunResult


@dataclass
class FakeRun:
    """Minimal run record."""

    display_name: str
    result: RunResult | None = RunResult.SUCCESS
    is_building: bool = False


@dataclass
class FakeJob:
    """Minimal job handle; runs are stored oldest first."""

    full_name: str
    runs: list[FakeRun] = field(default_factory=list)
    runs_read: int = 0

    @property
    def name(self) -> str:
        return self.full_name.rsplit("/", 1)[-1]

    def runs_newest_first(self) -> Iterator[FakeRun]:
        for run in reversed(self.runs):
            self.runs_read += 1
            yield run


@dataclass
class FakeDirectory:
    """Job directory over a list of jobs, with optional hidden jobs."""

    jobs: list[FakeJob] = field(default_factory=list)
    hidden: set[str] = field(default_factory=set)

    def _visible(self) -> list[FakeJob]:
        return [j for j in self.jobs if j.full_name not in self.hidden]

    def find_by_full_name(self, full_name: str) -> FakeJob | None:
        for job in self._visible():
            if job.full_name == full_name:
                return job
        return None

    def all_jobs(self) -> list[FakeJob]:
        return self._visible()


def successful_job(full_name: str, count: int, prefix: str = "build-") -> FakeJob:
    """Create a job with ``count`` successful runs named prefix1..prefixN."""
    return FakeJob(
        full_name=full_name,
        runs=[FakeRun(f"{prefix}{i}") for i in range(1, count + 1)],
    )


def definition(job_name: str, **kwargs: object) -> JobBuildNameParameterDefinition:
    return JobBuildNameParameterDefinition(
        name="BUILD_NAME",
        job_name=job_name,
        description="Select build name from source job",
        **kwargs,  # type: ignore[arg-type]
    )


class TestIsQualifyingRun:
    """Tests for the run qualification policy."""

    def test_success_qualifies(self) -> None:
        """Finished successful runs qualify."""
        assert is_qualifying_run(FakeRun("a", RunResult.SUCCESS)) is True

    @pytest.mark.parametrize(
        "result",
        [RunResult.UNSTABLE, RunResult.FAILURE, RunResult.NOT_BUILT, RunResult.ABORTED],
    )
    def test_worse_results_do_not_qualify(self, result: RunResult) -> None:
        """Anything worse than SUCCESS is excluded."""
        assert is_qualifying_run(FakeRun("a", result)) is False

    def test_missing_result_does_not_qualify(self) -> None:
        """A run finished without a result is excluded."""
        assert is_qualifying_run(FakeRun("a", None)) is False

    def test_building_run_does_not_qualify(self) -> None:
        """In-progress runs are excluded even with a success result."""
        assert is_qualifying_run(FakeRun("a", RunResult.SUCCESS, True)) is False


class TestResolveJob:
    """Tests for job lookup."""

    def test_direct_full_name_lookup(self) -> None:
        """A full name resolves directly."""
        job = FakeJob("C/sub")
        resolver = BuildNameResolver(FakeDirectory([job]))
        assert resolver.resolve_job("C/sub") is job

    def test_short_name_fallback(self) -> None:
        """A short name finds a job nested in a folder."""
        job = FakeJob("C/sub")
        resolver = BuildNameResolver(FakeDirectory([FakeJob("other"), job]))
        assert resolver.resolve_job("sub") is job

    def test_direct_match_wins_over_short_name(self) -> None:
        """A top-level job named like the reference wins over nested ones."""
        nested = FakeJob("folder/app")
        top = FakeJob("app")
        resolver = BuildNameResolver(FakeDirectory([nested, top]))
        assert resolver.resolve_job("app") is top

    def test_first_short_name_match_wins(self) -> None:
        """Among several short-name matches, enumeration order decides."""
        first = FakeJob("a/app")
        second = FakeJob("b/app")
        resolver = BuildNameResolver(FakeDirectory([first, second]))
        assert resolver.resolve_job("app") is first

    def test_short_name_is_case_sensitive(self) -> None:
        """Short-name matching is exact."""
        resolver = BuildNameResolver(FakeDirectory([FakeJob("C/Sub")]))
        assert resolver.resolve_job("sub") is None

    def test_partial_path_does_not_match_short_name(self) -> None:
        """A qualified reference is not compared segment-wise."""
        resolver = BuildNameResolver(FakeDirectory([FakeJob("A/C/sub")]))
        assert resolver.resolve_job("C/sub") is None

    def test_not_found_returns_none(self) -> None:
        """Unknown references resolve to None without raising."""
        resolver = BuildNameResolver(FakeDirectory([FakeJob("x")]))
        assert resolver.resolve_job("missing") is None
        assert resolver.resolve_job("") is None

    def test_hidden_job_is_not_found(self) -> None:
        """A job the directory hides does not resolve by either step."""
        directory = FakeDirectory([FakeJob("D"), FakeJob("f/D")], hidden={"D", "f/D"})
        assert BuildNameResolver(directory).resolve_job("D") is None


class TestListQualifyingBuildNames:
    """Tests for bounded, filtered build-name listing."""

    def test_newest_first_and_bounded(self) -> None:
        """Ten successful builds with limit 3 yield the newest three."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 10)]))
        names = resolver.list_qualifying_build_names("A", 3)
        assert names == ["build-10", "build-9", "build-8"]

    def test_fewer_than_limit_returns_all(self) -> None:
        """No padding when fewer runs qualify than the limit."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 2)]))
        assert resolver.list_qualifying_build_names("A", 5) == ["build-2", "build-1"]

    def test_exactly_limit(self) -> None:
        """Exactly ``limit`` qualifying runs are all returned."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 4)]))
        assert len(resolver.list_qualifying_build_names("A", 4)) == 4

    def test_filters_unqualified_runs(self) -> None:
        """Only finished successful runs are listed."""
        job = FakeJob(
            "B",
            runs=[
                FakeRun("ok-1"),
                FakeRun("unstable", RunResult.UNSTABLE),
                FakeRun("failed", RunResult.FAILURE),
                FakeRun("aborted", RunResult.ABORTED),
                FakeRun("not-built", RunResult.NOT_BUILT),
                FakeRun("no-result", None),
                FakeRun("ok-2"),
            ],
        )
        resolver = BuildNameResolver(FakeDirectory([job]))
        assert resolver.list_qualifying_build_names("B", 10) == ["ok-2", "ok-1"]

    def test_building_runs_not_counted(self) -> None:
        """In-progress runs neither appear nor consume the limit."""
        job = FakeJob(
            "A",
            runs=[
                FakeRun("b1"),
                FakeRun("b2"),
                FakeRun("b3"),
                FakeRun("running-1", None, True),
                FakeRun("running-2", RunResult.SUCCESS, True),
            ],
        )
        resolver = BuildNameResolver(FakeDirectory([job]))
        assert resolver.list_qualifying_build_names("A", 2) == ["b3", "b2"]

    def test_building_run_in_middle_of_history(self) -> None:
        """In-progress runs are skipped wherever they appear."""
        job = FakeJob(
            "A",
            runs=[FakeRun("b1"), FakeRun("mid", None, True), FakeRun("b3")],
        )
        resolver = BuildNameResolver(FakeDirectory([job]))
        assert resolver.list_qualifying_build_names("A", 5) == ["b3", "b1"]

    def test_stops_scanning_at_limit(self) -> None:
        """History beyond the limit-th qualifying run is never read."""
        job = successful_job("A", 100)
        resolver = BuildNameResolver(FakeDirectory([job]))
        resolver.list_qualifying_build_names("A", 3)
        assert job.runs_read == 3

    def test_does_not_reorder_directory_output(self) -> None:
        """The directory's newest-first order is kept as-is."""
        job = FakeJob("A", runs=[FakeRun("z"), FakeRun("a"), FakeRun("m")])
        resolver = BuildNameResolver(FakeDirectory([job]))
        assert resolver.list_qualifying_build_names("A", 5) == ["m", "a", "z"]

    def test_not_found_is_empty(self) -> None:
        """A missing job yields an empty list, not an error."""
        resolver = BuildNameResolver(FakeDirectory())
        assert resolver.list_qualifying_build_names("nope", 5) == []

    def test_no_successful_runs_is_empty(self) -> None:
        """A job with only failures yields an empty list."""
        job = FakeJob("A", runs=[FakeRun("f", RunResult.FAILURE)])
        resolver = BuildNameResolver(FakeDirectory([job]))
        assert resolver.list_qualifying_build_names("A", 5) == []

    def test_rejects_non_positive_limit(self) -> None:
        """The limit must be at least 1."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 1)]))
        with pytest.raises(ValueError):
            resolver.list_qualifying_build_names("A", 0)


class TestGetChoices:
    """Tests for parameter choices."""

    def test_scenario_bounded_choices(self) -> None:
        """max_results=3 over ten builds offers the newest three."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 10)]))
        assert resolver.get_choices(definition("A", max_results=3)) == [
            "build-10",
            "build-9",
            "build-8",
        ]

    def test_scenario_failed_build_excluded(self) -> None:
        """A failed build is skipped; the successful one is offered."""
        job = FakeJob(
            "B", runs=[FakeRun("failed-build", RunResult.FAILURE), FakeRun("ok-1")]
        )
        resolver = BuildNameResolver(FakeDirectory([job]))
        assert resolver.get_choices(definition("B")) == ["ok-1"]

    def test_scenario_short_name_reference(self) -> None:
        """A short reference finds the folder job's builds."""
        job = successful_job("C/sub", 2, prefix="folder-build-")
        resolver = BuildNameResolver(FakeDirectory([job]))
        assert resolver.get_choices(definition("sub")) == [
            "folder-build-2",
            "folder-build-1",
        ]

    def test_nonexistent_job_returns_sentinel(self) -> None:
        """A missing job offers exactly the default sentinel."""
        resolver = BuildNameResolver(FakeDirectory())
        assert resolver.get_choices(definition("non-existent-job")) == ["0.0.1-1+999"]

    def test_hidden_job_same_as_missing(self) -> None:
        """A hidden job offers the sentinel, identical to a missing one."""
        directory = FakeDirectory([successful_job("D", 3)], hidden={"D"})
        resolver = BuildNameResolver(directory)
        hidden = resolver.get_choices(definition("D"))
        missing = resolver.get_choices(definition("never-existed"))
        assert hidden == missing == ["0.0.1-1+999"]

    def test_configured_fallback(self) -> None:
        """A configured fallback replaces the sentinel."""
        resolver = BuildNameResolver(FakeDirectory())
        choices = resolver.get_choices(definition("x", fallback_value="1.0.0"))
        assert choices == ["1.0.0"]

    def test_none_fallback_uses_sentinel(self) -> None:
        """Without a fallback, empty choices still hold the sentinel."""
        resolver = BuildNameResolver(FakeDirectory())
        assert resolver.get_choices(definition("x", fallback_value=None)) == [
            "0.0.1-1+999"
        ]

    def test_none_fallback_uses_configured_default(self) -> None:
        """Without a fallback, empty choices hold the definition's default."""
        resolver = BuildNameResolver(FakeDirectory())
        param = definition("x", fallback_value=None, default_fallback_value="cfg")
        assert resolver.get_choices(param) == ["cfg"]
        assert resolver.default_value(param) == "cfg"

    def test_configured_default_bound(self) -> None:
        """An unset bound takes the definition's default_max_results."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 10)]))
        param = definition("A", max_results=0, default_max_results=3)
        assert resolver.get_choices(param) == ["build-10", "build-9", "build-8"]

    def test_zero_max_results_means_default(self) -> None:
        """max_results=0 behaves like the default bound of 5."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 10)]))
        zero = resolver.get_choices(definition("A", max_results=0))
        default = resolver.get_choices(definition("A"))
        assert zero == default
        assert len(zero) == 5

    @pytest.mark.parametrize("job_name", ["A", "missing", "", "F"])
    def test_never_empty(self, job_name: str) -> None:
        """Choices always hold at least one entry."""
        failing = FakeJob("F", runs=[FakeRun("f", RunResult.FAILURE)])
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 2), failing]))
        assert len(resolver.get_choices(definition(job_name))) >= 1

    def test_reflects_latest_history(self) -> None:
        """Choices are recomputed on every call."""
        job = successful_job("A", 1)
        resolver = BuildNameResolver(FakeDirectory([job]))
        param = definition("A")
        assert resolver.get_choices(param) == ["build-1"]
        job.runs.append(FakeRun("build-2"))
        assert resolver.get_choices(param) == ["build-2", "build-1"]

    def test_returns_fresh_list(self) -> None:
        """Mutating a returned list does not affect later calls."""
        resolver = BuildNameResolver(FakeDirectory())
        first = resolver.get_choices(definition("x"))
        first.append("junk")
        assert resolver.get_choices(definition("x")) == ["0.0.1-1+999"]

    def test_updated_max_results_applies(self) -> None:
        """Changing max_results after construction changes the bound."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 10)]))
        param = definition("A")
        param.max_results = 2
        assert resolver.get_choices(param) == ["build-10", "build-9"]


class TestDefaultValue:
    """Tests for default value selection."""

    def test_default_is_fallback_when_set(self) -> None:
        """An explicit fallback is the default even when builds exist."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 3)]))
        assert resolver.default_value(definition("A")) == "0.0.1-1+999"

    def test_default_is_first_choice_without_fallback(self) -> None:
        """With no fallback, the newest qualifying build is the default."""
        resolver = BuildNameResolver(FakeDirectory([successful_job("A", 3)]))
        param = definition("A", fallback_value=None)
        assert resolver.default_value(param) == "build-3"

    def test_default_without_fallback_or_builds(self) -> None:
        """With neither fallback nor builds, the sentinel is the default."""
        resolver = BuildNameResolver(FakeDirectory())
        param = definition("A", fallback_value=None)
        assert resolver.default_value(param) == "0.0.1-1+999"

    def test_default_parameter_value(self) -> None:
        """The default value is bound with the definition's name and description."""
        resolver = BuildNameResolver(FakeDirectory())
        value = resolver.default_parameter_value(definition("A"))
        assert value == ParameterValue(
            name="BUILD_NAME",
            value="0.0.1-1+999",
            description="Select build name from source job",
        )


class TestCreateValue:
    """Tests for value binding."""

    def test_create_value(self) -> None:
        """A chosen string is paired with the definition's name and description."""
        value = BuildNameResolver.create_value(definition("A"), "0.0.1-1+999")
        assert value.name == "BUILD_NAME"
        assert value.value == "0.0.1-1+999"
        assert value.description == "Select build name from source job"

    def test_create_value_accepts_any_string(self) -> None:
        """Values outside the offered choices are accepted as-is."""
        value = BuildNameResolver.create_value(definition("A"), "not-a-choice")
        assert value.value == "not-a-choice"

    def test_create_value_from_json(self) -> None:
        """Submitted form objects are bound with the definition's description."""
        value = BuildNameResolver.create_value_from_json(
            definition("A"), {"name": "BUILD_NAME", "value": "1.2.3"}
        )
        assert value == ParameterValue(
            "BUILD_NAME", "1.2.3", "Select build name from source job"
        )

    def test_create_value_from_json_missing_name(self) -> None:
        """A submission without a name takes the definition's name."""
        value = BuildNameResolver.create_value_from_json(
            definition("A"), {"value": "1.2.3"}
        )
        assert value.name == "BUILD_NAME"

    def test_create_value_from_json_missing_value(self) -> None:
        """A submission without a value is rejected."""
        with pytest.raises(ValueError, match="No value submitted"):
            BuildNameResolver.create_value_from_json(
                definition("A"), {"name": "BUILD_NAME"}
            )
