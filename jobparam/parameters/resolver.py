"""Build-name resolution for job build-name parameters.

Given a job reference, the resolver locates the job in a JobDirectory,
walks its runs newest first, keeps the finished runs whose result is
SUCCESS or better, and stops once the requested number of names has
been collected. An empty result is never an error: choices fall back to
a sentinel value so callers always have at least one option.

Lookup tries the reference as a full hierarchical name first, then
scans all visible jobs for a matching short name. The scan keeps
references written before jobs were grouped into folders working.
"""

from __future__ import annotations

import logging
from typing import Any

from jobparam.jobs.directory import JobDirectory, JobHandle, RunRecord
from jobparam.parameters.definition import JobBuildNameParameterDefinition
from jobparam.types import ParameterValue, RunResult

logger = logging.getLogger(__name__)

QUALIFYING_THRESHOLD = RunResult.SUCCESS


def is_qualifying_run(run: RunRecord) -> bool:
    """Check if a run is finished with a result at least as good as SUCCESS."""
    if run.is_building:
        return False
    result = run.result
    return result is not None and result.is_better_or_equal_to(QUALIFYING_THRESHOLD)


class BuildNameResolver:
    """Resolve job references to the names of their recent successful runs.

    The resolver holds no state besides its directory; every call queries
    the directory afresh.

    Args:
        directory: Job directory to read from. Its visibility rules decide
            which jobs exist as far as the resolver is concerned.
    """

    def __init__(self, directory: JobDirectory) -> None:
        self.directory = directory

    def resolve_job(self, ref: str) -> JobHandle | None:
        """Find a job by full name, falling back to a short-name scan.

        Args:
            ref: Full name ('folder/job') or short name ('job').

        Returns:
            The first matching job, or None.
        """
        job = self.directory.find_by_full_name(ref)
        if job is not None:
            return job

        for candidate in self.directory.all_jobs():
            if candidate.name == ref:
                logger.debug(
                    "Resolved %r by short name to %s", ref, candidate.full_name
                )
                return candidate

        logger.debug("No visible job matches %r", ref)
        return None

    def list_qualifying_build_names(self, ref: str, limit: int) -> list[str]:
        """List display names of the newest qualifying runs of a job.

        Args:
            ref: Job reference.
            limit: Maximum number of names, at least 1.

        Returns:
            Up to ``limit`` names, newest first. Empty if the job is not
            found or has no qualifying run.
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")

        job = self.resolve_job(ref)
        if job is None:
            return []

        names: list[str] = []
        for run in job.runs_newest_first():
            if not is_qualifying_run(run):
                continue
            names.append(run.display_name)
            if len(names) >= limit:
                break
        return names

    def get_choices(self, definition: JobBuildNameParameterDefinition) -> list[str]:
        """Return the choices offered for a parameter; never empty."""
        choices = self.list_qualifying_build_names(
            definition.job_name, definition.max_results
        )
        if not choices:
            choices.append(definition.empty_choice)
        return choices

    def default_value(self, definition: JobBuildNameParameterDefinition) -> str:
        """Return the fallback value if set, otherwise the first choice."""
        if definition.fallback_value is not None:
            return definition.fallback_value
        return self.get_choices(definition)[0]

    def default_parameter_value(
        self, definition: JobBuildNameParameterDefinition
    ) -> ParameterValue:
        return ParameterValue(
            name=definition.name,
            value=self.default_value(definition),
            description=definition.description,
        )

    @staticmethod
    def create_value(
        definition: JobBuildNameParameterDefinition, chosen: str
    ) -> ParameterValue:
        """Bind a chosen value. Any string is accepted as-is."""
        return ParameterValue(
            name=definition.name, value=chosen, description=definition.description
        )

    @staticmethod
    def create_value_from_json(
        definition: JobBuildNameParameterDefinition, data: dict[str, Any]
    ) -> ParameterValue:
        """Bind a submitted form object of the shape {"name", "value"}.

        The description always comes from the definition.

        Raises:
            ValueError: If the submission carries no value.
        """
        value = data.get("value")
        if value is None:
            raise ValueError(f"No value submitted for parameter {definition.name}")
        return ParameterValue(
            name=data.get("name") or definition.name,
            value=str(value),
            description=definition.description,
        )


__all__ = ["QUALIFYING_THRESHOLD", "BuildNameResolver", "is_qualifying_run"]
