"""Form helpers for configuring a job build-name parameter.

These back the interactive parts of the parameter's configuration form:
checking that the referenced job can be found, and auto-completing job
names. Access to the check itself is enforced by the caller before these
run (see SqlJobDirectory.require_read).
"""

from jobparam.jobs.directory import JobDirectory
from jobparam.parameters.resolver import BuildNameResolver
from jobparam.types import FormValidation

DISPLAY_NAME = "Job Build Name Parameter"
SYMBOL = "jobBuildNameParam"
JOB_NOT_EXISTS_MESSAGE = (
    "Job does not exist or you do not have permission to view it"
)


def check_job_name(directory: JobDirectory, job_name: str) -> FormValidation:
    """Report whether a job reference resolves.

    Args:
        directory: Job directory as seen by the acting principal.
        job_name: Job reference to check.

    Returns:
        FormValidation.ok() if the job resolves, an error otherwise.
    """
    if BuildNameResolver(directory).resolve_job(job_name) is None:
        return FormValidation.error(JOB_NOT_EXISTS_MESSAGE)
    return FormValidation.ok()


def suggest_job_names(directory: JobDirectory, value: str | None) -> list[str]:
    """Suggest full job names containing ``value``, case-insensitively.

    A missing or blank value suggests every visible job.
    """
    names = [job.full_name for job in directory.all_jobs()]
    if value is None or not value.strip():
        return names
    needle = value.lower()
    return [name for name in names if needle in name.lower()]


__all__ = [
    "DISPLAY_NAME",
    "JOB_NOT_EXISTS_MESSAGE",
    "SYMBOL",
    "check_job_name",
    "suggest_job_names",
]
