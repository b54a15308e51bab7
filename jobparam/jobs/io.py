"""Job history import.

This module loads job files (YAML or JSON), validates them against
jobparam.jobs.schema, and records the jobs, runs, and grants they
describe in the job directory.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from sqlalchemy.orm import Session

from jobparam.jobs.schema import (
    JobBulkImportResult,
    JobFileSchema,
    JobImportResult,
    JobSchema,
)
from jobparam.jobs.service import (
    JobExistsError,
    create_job,
    grant_read,
    record_run,
)

logger = logging.getLogger(__name__)


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the document is not an object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def load_job_file(path: Path) -> JobFileSchema:
    """Load and validate a job file, choosing the parser by extension.

    Raises:
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If data does not match the schema.
        ValueError: If the extension is unsupported or content is malformed.
    """
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = load_yaml(path)
    elif suffix == ".json":
        data = load_json(path)
    else:
        raise ValueError(f"Unsupported job file extension: {suffix}")
    return JobFileSchema.model_validate(data)


def import_job(session: Session, schema: JobSchema) -> JobImportResult:
    """Import one job with its history inside a savepoint.

    A failing job is rolled back on its own and reported, leaving jobs
    imported before it intact.
    """
    try:
        with session.begin_nested():
            create_job(session, schema.full_name, description=schema.description)
            for run in schema.runs:
                record_run(
                    session,
                    schema.full_name,
                    result=run.result,
                    display_name=run.display_name,
                    building=run.building,
                )
            for principal in schema.readers:
                grant_read(session, principal, schema.full_name)
    except (JobExistsError, ValueError) as e:
        logger.warning("Skipping job %s: %s", schema.full_name, e)
        return JobImportResult(full_name=schema.full_name, success=False, error=str(e))

    return JobImportResult(
        full_name=schema.full_name, success=True, runs_imported=len(schema.runs)
    )


def import_jobs_from_file(session: Session, path: Path) -> JobBulkImportResult:
    """Import every job described in a job file.

    Args:
        session: Database session. The caller commits.
        path: YAML or JSON job file.

    Returns:
        Per-job import results.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file cannot be parsed or validated as a whole.
    """
    try:
        job_file = load_job_file(path)
    except ValidationError as e:
        raise ValueError(f"Invalid job file {path}: {e}") from e

    results = [import_job(session, job) for job in job_file.jobs]
    succeeded = sum(1 for r in results if r.success)
    logger.info("Imported %d/%d jobs from %s", succeeded, len(results), path)
    return JobBulkImportResult(
        total=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
        results=results,
    )


__all__ = [
    "import_job",
    "import_jobs_from_file",
    "load_job_file",
    "load_json",
    "load_yaml",
]
