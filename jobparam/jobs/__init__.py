"""Job directory module.

This module handles:
- Job, run, and read-grant storage
- Visibility-filtered job lookup and run enumeration
- Job history import from YAML/JSON files
"""

from jobparam.jobs.models import Job, JobGrant, Run

__all__ = ["Job", "JobGrant", "Run"]

# Submodules are imported explicitly (jobparam.jobs.directory, etc.)
