"""Job build-name parameter module.

This module handles:
- The parameter definition (job reference, bound, fallback)
- Resolution of a job reference to recent successful build names
- Form checks and job-name auto-completion
"""

from jobparam.parameters.definition import JobBuildNameParameterDefinition
from jobparam.parameters.resolver import BuildNameResolver

__all__ = ["BuildNameResolver", "JobBuildNameParameterDefinition"]
