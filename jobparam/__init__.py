"""jobparam - build-name choice parameters backed by job run history.

This package resolves a job reference to the display names of its most
recent successful runs, for use as a selectable pipeline parameter, and
ships the job directory, CLI, HTTP API, and MCP tools around it.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
