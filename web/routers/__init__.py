"""Router modules for FastAPI web API."""

from web.routers import config, health, jobs, parameters

__all__ = ["config", "health", "jobs", "parameters"]
