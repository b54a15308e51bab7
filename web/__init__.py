"""FastAPI web application for jobparam.

This module provides the HTTP API that mirrors the core services:
job management and the job build-name parameter surface.

All business logic is delegated to core modules in jobparam/.
"""

from web.app import app, create_app

__all__ = ["app", "create_app"]
