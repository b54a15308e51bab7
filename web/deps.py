"""Request dependencies for FastAPI.

Provides a database session and the acting principal's job directory to
route handlers via FastAPI dependency injection.

Transaction boundaries are managed here:
- Session is created at request start
- On success (no exception): session is committed automatically
- On exception: session is rolled back automatically
- Session is closed after request completes
"""

from __future__ import annotations

from collections.abc import Generator
from typing import Any

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session, sessionmaker

from jobparam.config import get_settings
from jobparam.jobs.directory import SqlJobDirectory


def get_session_factory(request: Request) -> sessionmaker[Session]:
    """Get session factory from app state.

    Args:
        request: FastAPI request object.

    Returns:
        SQLAlchemy session factory.
    """
    factory: Any = request.app.state.session_factory
    return factory  # type: ignore[no-any-return]


def get_db(
    session_factory: sessionmaker[Session] = Depends(get_session_factory),
) -> Generator[Session, None, None]:
    """Provide a database session for a request.

    Yields:
        Database session.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_principal(
    x_principal: str | None = Header(default=None),
) -> str | None:
    """Return the acting principal from the X-Principal header.

    Falls back to the configured default principal; None is the
    unrestricted system context.
    """
    if x_principal:
        return x_principal
    return get_settings().default_principal


def get_directory(
    db: Session = Depends(get_db),
    principal: str | None = Depends(get_principal),
) -> SqlJobDirectory:
    """Provide the job directory as seen by the acting principal."""
    return SqlJobDirectory(db, principal)
