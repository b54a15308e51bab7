"""Configuration endpoints."""

from typing import Any

from fastapi import APIRouter

from jobparam.config import get_settings

router = APIRouter()


@router.get("")
def get_config() -> dict[str, Any]:
    """Get effective configuration.

    Returns:
        Current configuration as JSON.
    """
    settings = get_settings()
    return {
        "db_url": settings.db_url,
        "log_level": settings.log_level,
        "default_max_results": settings.default_max_results,
        "fallback_value": settings.fallback_value,
        "default_principal": settings.default_principal,
    }
