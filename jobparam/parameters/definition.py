"""Job build-name parameter definition.

A definition names a pipeline parameter whose choices are the display
names of recent successful runs of another job.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from jobparam.config import DEFAULT_FALLBACK_VALUE, DEFAULT_MAX_RESULTS

if TYPE_CHECKING:
    from jobparam.config import Settings


class JobBuildNameParameterDefinition:
    """Definition of a parameter offering build names of another job.

    Everything except ``max_results`` is fixed at construction.

    Args:
        name: Parameter name.
        job_name: Reference to the source job (short or full name).
        description: Optional parameter description.
        max_results: Number of build names to offer; 0 or None means
            ``default_max_results``.
        fallback_value: Value offered when the job has no qualifying
            build. Pass None to default to the first choice instead.
        default_max_results: Bound applied when ``max_results`` is unset
            or not positive.
        default_fallback_value: Choice offered when nothing qualifies and
            ``fallback_value`` is None.
    """

    def __init__(
        self,
        name: str,
        job_name: str,
        description: str | None = None,
        max_results: int | None = None,
        fallback_value: str | None = DEFAULT_FALLBACK_VALUE,
        default_max_results: int = DEFAULT_MAX_RESULTS,
        default_fallback_value: str = DEFAULT_FALLBACK_VALUE,
    ) -> None:
        if default_max_results < 1:
            raise ValueError(
                f"default_max_results must be at least 1, got {default_max_results}"
            )
        self._name = name
        self._job_name = job_name
        self._description = description
        self._fallback_value = fallback_value
        self._max_results = max_results
        self._default_max_results = default_max_results
        self._default_fallback_value = default_fallback_value

    def __repr__(self) -> str:
        return (
            f"<JobBuildNameParameterDefinition(name='{self._name}', "
            f"job_name='{self._job_name}', max_results={self.max_results})>"
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def job_name(self) -> str:
        return self._job_name

    @property
    def description(self) -> str | None:
        return self._description

    @property
    def fallback_value(self) -> str | None:
        return self._fallback_value

    @property
    def empty_choice(self) -> str:
        """The single choice offered when no build qualifies."""
        if self._fallback_value is not None:
            return self._fallback_value
        return self._default_fallback_value

    @property
    def configured_max_results(self) -> int | None:
        """The bound as configured, before the default is applied."""
        return self._max_results

    @property
    def max_results(self) -> int:
        """Effective bound on offered build names, always at least 1."""
        configured = self._max_results
        if configured is None or configured <= 0:
            return self._default_max_results
        return configured

    @max_results.setter
    def max_results(self, value: int | None) -> None:
        # A single rebind: concurrent readers see the old or the new bound.
        self._max_results = value

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self._name,
            "job_name": self._job_name,
            "description": self._description,
            "max_results": self._max_results,
            "fallback_value": self._fallback_value,
        }

    @classmethod
    def from_dict(
        cls, data: dict[str, Any], settings: Settings | None = None
    ) -> JobBuildNameParameterDefinition:
        """Build a definition from its dictionary form.

        Missing optional keys take their defaults: the configured ones when
        ``settings`` is given, the built-in ones otherwise. An explicit
        ``fallback_value: null`` is kept as None.

        Raises:
            KeyError: If 'name' or 'job_name' is missing.
        """
        default_max_results = DEFAULT_MAX_RESULTS
        default_fallback_value = DEFAULT_FALLBACK_VALUE
        if settings is not None:
            default_max_results = settings.default_max_results
            default_fallback_value = settings.fallback_value
        return cls(
            name=data["name"],
            job_name=data["job_name"],
            description=data.get("description"),
            max_results=data.get("max_results"),
            fallback_value=data.get("fallback_value", default_fallback_value),
            default_max_results=default_max_results,
            default_fallback_value=default_fallback_value,
        )


__all__ = ["JobBuildNameParameterDefinition"]
