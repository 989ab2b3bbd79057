r"""Configuration dataclasses and defaults for retries and the API client.

This module provides the default constants shared across the package,
the immutable ``RetryPolicy`` consulted by the retry executor, and the
``ClientConfig`` used by ``AsyncApiClient``.
"""

from __future__ import annotations

__all__ = [
    "API_URL_ENV_VAR",
    "DEFAULT_BASE_DELAY",
    "DEFAULT_BASE_URL",
    "DEFAULT_CORRELATION_ID",
    "DEFAULT_HEALTH_PATH",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "ClientConfig",
    "RetryPolicy",
]

import os
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from pressguard.backoff.linear import LinearBackoff
from pressguard.core.retry_logic import is_retryable
from pressguard.core.validation import validate_retry_params, validate_timeout

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    import httpx


# Default maximum number of retry attempts
# Total attempts = max_retries + 1 (initial attempt)
DEFAULT_MAX_RETRIES = 3

# Base delay in seconds of the linear backoff
# Wait time = base_delay * (attempt + 1): 1s, 2s, 3s
DEFAULT_BASE_DELAY = 1.0

# Key of the progress indicator shown while retrying
DEFAULT_CORRELATION_ID = "network-retry"

# Default timeout in seconds for API requests
DEFAULT_TIMEOUT = 15.0

DEFAULT_BASE_URL = "http://localhost:5000/api"

# Liveness endpoint, relative to the API base URL
DEFAULT_HEALTH_PATH = "/health"

API_URL_ENV_VAR = "PRESSGUARD_API_URL"


@dataclass(frozen=True)
class RetryPolicy:
    """Immutable retry policy for one call of the retry executor.

    Args:
        max_retries: Maximum number of retry attempts. Must be >= 0. The
            operation is invoked at most ``max_retries + 1`` times.
        base_delay: Base delay in seconds. The wait before retry ``i``
            (1-indexed) is ``base_delay * i``. Must be >= 0.
        silent: If ``True``, no progress notification is ever emitted.
        retry_if: Predicate deciding whether a failure is retryable.
        correlation_id: Key of the progress indicator. Runs sharing a key
            replace each other's indicator.
        max_delay: Optional cap on a single backoff delay in seconds.

    Example:
        ```pycon
        >>> from pressguard.core.config import RetryPolicy
        >>> policy = RetryPolicy()
        >>> policy.max_retries
        3
        >>> policy.merge(max_retries=2, base_delay=0.1).max_retries
        2
        >>> policy.max_retries  # Original unchanged
        3

        ```
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    silent: bool = False
    retry_if: Callable[[BaseException], bool] = is_retryable
    correlation_id: str = DEFAULT_CORRELATION_ID
    max_delay: float | None = None

    def __post_init__(self) -> None:
        validate_retry_params(
            max_retries=self.max_retries,
            base_delay=self.base_delay,
            max_delay=self.max_delay,
            correlation_id=self.correlation_id,
        )

    @property
    def backoff(self) -> LinearBackoff:
        """The linear backoff strategy described by this policy."""
        return LinearBackoff(base_delay=self.base_delay, max_delay=self.max_delay)

    @property
    def total_attempts(self) -> int:
        """The maximum number of times the operation is invoked."""
        return self.max_retries + 1

    def merge(self, **overrides: Any) -> RetryPolicy:
        """Create a new policy with the specified fields overridden.

        Only non-None override values are applied, so unspecified fields
        fall back to the values of this policy.

        Args:
            **overrides: Fields to override.

        Returns:
            A new validated ``RetryPolicy``.

        Raises:
            TypeError: If an override does not name a policy field.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        if not filtered_overrides:
            return self
        return replace(self, **filtered_overrides)

    def to_dict(self) -> dict[str, Any]:
        """Convert the policy to a dictionary of keyword arguments."""
        return {
            "max_retries": self.max_retries,
            "base_delay": self.base_delay,
            "silent": self.silent,
            "retry_if": self.retry_if,
            "correlation_id": self.correlation_id,
            "max_delay": self.max_delay,
        }


@dataclass
class ClientConfig:
    """Configuration for ``AsyncApiClient``.

    Args:
        base_url: Base URL of the blog API.
        timeout: Maximum seconds to wait for server responses. Must be > 0.
        health_path: Path of the liveness endpoint, relative to ``base_url``.
        retry: Retry policy used for requests sent with ``retry=True``.

    Example:
        ```pycon
        >>> from pressguard.core.config import ClientConfig
        >>> config = ClientConfig()
        >>> config.base_url
        'http://localhost:5000/api'
        >>> config.health_url
        'http://localhost:5000/api/health'

        ```
    """

    base_url: str = DEFAULT_BASE_URL
    timeout: float | httpx.Timeout = DEFAULT_TIMEOUT
    health_path: str = DEFAULT_HEALTH_PATH
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        validate_timeout(self.timeout)
        self.base_url = self.base_url.rstrip("/")

    @property
    def health_url(self) -> str:
        """Absolute URL of the liveness endpoint."""
        return f"{self.base_url}/{self.health_path.lstrip('/')}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None, **kwargs: Any) -> ClientConfig:
        """Create a configuration whose base URL may come from the
        environment.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.
            **kwargs: Additional ``ClientConfig`` fields.

        Returns:
            The configuration. ``PRESSGUARD_API_URL`` overrides the
            default base URL when set and non-empty.
        """
        environ = os.environ if environ is None else environ
        base_url = environ.get(API_URL_ENV_VAR) or DEFAULT_BASE_URL
        kwargs.setdefault("base_url", base_url)
        return cls(**kwargs)
