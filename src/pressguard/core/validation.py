r"""Parameter validation utilities for retry policies and API clients.

This module provides validation functions to ensure configuration values
meet the required constraints before they reach the retry loop or the
underlying ``httpx`` client.
"""

from __future__ import annotations

__all__ = ["validate_retry_params", "validate_timeout"]

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import httpx


def validate_timeout(timeout: float | httpx.Timeout) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for server responses.
            Must be > 0 if provided as a numeric value.

    Raises:
        ValueError: If timeout is a numeric value <= 0.

    Example:
        ```pycon
        >>> from pressguard.core.validation import validate_timeout
        >>> validate_timeout(15.0)
        >>> validate_timeout(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        ValueError: timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, (int, float)) and timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ValueError(msg)


def validate_retry_params(
    max_retries: int,
    base_delay: float = 0.0,
    max_delay: float | None = None,
    *,
    correlation_id: str,
) -> None:
    """Validate retry parameters.

    Args:
        max_retries: Maximum number of retry attempts. Must be >= 0.
            A value of 0 means only the initial attempt is made.
        base_delay: Base delay in seconds of the linear backoff.
            Must be >= 0.
        max_delay: Optional cap on a single backoff delay.
            Must be > 0 if provided.
        correlation_id: Key of the progress indicator. Must not be empty.

    Raises:
        ValueError: If any parameter is out of range.

    Example:
        ```pycon
        >>> from pressguard.core import validate_retry_params
        >>> validate_retry_params(max_retries=3, correlation_id="network-retry")
        >>> validate_retry_params(max_retries=3, base_delay=0.5, correlation_id="blogs")
        >>> validate_retry_params(max_retries=-1, correlation_id="blogs")  # doctest: +SKIP

        ```
    """
    if max_retries < 0:
        msg = f"max_retries must be >= 0, got {max_retries}"
        raise ValueError(msg)
    if base_delay < 0:
        msg = f"base_delay must be >= 0, got {base_delay}"
        raise ValueError(msg)
    if max_delay is not None and max_delay <= 0:
        msg = f"max_delay must be > 0, got {max_delay}"
        raise ValueError(msg)
    if not correlation_id:
        msg = "correlation_id must be a non-empty string"
        raise ValueError(msg)
