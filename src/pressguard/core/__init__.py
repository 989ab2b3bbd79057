r"""Core shared logic: configuration, validation and retry
classification."""

from __future__ import annotations

__all__ = [
    "DEFAULT_BASE_DELAY",
    "DEFAULT_BASE_URL",
    "DEFAULT_CORRELATION_ID",
    "DEFAULT_HEALTH_PATH",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "ClientConfig",
    "RetryPolicy",
    "is_retryable",
    "validate_retry_params",
    "validate_timeout",
]

from pressguard.core.config import (
    DEFAULT_BASE_DELAY,
    DEFAULT_BASE_URL,
    DEFAULT_CORRELATION_ID,
    DEFAULT_HEALTH_PATH,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    ClientConfig,
    RetryPolicy,
)
from pressguard.core.retry_logic import is_retryable
from pressguard.core.validation import validate_retry_params, validate_timeout
