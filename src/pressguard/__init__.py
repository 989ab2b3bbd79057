r"""pressguard - Request resilience for the blog platform API client.

This package hardens calls from the blog front-end to its REST backend.
Built on top of the httpx library, it retries transient failures with a
linear backoff, reports retry progress through a pluggable notification
sink, and probes the backend liveness endpoint.

Key Features:
    - Retry executor re-raising the operation's own failure, unchanged
    - Closed fault classification produced once at the transport boundary
    - Linear backoff: base_delay, 2 * base_delay, 3 * base_delay, ...
    - Progress indicators keyed by an explicit correlation id
    - Single-shot health probe that never raises
    - Async API client with bearer token and cache-busting support

Example:
    ```pycon
    >>> import asyncio
    >>> from pressguard import AsyncApiClient, check_reachable, with_retry
    >>> async def main():  # doctest: +SKIP
    ...     if not await check_reachable("http://localhost:5000/api/health"):
    ...         return None
    ...     async with AsyncApiClient() as client:
    ...         return await with_retry(lambda: client.get("/blogs"), max_retries=2)
    ...
    >>> asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "AsyncApiClient",
    "AsyncRetryExecutor",
    "ClientConfig",
    "Fault",
    "FaultKind",
    "HealthProbe",
    "LoggingNotificationSink",
    "NotificationSink",
    "RetryPolicy",
    "ToastRegistry",
    "__version__",
    "check_reachable",
    "describe_fault",
    "handle_network_error",
    "is_retryable",
    "with_retry",
]

from importlib.metadata import PackageNotFoundError, version

from pressguard.client_async import AsyncApiClient
from pressguard.core.config import ClientConfig, RetryPolicy
from pressguard.core.retry_logic import is_retryable
from pressguard.exceptions import Fault, FaultKind
from pressguard.health import HealthProbe, check_reachable
from pressguard.notifications import LoggingNotificationSink, NotificationSink, ToastRegistry
from pressguard.reporting import describe_fault, handle_network_error
from pressguard.retry.executor_async import AsyncRetryExecutor, with_retry

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
