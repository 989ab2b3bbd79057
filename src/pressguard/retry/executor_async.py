r"""Asynchronous retry executor.

This module provides the AsyncRetryExecutor class that re-invokes an
asynchronous operation on transient failures, waiting a linearly growing
delay between attempts, and the ``with_retry`` shortcut.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor", "with_retry"]

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pressguard.core.config import RetryPolicy
from pressguard.exceptions import classify_exception
from pressguard.notifications import LoggingNotificationSink
from pressguard.retry.manager import NotificationManager
from pressguard.utils.structured_logging import bind_correlation_id, log_structured

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from pressguard.notifications import NotificationSink

logger: logging.Logger = logging.getLogger(__name__)

T = TypeVar("T")


class AsyncRetryExecutor:
    """Runs asynchronous operations with automatic retry logic.

    Attempts are strictly sequential. After a failed attempt ``i``
    (0-indexed) the executor either re-raises the failure, when the retry
    budget is exhausted or the policy says it is not retryable, or waits
    ``base_delay * (i + 1)`` seconds and tries again. The failure raised to
    the caller is always the operation's own exception, never a wrapper.

    Args:
        policy: Default retry policy. Per-call overrides are merged over it.
        sink: Notification sink for retry progress. Defaults to a
            ``LoggingNotificationSink``.
        sleep: Awaitable used to suspend between attempts. Defaults to
            ``asyncio.sleep``; tests inject a fake to control time.

    Attributes:
        policy: The default retry policy.
        sink: The notification sink.

    Example:
        ```pycon
        >>> import asyncio
        >>> import httpx
        >>> from pressguard.retry import AsyncRetryExecutor
        >>> async def main():
        ...     executor = AsyncRetryExecutor()
        ...     async with httpx.AsyncClient() as client:
        ...         async def load_blogs():
        ...             response = await client.get("http://localhost:5000/api/blogs")
        ...             response.raise_for_status()
        ...             return response.json()
        ...
        ...         return await executor.run(load_blogs, max_retries=2, base_delay=0.5)
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sink: NotificationSink | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self.policy = policy if policy is not None else RetryPolicy()
        self.sink = sink if sink is not None else LoggingNotificationSink()
        self._sleep = sleep if sleep is not None else asyncio.sleep

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(policy={self.policy}, sink={self.sink})"

    async def run(self, operation: Callable[[], Awaitable[T]], **overrides: Any) -> T:
        """Invoke ``operation`` until it succeeds or must give up.

        Args:
            operation: Zero-argument coroutine function. It must be safe to
                invoke more than once.
            **overrides: ``RetryPolicy`` fields overriding the executor's
                policy for this call only (``max_retries``, ``base_delay``,
                ``silent``, ``retry_if``, ``correlation_id``, ``max_delay``).

        Returns:
            The value returned by the first successful invocation.

        Raises:
            Exception: The exception of the last invocation, unchanged, when
                it is not retryable or the retry budget is exhausted.
            ValueError: If an override is out of range.
        """
        policy = self.policy.merge(**overrides)
        backoff = policy.backoff
        notifications = NotificationManager(self.sink, policy)

        with bind_correlation_id(policy.correlation_id):
            try:
                attempt = 0
                while True:
                    try:
                        return await operation()
                    except Exception as exc:
                        if attempt == policy.max_retries:
                            logger.debug(
                                f"Giving up after {attempt + 1} attempts: "
                                f"{type(exc).__name__}: {exc}"
                            )
                            raise
                        if not policy.retry_if(exc):
                            logger.debug(
                                f"Not retrying {type(exc).__name__} on attempt "
                                f"{attempt + 1}/{policy.total_attempts}: {exc}"
                            )
                            raise

                        notifications.on_retry(attempt)
                        delay = backoff.calculate(attempt)
                        log_structured(
                            logger,
                            logging.DEBUG,
                            f"Attempt {attempt + 1}/{policy.total_attempts} failed, "
                            f"retrying in {delay:.2f}s",
                            attempt=attempt + 1,
                            max_retries=policy.max_retries,
                            delay=delay,
                            fault_kind=classify_exception(exc).value,
                        )
                        await self._sleep(delay)
                        attempt += 1
            finally:
                notifications.finish()


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    sink: NotificationSink | None = None,
    sleep: Callable[[float], Awaitable[Any]] | None = None,
    **overrides: Any,
) -> T:
    """Run an operation with the default retry policy.

    Args:
        operation: Zero-argument coroutine function.
        sink: Optional notification sink.
        sleep: Optional awaitable used to suspend between attempts.
        **overrides: ``RetryPolicy`` fields to override.

    Returns:
        The value returned by the first successful invocation.

    Example:
        ```pycon
        >>> import asyncio
        >>> from pressguard import with_retry
        >>> async def ping():
        ...     return "pong"
        ...
        >>> asyncio.run(with_retry(ping))
        'pong'

        ```
    """
    executor = AsyncRetryExecutor(sink=sink, sleep=sleep)
    return await executor.run(operation, **overrides)
