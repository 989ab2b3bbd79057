r"""Retry package.

Public API:
    - AsyncRetryExecutor: Re-invokes an async operation with linear backoff
    - NotificationManager: Progress indicator bookkeeping for one run
    - RetryPolicy: Immutable retry configuration
    - with_retry: Shortcut running an operation with the default policy
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor", "NotificationManager", "RetryPolicy", "with_retry"]

from pressguard.core.config import RetryPolicy
from pressguard.retry.executor_async import AsyncRetryExecutor, with_retry
from pressguard.retry.manager import NotificationManager
