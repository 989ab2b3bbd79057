r"""Default retry classification shared by all retry executors."""

from __future__ import annotations

__all__ = ["RETRYABLE_KINDS", "is_retryable"]

from pressguard.exceptions import FaultKind, classify_exception

# Transient failures: no answer at all, explicit network failure, or 5xx
RETRYABLE_KINDS = frozenset({FaultKind.NO_RESPONSE, FaultKind.NETWORK, FaultKind.SERVER_ERROR})


def is_retryable(exc: BaseException) -> bool:
    """Indicate whether a failure should be retried.

    Client errors (4xx, including 429) and unclassified exceptions are
    terminal and surface immediately without consuming retry budget.

    Args:
        exc: The exception raised by the wrapped operation.

    Returns:
        ``True`` if the failure is transient, otherwise ``False``.

    Example:
        ```pycon
        >>> import httpx
        >>> from pressguard.core.retry_logic import is_retryable
        >>> from pressguard.exceptions import Fault, FaultKind
        >>> is_retryable(Fault("boom", kind=FaultKind.SERVER_ERROR, status_code=503))
        True
        >>> is_retryable(Fault("bad", kind=FaultKind.CLIENT_ERROR, status_code=400))
        False
        >>> is_retryable(httpx.ConnectError("refused"))
        True

        ```
    """
    return classify_exception(exc) in RETRYABLE_KINDS
