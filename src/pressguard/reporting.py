r"""Map faults to human-readable messages.

The retry executor never renders terminal failures itself; callers that
want to show one use ``handle_network_error``.
"""

from __future__ import annotations

__all__ = [
    "CONNECTION_MESSAGE",
    "RATE_LIMIT_MESSAGE",
    "SERVER_ERROR_MESSAGE",
    "UNEXPECTED_MESSAGE",
    "describe_fault",
    "handle_network_error",
]

import logging
from typing import TYPE_CHECKING

from pressguard.exceptions import Fault, FaultKind, classify_exception

if TYPE_CHECKING:
    from pressguard.notifications import NotificationSink

logger: logging.Logger = logging.getLogger(__name__)

CONNECTION_MESSAGE = "Unable to connect to server. Please check your internet connection."
RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment before trying again."
SERVER_ERROR_MESSAGE = "Server error. Please try again later."
UNEXPECTED_MESSAGE = "An unexpected error occurred. Please try again."


def _status_code(exc: BaseException) -> int | None:
    if isinstance(exc, Fault):
        return exc.status_code
    response = getattr(exc, "response", None)
    return getattr(response, "status_code", None)


def describe_fault(exc: BaseException) -> str:
    """Return the message to show a user for a failed request.

    Args:
        exc: The failure, usually a ``Fault``.

    Returns:
        A connectivity, rate-limiting or server-error message when the
        failure is one of those, otherwise the failure's own message, or a
        generic message if it has none.

    Example:
        ```pycon
        >>> from pressguard.exceptions import Fault, FaultKind
        >>> from pressguard.reporting import describe_fault
        >>> describe_fault(Fault("slow down", kind=FaultKind.CLIENT_ERROR, status_code=429))
        'Too many requests. Please wait a moment before trying again.'
        >>> describe_fault(Fault("Blog not found", kind=FaultKind.CLIENT_ERROR, status_code=404))
        'Blog not found'

        ```
    """
    message = str(exc)
    if classify_exception(exc) in {FaultKind.NO_RESPONSE, FaultKind.NETWORK}:
        return CONNECTION_MESSAGE
    if "Network Error" in message:
        return CONNECTION_MESSAGE
    status_code = _status_code(exc)
    if status_code == 429:
        return RATE_LIMIT_MESSAGE
    if status_code is not None and status_code >= 500:
        return SERVER_ERROR_MESSAGE
    if message:
        return message
    return UNEXPECTED_MESSAGE


def handle_network_error(exc: BaseException, sink: NotificationSink | None = None) -> str:
    """Log a failed request and show its message through ``sink``.

    Args:
        exc: The failure.
        sink: Optional notification sink receiving the message.

    Returns:
        The message shown.
    """
    logger.error(f"Network error: {type(exc).__name__}: {exc}")
    message = describe_fault(exc)
    if sink is not None:
        sink.show_error(message)
    return message
