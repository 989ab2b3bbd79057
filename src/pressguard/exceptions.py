r"""Fault types raised by requests against the blog API.

Every failure that crosses the transport boundary is turned into a
``Fault`` exactly once, tagged with a closed ``FaultKind``
classification. Retry decisions and user-facing messages are then
computed from that tag instead of probing ad hoc exception fields.
"""

from __future__ import annotations

__all__ = [
    "Fault",
    "FaultKind",
    "classify_exception",
    "fault_from_exception",
    "fault_from_response",
    "kind_for_status",
]

import enum
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from typing import Any


class FaultKind(enum.Enum):
    """Closed classification of request failures.

    Attributes:
        NO_RESPONSE: The request never produced a response (timeout,
            protocol error, dropped connection).
        NETWORK: An explicit network-level failure (DNS, refused
            connection, unreachable host).
        SERVER_ERROR: The server answered with a 5xx status.
        CLIENT_ERROR: The server answered with a 4xx status.
        OTHER: Anything else, e.g. a decoding error in the caller's code.
    """

    NO_RESPONSE = "no-response"
    NETWORK = "network"
    SERVER_ERROR = "server-error"
    CLIENT_ERROR = "client-error"
    OTHER = "other"


class Fault(Exception):
    """Exception describing why a request did not complete successfully.

    Args:
        message: Human-readable description of the failure.
        kind: The classification of the failure.
        status_code: The HTTP status code, if a response was received.
        method: The HTTP method of the failed request.
        url: The URL of the failed request.
        response: The ``httpx.Response`` that triggered the fault, if any.
        cause: The underlying exception, if any.

    Example:
        ```pycon
        >>> from pressguard.exceptions import Fault, FaultKind
        >>> fault = Fault("GET /blogs failed with status 503", kind=FaultKind.SERVER_ERROR, status_code=503)
        >>> fault.kind
        <FaultKind.SERVER_ERROR: 'server-error'>
        >>> fault.has_response
        True

        ```
    """

    def __init__(
        self,
        message: str,
        *,
        kind: FaultKind = FaultKind.OTHER,
        status_code: int | None = None,
        method: str | None = None,
        url: str | None = None,
        response: httpx.Response | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.status_code = status_code
        self.method = method
        self.url = url
        self.response = response
        self.cause = cause

    @property
    def has_response(self) -> bool:
        """Indicate whether the server answered at all."""
        return self.status_code is not None

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__qualname__}(message={self.message!r}, kind={self.kind}, "
            f"status_code={self.status_code})"
        )


def kind_for_status(status_code: int) -> FaultKind:
    """Return the fault classification of an HTTP status code.

    Args:
        status_code: The HTTP status code.

    Returns:
        ``SERVER_ERROR`` for 5xx, ``CLIENT_ERROR`` for 4xx and ``OTHER``
        for anything else.

    Example:
        ```pycon
        >>> from pressguard.exceptions import kind_for_status
        >>> kind_for_status(503)
        <FaultKind.SERVER_ERROR: 'server-error'>
        >>> kind_for_status(404)
        <FaultKind.CLIENT_ERROR: 'client-error'>

        ```
    """
    if status_code >= 500:
        return FaultKind.SERVER_ERROR
    if status_code >= 400:
        return FaultKind.CLIENT_ERROR
    return FaultKind.OTHER


def _describe_request(method: str | None, url: str | None) -> str:
    if method and url:
        return f"{method} request to {url}"
    if url:
        return f"request to {url}"
    return "request"


def fault_from_response(
    response: httpx.Response,
    method: str | None = None,
    url: str | None = None,
    message: str | None = None,
) -> Fault:
    """Create a fault from an unsuccessful HTTP response.

    Args:
        response: The unsuccessful response.
        method: The HTTP method. Defaults to the method of the response's request.
        url: The URL. Defaults to the URL of the response's request.
        message: Optional message, e.g. one reported by the server. Defaults
            to a description of the request and its status.

    Returns:
        A fault tagged from the response status code.
    """
    request = _request_of(response)
    if request is not None:
        method = method or request.method
        url = url or str(request.url)
    if message is None:
        message = f"{_describe_request(method, url)} failed with status {response.status_code}"
    return Fault(
        message,
        kind=kind_for_status(response.status_code),
        status_code=response.status_code,
        method=method,
        url=url,
        response=response,
    )


def fault_from_exception(
    exc: BaseException, method: str | None = None, url: str | None = None
) -> Fault:
    """Create a fault from an exception raised while sending a request.

    ``httpx.HTTPStatusError`` becomes a status fault,
    ``httpx.NetworkError`` a ``NETWORK`` fault, any other
    ``httpx.TransportError`` a ``NO_RESPONSE`` fault and everything else
    an ``OTHER`` fault. An existing fault is returned unchanged.

    Args:
        exc: The exception to convert.
        method: The HTTP method of the request.
        url: The URL of the request.

    Returns:
        The corresponding fault, with ``exc`` recorded as its cause.
    """
    if isinstance(exc, Fault):
        return exc
    if isinstance(exc, httpx.HTTPStatusError):
        fault = fault_from_response(exc.response, method=method, url=url)
        fault.cause = exc
        return fault
    if isinstance(exc, httpx.TimeoutException):
        return Fault(
            f"{_describe_request(method, url)} timed out: {exc}",
            kind=FaultKind.NO_RESPONSE,
            method=method,
            url=url,
            cause=exc,
        )
    if isinstance(exc, httpx.NetworkError):
        kind = FaultKind.NETWORK
    elif isinstance(exc, httpx.TransportError):
        kind = FaultKind.NO_RESPONSE
    else:
        kind = FaultKind.OTHER
    return Fault(
        f"{_describe_request(method, url)} failed: {exc}",
        kind=kind,
        method=method,
        url=url,
        cause=exc,
    )


def classify_exception(exc: BaseException) -> FaultKind:
    """Return the fault classification of any exception.

    Args:
        exc: The exception to classify.

    Returns:
        The ``kind`` of a ``Fault``, or the kind ``fault_from_exception``
        would assign to any other exception.

    Example:
        ```pycon
        >>> import httpx
        >>> from pressguard.exceptions import classify_exception
        >>> classify_exception(httpx.ConnectError("refused"))
        <FaultKind.NETWORK: 'network'>
        >>> classify_exception(ValueError("boom"))
        <FaultKind.OTHER: 'other'>

        ```
    """
    if isinstance(exc, Fault):
        return exc.kind
    if isinstance(exc, httpx.HTTPStatusError):
        return kind_for_status(exc.response.status_code)
    if isinstance(exc, httpx.TimeoutException):
        return FaultKind.NO_RESPONSE
    if isinstance(exc, httpx.NetworkError):
        return FaultKind.NETWORK
    if isinstance(exc, httpx.TransportError):
        return FaultKind.NO_RESPONSE
    return FaultKind.OTHER


def _request_of(response: httpx.Response) -> Any:
    # ``Response.request`` raises when the response was built without one.
    try:
        return response.request
    except RuntimeError:
        return None
