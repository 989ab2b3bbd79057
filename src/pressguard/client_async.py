r"""Asynchronous client for the blog API.

This module provides an async context manager owning an
``httpx.AsyncClient`` preconfigured for the blog API. It is the transport
boundary of the package: every failed request leaves it as a classified
``Fault``, so callers can hand its coroutines straight to the retry
executor.
"""

from __future__ import annotations

__all__ = ["AsyncApiClient"]

import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from pressguard.core.config import ClientConfig
from pressguard.exceptions import fault_from_exception, fault_from_response
from pressguard.health import HealthProbe
from pressguard.retry.executor_async import AsyncRetryExecutor

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from types import TracebackType
    from typing import Self

    from pressguard.notifications import NotificationSink

logger: logging.Logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Content-Type": "application/json"}


class AsyncApiClient:
    r"""Asynchronous context manager for blog API requests.

    Args:
        config: Client configuration. Defaults to ``ClientConfig.from_env()``.
        sink: Notification sink used while retrying.
        transport: Optional ``httpx`` transport, e.g. ``httpx.MockTransport``.
        sleep: Optional awaitable used to suspend between retry attempts.

    Example:
        ```pycon
        >>> import asyncio
        >>> from pressguard import AsyncApiClient
        >>> async def main():  # doctest: +SKIP
        ...     async with AsyncApiClient() as client:
        ...         if not await client.check_health():
        ...             return None
        ...         return await client.get("/blogs", params={"page": 1}, retry=True)
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        sink: NotificationSink | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] | None = None,
    ) -> None:
        self._config = config if config is not None else ClientConfig.from_env()
        self._transport = transport
        self._executor = AsyncRetryExecutor(self._config.retry, sink=sink, sleep=sleep)
        self._auth_token: str | None = None
        self._client: httpx.AsyncClient | None = None
        self._entered = False

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(base_url={self._config.base_url!r})"

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def auth_token(self) -> str | None:
        """The bearer token sent with every request, if any."""
        return self._auth_token

    async def __aenter__(self) -> Self:
        headers = dict(DEFAULT_HEADERS)
        if self._auth_token is not None:
            headers["Authorization"] = f"Bearer {self._auth_token}"
        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            headers=headers,
            transport=self._transport,
            event_hooks={"request": [_log_request], "response": [_log_response]},
        )
        self._entered = True
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        self._entered = False

    def _ensure_client(self) -> httpx.AsyncClient:
        if not self._entered or self._client is None:
            msg = "AsyncApiClient must be used within an async context manager (async with statement)"
            raise RuntimeError(msg)
        return self._client

    def set_auth_token(self, token: str | None) -> None:
        """Set or clear the bearer token.

        Args:
            token: The token, or None to stop sending ``Authorization``.
        """
        self._auth_token = token
        if self._client is None:
            return
        if token is None:
            self._client.headers.pop("Authorization", None)
        else:
            self._client.headers["Authorization"] = f"Bearer {token}"

    async def request(
        self,
        method: str,
        url: str,
        *,
        retry: bool = False,
        max_retries: int | None = None,
        base_delay: float | None = None,
        silent: bool | None = None,
        correlation_id: str | None = None,
        params: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> Any:
        r"""Send a request and decode its JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            url: Path relative to the API base URL, or an absolute URL.
            retry: If ``True``, transient failures are retried with the
                client's retry policy. Passing any of the overrides below
                also enables retrying.
            max_retries: Override the policy's max_retries for this request.
            base_delay: Override the policy's base_delay for this request.
            silent: Override the policy's silent flag for this request.
            correlation_id: Override the policy's correlation_id for this
                request.
            params: Query parameters. GET requests also receive a ``_t``
                timestamp so caches are bypassed.
            **kwargs: Additional keyword arguments passed to
                ``httpx.AsyncClient.request()``.

        Returns:
            The decoded JSON body, the raw text if the body is not JSON,
            or None if the body is empty.

        Raises:
            RuntimeError: If called outside of a context manager.
            Fault: If the request fails (after retries when enabled).
        """
        client = self._ensure_client()
        method = method.upper()

        async def send() -> Any:
            return await self._send(client, method, url, params, kwargs)

        overrides = (max_retries, base_delay, silent, correlation_id)
        if not retry and all(value is None for value in overrides):
            return await send()
        return await self._executor.run(
            send,
            max_retries=max_retries,
            base_delay=base_delay,
            silent=silent,
            correlation_id=correlation_id,
        )

    async def _send(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        kwargs: dict[str, Any],
    ) -> Any:
        if method == "GET":
            params = {**(params or {}), "_t": int(time.time() * 1000)}
        try:
            response = await client.request(method, url, params=params, **kwargs)
        except httpx.RequestError as exc:
            fault = fault_from_exception(exc, method=method, url=url)
            if isinstance(exc, httpx.TransportError):
                logger.warning(f"Network connection issue: {fault}")
            else:
                logger.error(f"Request error: {fault}")
            raise fault from exc

        if response.is_error:
            if response.status_code == 401:
                self.set_auth_token(None)
            fault = fault_from_response(
                response, method=method, url=url, message=_server_message(response)
            )
            logger.error(f"API error: {fault}")
            raise fault

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    async def get(self, url: str, *, params: dict[str, Any] | None = None, **kwargs: Any) -> Any:
        """Send a GET request. See ``request`` for the parameters."""
        return await self.request("GET", url, params=params, **kwargs)

    async def post(self, url: str, *, json: Any = None, **kwargs: Any) -> Any:
        """Send a POST request with a JSON body."""
        return await self.request("POST", url, json=json, **kwargs)

    async def put(self, url: str, *, json: Any = None, **kwargs: Any) -> Any:
        """Send a PUT request with a JSON body."""
        return await self.request("PUT", url, json=json, **kwargs)

    async def patch(self, url: str, *, json: Any = None, **kwargs: Any) -> Any:
        """Send a PATCH request with a JSON body."""
        return await self.request("PATCH", url, json=json, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Any:
        return await self.request("DELETE", url, **kwargs)

    async def check_health(self) -> bool:
        """Probe the API liveness endpoint with the shared client.

        Returns:
            ``True`` if the API answered the probe with a 2xx status.
        """
        client = self._ensure_client()
        probe = HealthProbe(self._config.health_url, client=client)
        return await probe.check_reachable()


def _server_message(response: httpx.Response) -> str | None:
    # The API reports errors as {"status": "error", "message": "..."}
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and isinstance(data.get("message"), str) and data["message"]:
        return data["message"]
    return None


async def _log_request(request: httpx.Request) -> None:
    logger.debug(f"API request: {request.method} {request.url}")


async def _log_response(response: httpx.Response) -> None:
    logger.debug(f"API response: {response.status_code} {response.request.url}")
