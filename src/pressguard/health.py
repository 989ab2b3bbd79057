r"""Single-shot reachability check against the API liveness endpoint.

The probe is independent of the retry executor; callers decide whether to
probe before retrying, instead of retrying, or not at all.
"""

from __future__ import annotations

__all__ = ["NO_CACHE_HEADERS", "HealthProbe", "check_reachable"]

import logging

import httpx

from pressguard.core.config import DEFAULT_BASE_URL, DEFAULT_HEALTH_PATH, DEFAULT_TIMEOUT
from pressguard.core.validation import validate_timeout

logger: logging.Logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {"Cache-Control": "no-cache", "Pragma": "no-cache"}


class HealthProbe:
    """Reachability check for a liveness endpoint.

    Args:
        url: URL of the liveness endpoint. Defaults to the health path of
            the default API base URL.
        client: Optional ``httpx.AsyncClient``. A caller-supplied client is
            left open; otherwise a client is created per check and closed.
        timeout: Maximum seconds to wait when the probe creates its own
            client. Must be > 0.

    Example:
        ```pycon
        >>> import asyncio
        >>> from pressguard.health import HealthProbe
        >>> probe = HealthProbe("http://localhost:5000/api/health")
        >>> asyncio.run(probe.check_reachable())  # doctest: +SKIP
        True

        ```
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        validate_timeout(timeout)
        self.url = url if url is not None else f"{DEFAULT_BASE_URL}{DEFAULT_HEALTH_PATH}"
        self._client = client
        self._timeout = timeout

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(url={self.url!r})"

    async def check_reachable(self) -> bool:
        """Send one ``HEAD`` request to the liveness endpoint.

        Returns:
            ``True`` if the endpoint answered with a 2xx status, ``False``
            on any other status, any transport failure or a closed
            client. Never raises for a failed request.
        """
        if self._client is not None:
            return await self._probe(self._client)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._probe(client)

    async def _probe(self, client: httpx.AsyncClient) -> bool:
        if client.is_closed:
            logger.debug(f"Health check of {self.url} skipped: the client is closed")
            return False
        try:
            response = await client.head(self.url, headers=NO_CACHE_HEADERS)
        except (httpx.HTTPError, OSError) as exc:
            logger.debug(f"Health check of {self.url} failed: {type(exc).__name__}: {exc}")
            return False
        if not response.is_success:
            logger.debug(f"Health check of {self.url} returned status {response.status_code}")
            return False
        return True


async def check_reachable(
    url: str | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float | httpx.Timeout = DEFAULT_TIMEOUT,
) -> bool:
    """Check whether the liveness endpoint at ``url`` is reachable.

    Args:
        url: URL of the liveness endpoint.
        client: Optional ``httpx.AsyncClient`` to send the request with.
        timeout: Maximum seconds to wait when no client is supplied.

    Returns:
        ``True`` if the endpoint answered with a 2xx status, otherwise
        ``False``.
    """
    return await HealthProbe(url, client=client, timeout=timeout).check_reachable()
