"""HTTP client for the proxy admin server.

This module provides the AdminClient class that issues readiness probes
and shutdown requests against the local proxy admin endpoint.
"""

from types import TracebackType
from typing import TYPE_CHECKING, Self, final

import httpx

from linkerd_await.exceptions import ShutdownRequestError

from ._models import READY_PATH, SHUTDOWN_PATH, ReadinessConfig

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger


@final
class AdminClient:
    """Client for the proxy admin server.

    Wraps an httpx.AsyncClient bound to the admin URL. The underlying
    connection pool is reused across probes, but every probe is a complete,
    stateless request.

    Attributes:
        config: Configuration for the admin endpoint.
    """

    __slots__ = ("_client", "_logger", "config")

    def __init__(
        self,
        config: ReadinessConfig,
        logger: "FilteringBoundLogger",  # noqa: UP037
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the admin client.

        Args:
            config: Configuration for the admin endpoint.
            logger: Logger for probe diagnostics.
            transport: Optional transport, used by tests to fake the proxy.
        """
        self.config = config
        self._logger = logger
        self._client = httpx.AsyncClient(
            base_url=config.admin_url,
            timeout=config.probe_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def probe_ready(self) -> bool:
        """Issue one readiness probe.

        Any HTTP error, including refused connections, malformed responses
        and per-request timeouts, is treated as not ready.

        Returns:
            True if the proxy answered with 200, False otherwise.
        """
        try:
            response = await self._client.get(READY_PATH)
        except httpx.HTTPError as e:
            self._logger.debug(
                "readiness_probe_failed", url=self.config.ready_url, error=repr(e)
            )
            return False

        if response.status_code != httpx.codes.OK:
            self._logger.debug(
                "readiness_probe_not_ready",
                url=self.config.ready_url,
                status_code=response.status_code,
            )
            return False

        return True

    async def request_shutdown(self) -> None:
        """Ask the proxy to shut down.

        Sends a single POST. The response body is not interpreted.

        Raises:
            ShutdownRequestError: If the request fails or is not successful.
        """
        url = self.config.shutdown_url
        try:
            response = await self._client.post(SHUTDOWN_PATH)
        except httpx.HTTPError as e:
            msg = f"Failed to send shutdown request to {url}: {e}"
            raise ShutdownRequestError(msg, url=url, cause=e) from e

        if not response.is_success:
            msg = f"Shutdown request to {url} returned {response.status_code}"
            raise ShutdownRequestError(
                msg, url=url, status_code=response.status_code
            )

        self._logger.info("proxy_shutdown_requested", url=url)
