"""
pgrest Transport - Pluggable "send a request, get a response" capability.

The Agent never retries, pools or enforces timeouts itself; all of that is
delegated to the transport. Supply a custom TransportInterface (for example
one with retry or circuit breaking) to change that behavior.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

import httpx


DEFAULT_TIMEOUT = 10.0  # seconds


class TransportInterface(ABC):
    """Abstract synchronous transport."""

    @abstractmethod
    def send(self, request: httpx.Request) -> httpx.Response:
        """Send the request, raising the transport's own errors on failure."""
        pass


class AsyncTransportInterface(ABC):
    """Abstract asynchronous transport."""

    @abstractmethod
    async def send(self, request: httpx.Request) -> httpx.Response:
        """Send the request, raising the transport's own errors on failure."""
        pass


class HTTPXTransport(TransportInterface):
    """
    Transport backed by an httpx.Client.

    Example:
        >>> with HTTPXTransport(timeout=5.0) as transport:
        ...     response = transport.send(httpx.Request("GET", "http://localhost:3000/"))
    """

    def __init__(self, client: Optional[httpx.Client] = None, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the transport.

        Args:
            client: Pre-configured client (pooling limits, proxies, mounts).
                   A new client is created when omitted.
            timeout: Request timeout for the default client in seconds.
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(timeout))

    def send(self, request: httpx.Request) -> httpx.Response:
        return self._client.send(request)

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HTTPXTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class AsyncHTTPXTransport(AsyncTransportInterface):
    """Transport backed by an httpx.AsyncClient."""

    def __init__(
        self, client: Optional[httpx.AsyncClient] = None, timeout: float = DEFAULT_TIMEOUT
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def send(self, request: httpx.Request) -> httpx.Response:
        return await self._client.send(request)

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPXTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
