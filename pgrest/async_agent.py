"""
pgrest Async Agent - asyncio flavour of the dual-role Agent.

Routing, token minting and response handling match pgrest.agent.Agent
exactly; only the transport call and body reads are awaited.
"""

import inspect
import logging
from typing import Any, Optional, Tuple

import httpx

from pgrest.agent import PREFER_REPRESENTATION, BaseAgent
from pgrest.config import Config
from pgrest.errors import PingError
from pgrest.response import adecode_response, is_success
from pgrest.signer import SignerInterface
from pgrest.transport import AsyncTransportInterface
from pgrest.urls import QueryParams

logger = logging.getLogger(__name__)


class AsyncAgent(BaseAgent):
    """
    Asynchronous PostgREST client with master/slave routing.

    Example:
        >>> async with AsyncAgent(config, AsyncHTTPXTransport(), JWSSigner()) as agent:
        ...     status, rows = await agent.get_json("users", target=list[dict])
    """

    def __init__(
        self,
        config: Optional[Config],
        transport: Optional[AsyncTransportInterface],
        signer: Optional[SignerInterface],
    ):
        super().__init__(config, transport, signer)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        return await self._transport.send(request)

    async def _request(
        self, method: str, table: str, query: Optional[QueryParams] = None, body: Any = None
    ) -> httpx.Response:
        return await self._send(self.new_request(method, self._url(method, table, query), body))

    async def get(self, table: str, query: Optional[QueryParams] = None) -> httpx.Response:
        return await self._request("GET", table, query)

    async def get_json(
        self, table: str, query: Optional[QueryParams] = None, target: Any = None
    ) -> Tuple[int, Any]:
        return await adecode_response(await self.get(table, query), target)

    async def post(self, table: str, body: Any = None) -> httpx.Response:
        return await self._request("POST", table, body=body)

    async def post_and_return(self, table: str, body: Any = None) -> httpx.Response:
        request = self.new_request("POST", self._url("POST", table), body)
        request.headers["Prefer"] = PREFER_REPRESENTATION
        return await self._send(request)

    async def post_json(self, table: str, payload: Any, target: Any = None) -> Tuple[int, Any]:
        request = self._json_request("POST", table, None, payload)
        if target is not None:
            request.headers["Prefer"] = PREFER_REPRESENTATION
        return await adecode_response(await self._send(request), target)

    async def patch(
        self, table: str, query: Optional[QueryParams] = None, body: Any = None
    ) -> httpx.Response:
        return await self._request("PATCH", table, query, body)

    async def patch_json(self, table: str, query: Optional[QueryParams], payload: Any) -> int:
        request = self._json_request("PATCH", table, query, payload)
        status, _ = await adecode_response(await self._send(request))
        return status

    async def delete(self, table: str, query: Optional[QueryParams] = None) -> httpx.Response:
        return await self._request("DELETE", table, query)

    async def delete_json(self, table: str, query: Optional[QueryParams] = None) -> int:
        status, _ = await adecode_response(await self.delete(table, query))
        return status

    async def ping(self) -> None:
        """Probe the master, then the slave; raise PingError on the first failure."""
        for side, base_url in self._ping_targets():
            try:
                response = await self._send(self.new_request("GET", base_url))
            except Exception as e:
                logger.warning(f"{side} service ping failed: {e}")
                raise PingError(side, str(e)) from e

            try:
                if not is_success(response.status_code):
                    status = f"{response.status_code} {response.reason_phrase}"
                    logger.warning(f"{side} service ping failed: {status}")
                    raise PingError(side, status, status_code=response.status_code)
            finally:
                await response.aclose()

    async def close(self) -> None:
        close = getattr(self._transport, "close", None)
        if close is None:
            return
        result = close()
        if inspect.isawaitable(result):
            await result

    async def __aenter__(self) -> "AsyncAgent":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
