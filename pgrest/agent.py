"""
pgrest Agent - Dual-role authenticated requests against PostgREST.

Reads (GET) go to the slave (replica) service signed with the slave role;
every other method goes to the master (primary) service signed with the
master role. Reads issued right after a write may therefore observe stale
replica data.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import httpx

from pgrest.claims import generate_claims
from pgrest.config import Config
from pgrest.errors import (
    ConfigError,
    EncodeError,
    MissingDependencyError,
    MissingMethodError,
    MissingURLError,
    PingError,
)
from pgrest.response import decode_response, is_success
from pgrest.signer import SignerInterface
from pgrest.transport import TransportInterface
from pgrest.urls import QueryParams, build_url, parse_url

logger = logging.getLogger(__name__)

READ_METHOD = "GET"

MASTER = "master"
SLAVE = "slave"

PREFER_REPRESENTATION = "return=representation"


@dataclass(frozen=True)
class Route:
    """The endpoint and identity selected for one request."""

    name: str
    base_url: str
    role: str
    secret: str


def resolve_route(method: str, config: Config) -> Route:
    """Select the slave identity for reads and the master identity otherwise."""
    if method.upper() == READ_METHOD:
        return Route(SLAVE, config.slave_base_url, config.slave_role, config.slave_secret)
    return Route(MASTER, config.master_base_url, config.master_role, config.master_secret)


def encode_json(payload: Any) -> bytes:
    """Serialize a payload for a JSON request body."""
    try:
        return json.dumps(payload).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(f"postgrest error: cannot encode payload: {e}") from e


class BaseAgent:
    """
    Construction, routing and token minting shared by Agent and AsyncAgent.

    Holds no mutable state after __init__, so a single instance can serve
    concurrent callers.
    """

    def __init__(self, config: Optional[Config], transport: Any, signer: Optional[SignerInterface]):
        if config is None:
            raise ConfigError()
        if transport is None:
            raise MissingDependencyError("transport")
        if signer is None:
            raise MissingDependencyError("signer")
        config.validate()

        self._config = config
        self._transport = transport
        self._signer = signer

    @property
    def config(self) -> Config:
        return self._config

    def issue_token(self, role: str, secret: str) -> str:
        """Mint a token for `role`; signer errors propagate unchanged."""
        claims = generate_claims(role, self._config)
        return self._signer.sign(claims, secret)

    def new_request(self, method: str, url: str, body: Any = None) -> httpx.Request:
        """
        Build a request carrying the bearer token for the method's identity.

        Args:
            method: HTTP method; GET selects the slave identity.
            url: Absolute request URL.
            body: Raw request content, ignored for GET.

        Returns:
            An httpx.Request with the Authorization header set.

        Raises:
            MissingURLError: If url is empty.
            MissingMethodError: If method is empty.
            MalformedURLError: If url cannot be parsed.
        """
        if not url:
            raise MissingURLError()
        if not method:
            raise MissingMethodError()
        parse_url(url)

        route = resolve_route(method, self._config)
        token = self.issue_token(route.role, route.secret)
        logger.debug(f"{method} {url} as {route.name} role {route.role!r}")

        if route.name == SLAVE:
            body = None
        return httpx.Request(
            method, url, content=body, headers={"Authorization": f"Bearer {token}"}
        )

    def _url(self, method: str, table: str, query: Optional[QueryParams] = None) -> str:
        return build_url(resolve_route(method, self._config).base_url, table, query)

    def _json_request(
        self, method: str, table: str, query: Optional[QueryParams], payload: Any
    ) -> httpx.Request:
        content = encode_json(payload)
        request = self.new_request(method, self._url(method, table, query), content)
        request.headers["Content-Type"] = "application/json"
        return request

    def _ping_targets(self) -> Tuple[Tuple[str, str], ...]:
        # master first: its failure is reported when both are down
        return ((MASTER, self._config.master_base_url), (SLAVE, self._config.slave_base_url))


class Agent(BaseAgent):
    """
    Synchronous PostgREST client with master/slave routing.

    Example:
        >>> agent = Agent(Config.from_env(), HTTPXTransport(), JWSSigner())
        >>> status, rows = agent.get_json("users", {"id": "eq.1"}, target=list[dict])
        >>> agent.post_json("users", {"name": "Ada"})
        (201, None)
    """

    def __init__(
        self,
        config: Optional[Config],
        transport: Optional[TransportInterface],
        signer: Optional[SignerInterface],
    ):
        """
        Initialize the Agent.

        Args:
            config: Connection settings; validated here.
            transport: Capability that sends httpx requests.
            signer: Capability that turns claims plus secret into a token.

        Raises:
            ConfigError: If config is missing or has invalid fields.
            MissingDependencyError: If transport or signer is missing.
        """
        super().__init__(config, transport, signer)

    def _send(self, request: httpx.Request) -> httpx.Response:
        return self._transport.send(request)

    def _request(
        self, method: str, table: str, query: Optional[QueryParams] = None, body: Any = None
    ) -> httpx.Response:
        return self._send(self.new_request(method, self._url(method, table, query), body))

    # --- Reads (slave) ---

    def get(self, table: str, query: Optional[QueryParams] = None) -> httpx.Response:
        """
        GET rows from the slave service.

        To paginate, set `limit` and `offset` in the query, e.g.
        {"limit": 10, "offset": 20}.
        """
        return self._request("GET", table, query)

    def get_json(
        self, table: str, query: Optional[QueryParams] = None, target: Any = None
    ) -> Tuple[int, Any]:
        """
        GET rows and decode the body into `target`.

        Returns:
            Tuple of (status_code, decoded value or None)

        Raises:
            RemoteError: If the status is outside [200, 300).
            DecodeError: If the body does not match target.
        """
        return decode_response(self.get(table, query), target)

    # --- Writes (master) ---

    def post(self, table: str, body: Any = None) -> httpx.Response:
        """POST raw content to the master service."""
        return self._request("POST", table, body=body)

    def post_and_return(self, table: str, body: Any = None) -> httpx.Response:
        """POST raw content and ask for the created rows in the response body."""
        request = self.new_request("POST", self._url("POST", table), body)
        request.headers["Prefer"] = PREFER_REPRESENTATION
        return self._send(request)

    def post_json(self, table: str, payload: Any, target: Any = None) -> Tuple[int, Any]:
        """
        POST a JSON payload.

        With a target, the created representation is requested and decoded.

        Returns:
            Tuple of (status_code, decoded value or None)
        """
        request = self._json_request("POST", table, None, payload)
        if target is not None:
            request.headers["Prefer"] = PREFER_REPRESENTATION
        return decode_response(self._send(request), target)

    def patch(
        self, table: str, query: Optional[QueryParams] = None, body: Any = None
    ) -> httpx.Response:
        """PATCH rows matching the query on the master service."""
        return self._request("PATCH", table, query, body)

    def patch_json(self, table: str, query: Optional[QueryParams], payload: Any) -> int:
        """PATCH rows with a JSON payload and return the status code."""
        request = self._json_request("PATCH", table, query, payload)
        status, _ = decode_response(self._send(request))
        return status

    def delete(self, table: str, query: Optional[QueryParams] = None) -> httpx.Response:
        """DELETE rows matching the query on the master service."""
        return self._request("DELETE", table, query)

    def delete_json(self, table: str, query: Optional[QueryParams] = None) -> int:
        """DELETE rows and return the status code."""
        status, _ = decode_response(self.delete(table, query))
        return status

    # --- Health ---

    def ping(self) -> None:
        """
        Probe the master, then the slave, service root.

        Raises:
            PingError: For the first side that fails to answer with a 2xx.
        """
        for side, base_url in self._ping_targets():
            try:
                response = self._send(self.new_request("GET", base_url))
            except Exception as e:
                logger.warning(f"{side} service ping failed: {e}")
                raise PingError(side, str(e)) from e

            try:
                if not is_success(response.status_code):
                    status = f"{response.status_code} {response.reason_phrase}"
                    logger.warning(f"{side} service ping failed: {status}")
                    raise PingError(side, status, status_code=response.status_code)
            finally:
                response.close()

    def close(self) -> None:
        """Close the transport if it supports closing."""
        close = getattr(self._transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> "Agent":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
