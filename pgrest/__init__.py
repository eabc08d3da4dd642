"""
pgrest - Dual-role authenticated client for PostgREST.

Routes reads to a replica (slave) service and writes to a primary (master)
service, signing each request with a JWT for the matching database role.
"""

__version__ = "1.0.0"

from .agent import Agent, Route, resolve_route
from .async_agent import AsyncAgent
from .claims import Claims, generate_claims
from .config import Config
from .errors import (
    ConfigError,
    DecodeError,
    EncodeError,
    ErrorKind,
    ExpiredClaimsError,
    MalformedURLError,
    MissingDependencyError,
    MissingMethodError,
    MissingPathError,
    MissingRoleError,
    MissingURLError,
    PgrestError,
    PingError,
    RemoteError,
    SigningError,
)
from .response import decode_response, is_success
from .signer import JWSSigner, SignerInterface
from .transport import (
    AsyncHTTPXTransport,
    AsyncTransportInterface,
    HTTPXTransport,
    TransportInterface,
)
from .urls import build_url, encode_query


__all__ = [
    "__version__",
    # Core
    "Agent",
    "AsyncAgent",
    "Route",
    "resolve_route",
    "Config",
    # Claims and signing
    "Claims",
    "generate_claims",
    "SignerInterface",
    "JWSSigner",
    # Transport
    "TransportInterface",
    "AsyncTransportInterface",
    "HTTPXTransport",
    "AsyncHTTPXTransport",
    # Helpers
    "build_url",
    "encode_query",
    "decode_response",
    "is_success",
    # Errors
    "ErrorKind",
    "PgrestError",
    "ConfigError",
    "MissingDependencyError",
    "MissingURLError",
    "MissingMethodError",
    "MissingPathError",
    "MalformedURLError",
    "MissingRoleError",
    "ExpiredClaimsError",
    "SigningError",
    "EncodeError",
    "RemoteError",
    "DecodeError",
    "PingError",
]
