"""
pgrest Errors - Typed failures raised by the request builder.

Every error raised by this package derives from PgrestError and carries an
ErrorKind tag plus the context needed to act on it (field names, the failing
side of a ping, the HTTP status of a remote call). Transport and third-party
signer exceptions are never wrapped, except by Agent.ping().
"""

from enum import Enum
from typing import Iterable, Optional


class ErrorKind(Enum):
    """Enumerates every failure the request builder can report."""

    CONFIG = "config"
    MISSING_DEPENDENCY = "missing_dependency"
    MISSING_URL = "missing_url"
    MISSING_METHOD = "missing_method"
    MISSING_PATH = "missing_path"
    MALFORMED_URL = "malformed_url"
    MISSING_ROLE = "missing_role"
    EXPIRED_CLAIMS = "expired_claims"
    SIGNING = "signing"
    ENCODE = "encode"
    REMOTE = "remote"
    DECODE = "decode"
    PING = "ping"


class PgrestError(Exception):
    """Base exception for pgrest errors."""

    kind: Optional[ErrorKind] = None


# =============================================================================
# Construction
# =============================================================================


class ConfigError(PgrestError):
    """Raised when the configuration is absent or has invalid fields."""

    kind = ErrorKind.CONFIG

    def __init__(self, fields: Iterable[str] = ()):
        self.fields = tuple(fields)
        if self.fields:
            message = "postgrest error: invalid config parameters: \n- " + "\n- ".join(self.fields)
        else:
            message = "postgrest error: missing config parameter"
        super().__init__(message)


class MissingDependencyError(PgrestError):
    """Raised when the Agent is built without a transport or a signer."""

    kind = ErrorKind.MISSING_DEPENDENCY

    def __init__(self, dependency: str):
        self.dependency = dependency
        super().__init__(f"postgrest error: missing {dependency} parameter")


# =============================================================================
# Request shape
# =============================================================================


class MissingURLError(PgrestError):
    kind = ErrorKind.MISSING_URL

    def __init__(self):
        super().__init__("postgrest error: missing request url")


class MissingMethodError(PgrestError):
    kind = ErrorKind.MISSING_METHOD

    def __init__(self):
        super().__init__("postgrest error: missing request method")


class MissingPathError(PgrestError):
    kind = ErrorKind.MISSING_PATH

    def __init__(self):
        super().__init__("postgrest error: table name not specified in request")


class MalformedURLError(PgrestError):
    """Raised when a base or request URL cannot be parsed."""

    kind = ErrorKind.MALFORMED_URL

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"parse {url}: {reason}")


# =============================================================================
# Claims and signing
# =============================================================================


class MissingRoleError(PgrestError):
    kind = ErrorKind.MISSING_ROLE

    def __init__(self):
        super().__init__("postgrest error: missing 'role' in postgrest claims")


class ExpiredClaimsError(PgrestError):
    kind = ErrorKind.EXPIRED_CLAIMS

    def __init__(self, expires_at: int):
        self.expires_at = expires_at
        super().__init__("postgrest error: invalid 'exp' in postgrest claims")


class SigningError(PgrestError):
    """Raised by the stock JWSSigner when a token cannot be signed or verified."""

    kind = ErrorKind.SIGNING


class EncodeError(PgrestError):
    """Raised when a JSON payload cannot be serialized."""

    kind = ErrorKind.ENCODE


# =============================================================================
# Responses
# =============================================================================


class RemoteError(PgrestError):
    """Raised when the service answers with a status outside [200, 300)."""

    kind = ErrorKind.REMOTE

    def __init__(self, method: str, url: str, status_code: int, reason: str):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.reason = reason
        status = f"{status_code} {reason}" if status_code else ""
        super().__init__(f"postgrest error ({method} {url}): {status}")


class DecodeError(PgrestError):
    """
    Raised when a successful response body cannot be decoded into the target.

    The status is reported as 500 to flag a local processing fault rather
    than a remote one.
    """

    kind = ErrorKind.DECODE

    def __init__(self, message: str, status_code: int = 500):
        self.status_code = status_code
        super().__init__(message)


class PingError(PgrestError):
    """Raised when the master or slave health probe fails."""

    kind = ErrorKind.PING

    def __init__(self, side: str, detail: str, status_code: Optional[int] = None):
        self.side = side
        self.status_code = status_code
        super().__init__(f"{side} service error: {detail}")
