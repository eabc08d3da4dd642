# pgrest/config.py
"""
Connection configuration for the pgrest Agent.

A Config names the two PostgREST endpoints (master for writes, slave for
reads), the database role and JWT secret used against each, the issuer
written into every token, and the token lifetime.

Usage:
    from pgrest.config import Config

    config = Config.from_env()
    config.validate()

Environment Variables:
    PGREST_ISSUER: Value of the 'iss' claim (optional)
    PGREST_MASTER_BASE_URL: Base URL of the write endpoint
    PGREST_MASTER_ROLE: Database role used for writes
    PGREST_MASTER_SECRET: JWT secret of the write endpoint
    PGREST_SLAVE_BASE_URL: Base URL of the read endpoint
    PGREST_SLAVE_ROLE: Database role used for reads
    PGREST_SLAVE_SECRET: JWT secret of the read endpoint
    PGREST_TIMEOUT: Token lifetime in seconds (default: 300)
"""

import logging
import os
from dataclasses import dataclass
from typing import Callable, Final, List, Mapping, Optional, Tuple

from pgrest.errors import ConfigError

logger = logging.getLogger(__name__)

# =============================================================================
# Defaults
# =============================================================================

ENV_PREFIX: Final[str] = "PGREST_"

# Token lifetime used when PGREST_TIMEOUT is not set
DEFAULT_TIMEOUT: Final[int] = 300


@dataclass(frozen=True)
class Config:
    """
    Immutable connection settings for a master/slave PostgREST pair.

    Attributes:
        master_base_url: Base URL of the primary (write) service
        master_role: Role claimed on writes
        master_secret: Secret used to sign write tokens
        slave_base_url: Base URL of the replica (read) service
        slave_role: Role claimed on reads
        slave_secret: Secret used to sign read tokens
        timeout: Token lifetime in seconds
        issuer: Optional 'iss' claim
    """

    master_base_url: str = ""
    master_role: str = ""
    master_secret: str = ""
    slave_base_url: str = ""
    slave_role: str = ""
    slave_secret: str = ""
    timeout: int = DEFAULT_TIMEOUT
    issuer: str = ""

    def invalid_fields(self) -> List[str]:
        """Return the name of every required field that fails its check."""
        return [name for name, check in _CHECKS if not check(self)]

    def validate(self) -> None:
        """
        Ensure every required field is set.

        Raises:
            ConfigError: Naming all invalid fields, not just the first.
        """
        invalid = self.invalid_fields()
        if invalid:
            raise ConfigError(invalid)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Config":
        """
        Build a Config from PGREST_* environment variables.

        The result is not validated; the Agent validates it on construction.
        """
        env = os.environ if environ is None else environ

        def get(name: str) -> str:
            return env.get(f"{ENV_PREFIX}{name}", "").strip()

        return cls(
            issuer=get("ISSUER"),
            master_base_url=get("MASTER_BASE_URL"),
            master_role=get("MASTER_ROLE"),
            master_secret=get("MASTER_SECRET"),
            slave_base_url=get("SLAVE_BASE_URL"),
            slave_role=get("SLAVE_ROLE"),
            slave_secret=get("SLAVE_SECRET"),
            timeout=_parse_timeout(get("TIMEOUT")),
        )


def _parse_timeout(raw: str) -> int:
    if not raw:
        return DEFAULT_TIMEOUT
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {ENV_PREFIX}TIMEOUT value: {raw!r}")
        return 0


# Required fields and their predicates; issuer is optional
_CHECKS: Tuple[Tuple[str, Callable[[Config], bool]], ...] = (
    ("master_base_url", lambda c: bool(c.master_base_url)),
    ("master_role", lambda c: bool(c.master_role)),
    ("master_secret", lambda c: bool(c.master_secret)),
    ("slave_base_url", lambda c: bool(c.slave_base_url)),
    ("slave_role", lambda c: bool(c.slave_role)),
    ("slave_secret", lambda c: bool(c.slave_secret)),
    ("timeout", lambda c: isinstance(c.timeout, int) and c.timeout > 0),
)
