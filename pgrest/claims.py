"""
pgrest Claims - The identity assertion carried in every bearer token.

PostgREST switches to the database role named by the 'role' claim, so each
request is signed with claims for either the master or the slave role.
"""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pgrest.config import Config
from pgrest.errors import ExpiredClaimsError, MissingRoleError


@dataclass(frozen=True)
class Claims:
    """
    JWT claims understood by PostgREST.

    Attributes:
        role: Database role the request runs as
        issuer: Value of the 'iss' claim (may be empty)
        expires_at: Unix timestamp of the 'exp' claim
    """

    role: str
    issuer: str = ""
    expires_at: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to JWT claim names, omitting empty values."""
        claims: Dict[str, Any] = {}
        if self.role:
            claims["role"] = self.role
        if self.issuer:
            claims["iss"] = self.issuer
        if self.expires_at:
            claims["exp"] = self.expires_at
        return claims

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Claims":
        return cls(
            role=data.get("role", ""),
            issuer=data.get("iss", ""),
            expires_at=int(data.get("exp", 0)),
        )

    def validate(self, now: Optional[float] = None) -> None:
        """
        Check the claims carry a role and have not expired.

        Args:
            now: Override for the current Unix time.

        Raises:
            MissingRoleError: If role is empty.
            ExpiredClaimsError: If expires_at is not strictly in the future.
        """
        if not self.role:
            raise MissingRoleError()
        current = int(time.time() if now is None else now)
        if self.expires_at <= current:
            raise ExpiredClaimsError(self.expires_at)


def generate_claims(role: str, config: Config, now: Optional[float] = None) -> Claims:
    """Build claims for `role` that expire `config.timeout` seconds from now."""
    issued = int(time.time() if now is None else now)
    return Claims(role=role, issuer=config.issuer, expires_at=issued + config.timeout)
