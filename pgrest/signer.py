"""
pgrest Signer - Signs PostgREST claims into bearer tokens (JWS/JWK).

The Agent only depends on SignerInterface, so any algorithm or library can
be plugged in. JWSSigner is the stock implementation: HS256 over a shared
secret, the scheme PostgREST's `jwt-secret` setting expects.
"""

import json
from abc import ABC, abstractmethod

from jwcrypto import jwk, jws
from jwcrypto.common import JWException, base64url_encode, json_encode

from pgrest.claims import Claims
from pgrest.errors import SigningError

# PostgREST refuses a jwt-secret shorter than this
MIN_SECRET_BYTES = 32


class SignerInterface(ABC):
    """Abstract signing capability: claims plus secret in, token out."""

    @abstractmethod
    def sign(self, claims: Claims, secret: str) -> str:
        """Return the signed token for `claims`, raising on failure."""
        pass


class JWSSigner(SignerInterface):
    """
    Signs claims as compact HS256 JWS tokens.

    Example:
        >>> signer = JWSSigner()
        >>> token = signer.sign(Claims(role="web_anon", expires_at=...), secret)
        >>> signer.verify(token, secret).role
        'web_anon'
    """

    ALGORITHM = "HS256"

    def sign(self, claims: Claims, secret: str) -> str:
        """
        Sign claims with the given shared secret.

        Args:
            claims: The PostgREST claims to embed.
            secret: The HMAC secret configured on the PostgREST server.

        Returns:
            A JWS compact serialized token string.

        Raises:
            SigningError: If the secret is empty, shorter than
                MIN_SECRET_BYTES, or signing fails.
        """
        key = self._key(secret)

        token = jws.JWS(json.dumps(claims.to_dict(), sort_keys=True, separators=(",", ":")))
        protected_header = {"alg": self.ALGORITHM, "typ": "JWT"}

        try:
            token.add_signature(key, None, json_encode(protected_header), None)
            return token.serialize(compact=True)
        except JWException as e:
            raise SigningError(f"Failed to sign claims: {e}") from e

    def verify(self, token: str, secret: str) -> Claims:
        """
        Check a token's signature and return its claims.

        Expiry is not checked here; call Claims.validate() on the result.

        Raises:
            SigningError: If the token is malformed or the signature is wrong.
        """
        key = self._key(secret)

        try:
            jws_token = jws.JWS()
            jws_token.deserialize(token)
            jws_token.verify(key, alg=self.ALGORITHM)
            payload = jws_token.payload
        except JWException as e:
            raise SigningError(f"Invalid token: {e}") from e

        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")
        return Claims.from_dict(json.loads(payload))

    @staticmethod
    def _key(secret: str) -> jwk.JWK:
        if not secret:
            raise SigningError("Signing requires a non-empty secret")
        raw = secret.encode("utf-8")
        if len(raw) < MIN_SECRET_BYTES:
            raise SigningError(f"HS256 secret must be at least {MIN_SECRET_BYTES} bytes")
        return jwk.JWK(kty="oct", k=base64url_encode(raw))
