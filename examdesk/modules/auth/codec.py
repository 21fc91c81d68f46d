"""
Signed bearer tokens for administrators.

Tokens are compact HS256 JWTs: base64url(header).base64url(body).base64url(sig).
Verification is stateless; the token itself is the admin session. Expiry is
evaluated against an injected clock so callers and tests control "now".
"""

import logging
from datetime import UTC, datetime
from typing import Any, Callable, Dict, Optional

import jwt

from ..errors import InvalidSignature, MalformedToken, TokenExpired

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ADMIN_CLAIMS = {"clientId": "admin", "role": "admin"}

# Only the signature is checked by PyJWT; exp is checked against our own clock
# and the other registered claims are returned as opaque payload.
_DECODE_OPTIONS = {
    "verify_signature": True,
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
    "verify_aud": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
}


def utc_now() -> datetime:
    return datetime.now(UTC)


class TokenCodec:
    """Issues and verifies signed, self-contained admin tokens."""

    def __init__(self, secret: str, clock: Optional[Callable[[], datetime]] = None):
        """
        Initialize codec.

        Args:
            secret: Process-wide HMAC secret. Rotating it invalidates every issued token.
            clock: Returns the current aware datetime (defaults to UTC wall clock)
        """
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._clock = clock or utc_now

    def _now(self) -> int:
        return int(self._clock().timestamp())

    def issue(self, claims: Dict[str, Any], ttl_seconds: Optional[int] = None) -> str:
        """
        Issue a signed token.

        Args:
            claims: Arbitrary claim payload
            ttl_seconds: Lifetime in seconds. None means the token never expires.

        Returns:
            Token string (header.body.signature)

        Raises:
            ValueError: Negative ttl_seconds, or claims PyJWT cannot encode
                (values that are not JSON-serializable, a non-string iss)
        """
        if ttl_seconds is not None and ttl_seconds < 0:
            raise ValueError("ttl_seconds must not be negative")

        issued_at = self._now()
        body = {**claims, "iat": issued_at}
        if ttl_seconds is not None:
            body["exp"] = issued_at + ttl_seconds

        try:
            return jwt.encode(body, self._secret, algorithm=ALGORITHM)
        except TypeError as e:
            # Non JSON-serializable claim, or a non-string iss
            raise ValueError(f"Unsupported claim payload: {e}") from e

    def issue_admin_token(self, ttl_days: Optional[int] = None) -> str:
        """Issue the operator-facing admin token (no expiry unless ttl_days is given)."""
        ttl_seconds = ttl_days * 24 * 60 * 60 if ttl_days is not None else None
        return self.issue(dict(ADMIN_CLAIMS), ttl_seconds)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify a token and return its claims.

        Args:
            token: Token string, without any "Bearer " prefix

        Returns:
            Decoded claims

        Raises:
            MalformedToken: Not three segments, or undecodable header/body
            InvalidSignature: Signature does not match the secret
            TokenExpired: exp claim is earlier than now
        """
        if not isinstance(token, str) or token.count(".") != 2:
            raise MalformedToken("Token must have exactly three segments")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options=_DECODE_OPTIONS,
            )
        except (jwt.InvalidSignatureError, jwt.InvalidAlgorithmError) as e:
            raise InvalidSignature(str(e)) from e
        except jwt.InvalidTokenError as e:
            raise MalformedToken(str(e)) from e

        exp = claims.get("exp")
        if exp is not None:
            if isinstance(exp, bool) or not isinstance(exp, (int, float)):
                raise MalformedToken("exp claim must be a number")
            if exp < self._now():
                raise TokenExpired("Token has expired")

        return claims
