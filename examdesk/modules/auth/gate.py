"""
Admin request gate.

Admits a request when its Authorization header carries a bearer token that
the TokenCodec verifies. Every failure is reported the same way; the reason
is logged and never returned to the caller.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from fastapi import HTTPException

from ..errors import TokenError
from .codec import TokenCodec

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class AdminPrincipal:
    """Identity reconstructed from a verified admin token. Never persisted."""
    client_id: Optional[str]
    role: Optional[str]
    claims: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_claims(cls, claims: Dict[str, Any]) -> "AdminPrincipal":
        return cls(
            client_id=claims.get("clientId"),
            role=claims.get("role"),
            claims=dict(claims),
        )

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.claims)


def unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail="Unauthorized",
        headers={"WWW-Authenticate": "Bearer"},
    )


class AdminGate:
    """Side-effect free admission control for admin-only routes."""

    def __init__(self, codec: TokenCodec):
        self.codec = codec

    @staticmethod
    def extract_bearer(authorization: Optional[str]) -> Optional[str]:
        """Return the token from an Authorization header, or None."""
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return None
        token = authorization[len(BEARER_PREFIX):].strip()
        return token or None

    def authenticate(self, authorization: Optional[str]) -> AdminPrincipal:
        """
        Verify the Authorization header.

        Args:
            authorization: Raw Authorization header value

        Returns:
            AdminPrincipal built from the token claims

        Raises:
            HTTPException: 401 for a missing, malformed, forged or expired token
        """
        token = self.extract_bearer(authorization)
        if token is None:
            logger.warning("Admin request rejected: no bearer token")
            raise unauthorized()

        try:
            claims = self.codec.verify(token)
        except TokenError as e:
            logger.warning(
                f"Admin request rejected: {type(e).__name__} for token {token[:8]}..."
            )
            raise unauthorized()

        return AdminPrincipal.from_claims(claims)
