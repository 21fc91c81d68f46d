"""
Recovery ledger.

A RecoveryGrant is short-lived, single-use proof that the requester controls
an email address. It is exchanged exactly once for a reissued access token.
Expired grants are not swept; they are simply inert when next examined.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ..storage import RecordStore

logger = logging.getLogger(__name__)

RECOVERY_TOKEN_PREFIX = "recover_"
RECOVERY_TOKEN_BYTES = 12
DEFAULT_TTL_MINUTES = 60


def generate_recovery_token() -> str:
    return RECOVERY_TOKEN_PREFIX + secrets.token_hex(RECOVERY_TOKEN_BYTES)


@dataclass
class RecoveryGrant:
    """Single-use recovery token bound to an email."""

    recovery_token: str
    email: str
    expires_at: datetime
    used: bool = False

    def is_valid(self, now: datetime) -> bool:
        """Usable iff never consumed and not yet expired."""
        return not self.used and now < self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recoveryToken": self.recovery_token,
            "email": self.email,
            "expiresAt": self.expires_at.isoformat(),
            "used": self.used,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RecoveryGrant":
        expires_at = datetime.fromisoformat(data["expiresAt"])
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return cls(
            recovery_token=data["recoveryToken"],
            email=data["email"],
            expires_at=expires_at,
            used=bool(data.get("used", False)),
        )


class RecoveryLedger:
    """Issues, inspects and consumes recovery grants."""

    def __init__(
        self,
        records: RecordStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize recovery ledger.

        Args:
            records: Record store for the "recovery" namespace
            clock: Returns the current aware datetime (defaults to UTC wall clock)
        """
        self.records = records
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = asyncio.Lock()

    async def _load(self, token: str) -> Optional[RecoveryGrant]:
        if not token or not token.startswith(RECOVERY_TOKEN_PREFIX):
            return None
        data = await self.records.get(token)
        return RecoveryGrant.from_dict(data) if data else None

    async def issue(self, email: str, ttl_minutes: int = DEFAULT_TTL_MINUTES) -> RecoveryGrant:
        """
        Issue a new grant for an email.

        Does not check that the email belongs to a customer; the reset step does.
        A ttl_minutes of 0 yields a grant that is already expired.
        """
        if ttl_minutes < 0:
            raise ValueError("ttl_minutes must not be negative")

        grant = RecoveryGrant(
            recovery_token=generate_recovery_token(),
            email=email,
            expires_at=self._clock() + timedelta(minutes=ttl_minutes),
        )
        await self.records.put(grant.recovery_token, grant.to_dict())
        logger.info(f"Issued recovery token {grant.recovery_token[:12]}... (ttl {ttl_minutes}m)")
        return grant

    async def peek(self, token: str) -> Optional[RecoveryGrant]:
        """Return the grant if it is still usable, without consuming it."""
        grant = await self._load(token)
        if grant is None or not grant.is_valid(self._clock()):
            return None
        return grant

    async def consume(self, token: str) -> Optional[RecoveryGrant]:
        """
        Consume a grant.

        Returns:
            The consumed grant (used=True), or None if it is unknown, already
            used or expired
        """
        async with self._lock:
            grant = await self._load(token)
            if grant is None:
                return None
            if not grant.is_valid(self._clock()):
                logger.info(
                    f"Recovery token {token[:12]}... rejected "
                    f"({'used' if grant.used else 'expired'})"
                )
                return None

            grant.used = True
            await self.records.put(grant.recovery_token, grant.to_dict())

        logger.info(f"Consumed recovery token {token[:12]}...")
        return grant

    async def purge_inert(self) -> int:
        """
        Delete grants that are used or expired.

        Never needed for correctness; inert grants have no effect.

        Returns:
            Number of grants deleted
        """
        now = self._clock()
        purged = 0
        async with self._lock:
            for data in await self.records.all():
                grant = RecoveryGrant.from_dict(data)
                if not grant.is_valid(now):
                    if await self.records.delete(grant.recovery_token):
                        purged += 1
        logger.info(f"Purged {purged} inert recovery tokens")
        return purged
