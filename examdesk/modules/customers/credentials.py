"""
Customer credential store.

A Credential binds a customer email to the opaque access token the customer
logs in with. The set of credentials lives in one record store namespace and
every lookup filters that same set, so there are no secondary indexes to drift.
"""

import asyncio
import logging
import secrets
import uuid
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ..errors import DuplicateEmail
from ..storage import RecordStore

logger = logging.getLogger(__name__)

ACCESS_TOKEN_PREFIX = "cust_"
ACCESS_TOKEN_BYTES = 12


class CredentialStatus(str, Enum):
    """Lifecycle state of a credential."""

    ACTIVE = "active"
    REVOKED = "revoked"


def generate_access_token() -> str:
    """Fixed-width access token from a cryptographically strong source."""
    return ACCESS_TOKEN_PREFIX + secrets.token_hex(ACCESS_TOKEN_BYTES)


def generate_customer_id() -> str:
    return f"cust-{uuid.uuid4().hex[:12]}"


@dataclass
class Credential:
    """Customer identity record."""

    id: str
    email: str
    token: str
    status: CredentialStatus
    created_at: str
    updated_at: Optional[str] = None
    last_login: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire/storage form (camelCase keys)."""
        return {
            "id": self.id,
            "email": self.email,
            "token": self.token,
            "status": self.status.value,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "lastLogin": self.last_login,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Credential":
        return cls(
            id=data["id"],
            email=data["email"],
            token=data["token"],
            status=CredentialStatus(data.get("status", CredentialStatus.ACTIVE.value)),
            created_at=data["createdAt"],
            updated_at=data.get("updatedAt"),
            last_login=data.get("lastLogin"),
        )


class CredentialStore:
    """
    Owns the set of customer credentials.

    Mutations hold a single asyncio.Lock across their read-check-write so two
    overlapping requests cannot both pass the email uniqueness check.
    """

    def __init__(
        self,
        records: RecordStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize credential store.

        Args:
            records: Record store for the "customers" namespace
            clock: Returns the current aware datetime (defaults to UTC wall clock)
        """
        self.records = records
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = asyncio.Lock()

    def _timestamp(self) -> str:
        return self._clock().isoformat()

    async def list_all(self) -> List[Credential]:
        return [Credential.from_dict(r) for r in await self.records.all()]

    async def _find(self, predicate: Callable[[Credential], bool]) -> Optional[Credential]:
        for credential in await self.list_all():
            if predicate(credential):
                return credential
        return None

    async def get_by_id(self, customer_id: str) -> Optional[Credential]:
        data = await self.records.get(customer_id)
        return Credential.from_dict(data) if data else None

    async def get_by_email(self, email: str) -> Optional[Credential]:
        return await self._find(lambda c: c.email == email)

    async def get_by_token(self, token: str) -> Optional[Credential]:
        if not token or not token.startswith(ACCESS_TOKEN_PREFIX):
            return None
        # compare_digest only accepts ASCII str, so compare encoded bytes
        candidate = token.encode("utf-8")
        return await self._find(
            lambda c: secrets.compare_digest(c.token.encode("utf-8"), candidate)
        )

    async def create(self, email: str) -> Credential:
        """
        Create a credential for a new customer.

        Args:
            email: Customer email (unique, compared case-sensitively)

        Returns:
            The stored Credential, including its freshly generated token

        Raises:
            DuplicateEmail: A credential already owns this email
        """
        async with self._lock:
            if await self.get_by_email(email):
                raise DuplicateEmail(email)

            credential = Credential(
                id=generate_customer_id(),
                email=email,
                token=generate_access_token(),
                status=CredentialStatus.ACTIVE,
                created_at=self._timestamp(),
            )
            await self.records.put(credential.id, credential.to_dict())

        logger.info(f"Created customer {credential.id}")
        return credential

    async def remove(self, customer_id: str) -> bool:
        """Delete a credential. Returns whether one existed."""
        async with self._lock:
            removed = await self.records.delete(customer_id)
        if removed:
            logger.info(f"Removed customer {customer_id}")
        return removed

    async def reissue_token(self, customer_id: str) -> Optional[Credential]:
        """
        Replace a customer's access token.

        The previous token stops resolving as soon as the write completes.
        id, email and createdAt are preserved.
        """
        async with self._lock:
            credential = await self.get_by_id(customer_id)
            if credential is None:
                return None

            previous = credential.token
            token = generate_access_token()
            while token == previous:
                token = generate_access_token()

            credential.token = token
            credential.updated_at = self._timestamp()
            await self.records.put(credential.id, credential.to_dict())

        logger.info(f"Reissued access token for customer {customer_id}")
        return credential
