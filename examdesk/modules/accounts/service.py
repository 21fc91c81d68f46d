"""
Account lifecycle orchestration.

Composes the credential store, the recovery ledger and the notifier into the
operations exposed to administrators and customers. Notifications are best
effort: a failed delivery is logged and never fails the surrounding operation.
"""

import logging
from typing import List, Optional

from ..customers import Credential, CredentialStore
from ..errors import InvalidRecovery, NotFound
from ..notify import Message, Notifier, recovery_message, welcome_message
from ..recovery import DEFAULT_TTL_MINUTES, RecoveryGrant, RecoveryLedger

logger = logging.getLogger(__name__)


class AccountService:
    """Customer account operations for admin and self-service routes."""

    def __init__(
        self,
        credentials: CredentialStore,
        ledger: RecoveryLedger,
        notifier: Notifier,
        recovery_link_base: str = "http://localhost:3001/#/recover/",
        recovery_ttl_minutes: int = DEFAULT_TTL_MINUTES,
    ):
        """
        Initialize with injected collaborators.

        Args:
            credentials: Credential store
            ledger: Recovery ledger
            notifier: Outbound notifier
            recovery_link_base: URL prefix the recovery token is appended to
            recovery_ttl_minutes: Lifetime of newly issued recovery grants
        """
        self.credentials = credentials
        self.ledger = ledger
        self.notifier = notifier
        self.recovery_link_base = recovery_link_base
        self.recovery_ttl_minutes = recovery_ttl_minutes

    async def _dispatch(self, address: str, message: Message) -> None:
        """Send a notification and discard the outcome (failures are only logged)."""
        result = await self.notifier.notify(address, message)
        if not result.ok:
            logger.warning(f"Failed to deliver {message.kind} message to {address}: {result.error}")

    # Admin operations

    async def list_customers(self) -> List[Credential]:
        return await self.credentials.list_all()

    async def create_customer(self, email: str) -> Credential:
        """
        Create a customer and send them their access token.

        Raises:
            DuplicateEmail: The email already has a credential
        """
        credential = await self.credentials.create(email)
        await self._dispatch(credential.email, welcome_message(credential.token))
        return credential

    async def regenerate_token(self, customer_id: str) -> Credential:
        """
        Rotate a customer's access token and send them the new one.

        Raises:
            NotFound: No customer with this id
        """
        credential = await self.credentials.reissue_token(customer_id)
        if credential is None:
            raise NotFound("Customer not found")
        await self._dispatch(credential.email, welcome_message(credential.token))
        return credential

    async def delete_customer(self, customer_id: str) -> None:
        if not await self.credentials.remove(customer_id):
            raise NotFound("Customer not found")

    # Customer operations

    async def login(self, token: str) -> Credential:
        """
        Resolve an access token to its customer.

        lastLogin is intentionally left untouched.

        Raises:
            NotFound: Token does not belong to any customer
        """
        credential = await self.credentials.get_by_token(token)
        if credential is None:
            raise NotFound("Invalid token")
        return credential

    def recovery_link(self, grant: RecoveryGrant) -> str:
        return f"{self.recovery_link_base}{grant.recovery_token}"

    async def request_recovery(self, email: str) -> RecoveryGrant:
        """
        Start recovery for a customer email.

        Raises:
            NotFound: No customer has this email
        """
        credential = await self.credentials.get_by_email(email)
        if credential is None:
            raise NotFound("Email not found")

        grant = await self.ledger.issue(email, self.recovery_ttl_minutes)
        await self._dispatch(email, recovery_message(self.recovery_link(grant)))
        return grant

    async def confirm_recovery(self, token: str) -> RecoveryGrant:
        """
        Check a recovery token without consuming it.

        Raises:
            InvalidRecovery: Token is unknown, used or expired
        """
        grant = await self.ledger.peek(token)
        if grant is None:
            raise InvalidRecovery("Invalid or expired token")
        return grant

    async def complete_recovery(self, token: str) -> Credential:
        """
        Consume a recovery token and reissue the customer's access token.

        The returned credential carries the new token; this is the only path
        that hands a token back synchronously instead of only by message.

        Raises:
            InvalidRecovery: Token is unknown, used or expired
            NotFound: The grant's email no longer has a credential
        """
        grant = await self.ledger.consume(token)
        if grant is None:
            raise InvalidRecovery("Invalid or expired token")

        credential = await self.credentials.get_by_email(grant.email)
        if credential is None:
            raise NotFound("Customer not found")

        updated: Optional[Credential] = await self.credentials.reissue_token(credential.id)
        if updated is None:
            raise NotFound("Customer not found")

        await self._dispatch(updated.email, welcome_message(updated.token))
        return updated
