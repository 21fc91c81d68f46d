"""
Service factory.

The composition root: builds every module from configuration, wires
dependencies together and hands back the assembled services. Used by the
API lifespan and by the CLI.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .modules.accounts import AccountService
from .modules.auth import AdminGate, TokenCodec
from .modules.config import ConfigModule
from .modules.customers import CredentialStore
from .modules.exams import ExamModule
from .modules.notify import Notifier, OutboxNotifier
from .modules.recovery import RecoveryLedger
from .modules.storage import StorageModule

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Assembled module instances."""
    storage: StorageModule
    codec: TokenCodec
    gate: AdminGate
    credentials: CredentialStore
    ledger: RecoveryLedger
    accounts: AccountService
    exams: ExamModule


def build_storage(config: ConfigModule) -> StorageModule:
    """Create the storage module for the configured backend."""
    redis_url = f"redis://{config.get('redis_host')}:{config.get('redis_port')}/{config.get('redis_db')}"
    return StorageModule(
        backend=config.get("storage_backend"),
        connection_url=redis_url,
        password=config.get("redis_password"),
    )


def build_codec(config: ConfigModule, clock: Optional[Callable[[], datetime]] = None) -> TokenCodec:
    return TokenCodec(config.get("session_secret"), clock=clock)


class ServiceFactory:
    """Builds the full service graph."""

    @staticmethod
    async def build(
        config: ConfigModule,
        storage: Optional[StorageModule] = None,
        notifier: Optional[Notifier] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> Services:
        """
        Build all services.

        Args:
            config: Configuration module
            storage: Storage module (built from config when omitted)
            notifier: Notifier (outbox notifier on the configured directory when omitted)
            clock: Shared clock for expiry and timestamps (UTC wall clock when omitted)

        Returns:
            Services with every module wired
        """
        storage = storage or build_storage(config)
        notifier = notifier or OutboxNotifier(config.get("outbox_dir"))

        codec = build_codec(config, clock)
        credentials = CredentialStore(await storage.record_store("customers"), clock=clock)
        ledger = RecoveryLedger(await storage.record_store("recovery"), clock=clock)
        accounts = AccountService(
            credentials,
            ledger,
            notifier,
            recovery_link_base=config.get("recovery_link_base"),
            recovery_ttl_minutes=config.get("recovery_ttl_minutes"),
        )
        exams = ExamModule(await storage.record_store("exams"), clock=clock)

        logger.info(f"Services built with {storage.backend} storage")
        return Services(
            storage=storage,
            codec=codec,
            gate=AdminGate(codec),
            credentials=credentials,
            ledger=ledger,
            accounts=accounts,
            exams=exams,
        )
