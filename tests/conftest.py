"""
Shared pytest fixtures for Examdesk tests.

This module provides common fixtures including:
- FakeClock: controllable "now" for expiry tests
- In-memory and Redis-mock record stores
- Recording notifier
- FastAPI test client with an in-memory backend
"""

import asyncio
import os
import sys
import tempfile
from datetime import UTC, datetime, timedelta
from typing import List, Optional, Tuple
from unittest.mock import AsyncMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# The API module reads configuration at import time
TEST_SECRET = "test-session-secret-with-enough-entropy-0123456789"
os.environ["SESSION_SECRET"] = TEST_SECRET
os.environ["STORAGE_BACKEND"] = "memory"
os.environ["OUTBOX_DIR"] = tempfile.mkdtemp(prefix="examdesk-outbox-")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from examdesk.modules.accounts import AccountService
from examdesk.modules.auth import TokenCodec
from examdesk.modules.customers import CredentialStore
from examdesk.modules.notify import Message, NotifyResult
from examdesk.modules.recovery import RecoveryLedger
from examdesk.modules.storage import MemoryRecordStore


# =============================================================================
# Clock
# =============================================================================

class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


# =============================================================================
# Record stores
# =============================================================================

class YieldingRecordStore(MemoryRecordStore):
    """
    Memory store that yields to the event loop on every operation.

    Makes overlapping coroutines interleave between a read and the following
    write, the way a network-backed store would.
    """

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def put(self, key, record):
        await asyncio.sleep(0)
        await super().put(key, record)

    async def delete(self, key):
        await asyncio.sleep(0)
        return await super().delete(key)

    async def all(self):
        await asyncio.sleep(0)
        return await super().all()


@pytest.fixture
def customer_records():
    return YieldingRecordStore("customers")


@pytest.fixture
def recovery_records():
    return YieldingRecordStore("recovery")


@pytest.fixture
def credential_store(customer_records, clock):
    return CredentialStore(customer_records, clock=clock)


@pytest.fixture
def ledger(recovery_records, clock):
    return RecoveryLedger(recovery_records, clock=clock)


@pytest.fixture
def mock_redis():
    """Mock async Redis client exposing the hash commands the record store uses."""
    redis = AsyncMock()
    redis.hget = AsyncMock(return_value=None)
    redis.hset = AsyncMock(return_value=1)
    redis.hdel = AsyncMock(return_value=0)
    redis.hvals = AsyncMock(return_value=[])
    redis.ping = AsyncMock(return_value=True)
    return redis


# =============================================================================
# Notifier
# =============================================================================

class RecordingNotifier:
    """Notifier that remembers what it was asked to send."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[Tuple[str, Message]] = []

    async def notify(self, address: str, message: Message) -> NotifyResult:
        if self.fail:
            return NotifyResult(ok=False, error="smtp unavailable")
        self.sent.append((address, message))
        return NotifyResult(ok=True, location="memory")

    def last(self, kind: str) -> Tuple[str, Message]:
        matches = [(a, m) for a, m in self.sent if m.kind == kind]
        assert matches, f"no {kind} message sent"
        return matches[-1]


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def account_service(credential_store, ledger, notifier):
    return AccountService(
        credential_store,
        ledger,
        notifier,
        recovery_link_base="http://localhost:3001/#/recover/",
        recovery_ttl_minutes=60,
    )


# =============================================================================
# Tokens and API client
# =============================================================================

@pytest.fixture
def codec(clock):
    return TokenCodec(TEST_SECRET, clock=clock)


@pytest.fixture
def admin_token():
    """Non-expiring admin token signed with the configured test secret."""
    return TokenCodec(TEST_SECRET).issue_admin_token()


@pytest.fixture
def admin_headers(admin_token):
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def api_client():
    """TestClient running the full lifespan on a fresh in-memory backend."""
    from fastapi.testclient import TestClient

    from examdesk import main

    with TestClient(main.app) as client:
        main.services.accounts.notifier = RecordingNotifier()
        yield client


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )
