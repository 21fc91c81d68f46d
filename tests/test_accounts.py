import os
import sys
from unittest.mock import patch

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from examdesk.modules.errors import DuplicateEmail, InvalidRecovery, NotFound
from conftest import RecordingNotifier


@pytest.mark.asyncio
async def test_create_customer_sends_welcome(account_service, notifier):
    customer = await account_service.create_customer("a@example.com")

    address, message = notifier.last("welcome")
    assert address == "a@example.com"
    assert customer.token in message.body


@pytest.mark.asyncio
async def test_create_customer_duplicate(account_service, notifier):
    await account_service.create_customer("a@example.com")

    with pytest.raises(DuplicateEmail):
        await account_service.create_customer("a@example.com")

    assert len(notifier.sent) == 1


@pytest.mark.asyncio
async def test_notification_failure_does_not_fail_operation(account_service):
    account_service.notifier = RecordingNotifier(fail=True)

    with patch("examdesk.modules.accounts.service.logger") as mock_logger:
        customer = await account_service.create_customer("a@example.com")
        rotated = await account_service.regenerate_token(customer.id)

    assert rotated.token != customer.token
    assert mock_logger.warning.call_count == 2
    assert "smtp unavailable" in mock_logger.warning.call_args[0][0]


@pytest.mark.asyncio
async def test_regenerate_token(account_service, notifier):
    customer = await account_service.create_customer("a@example.com")

    rotated = await account_service.regenerate_token(customer.id)

    assert rotated.id == customer.id
    assert rotated.token != customer.token
    assert rotated.token in notifier.last("welcome")[1].body


@pytest.mark.asyncio
async def test_regenerate_unknown_customer(account_service, notifier):
    with pytest.raises(NotFound):
        await account_service.regenerate_token("cust-missing")
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_delete_customer(account_service):
    customer = await account_service.create_customer("a@example.com")

    await account_service.delete_customer(customer.id)

    assert await account_service.list_customers() == []
    with pytest.raises(NotFound):
        await account_service.delete_customer(customer.id)


@pytest.mark.asyncio
async def test_login(account_service):
    customer = await account_service.create_customer("a@example.com")

    logged_in = await account_service.login(customer.token)

    assert logged_in.id == customer.id
    assert logged_in.last_login is None
    with pytest.raises(NotFound):
        await account_service.login("cust_000000000000000000000000")


@pytest.mark.asyncio
async def test_request_recovery_unknown_email(account_service, recovery_records, notifier):
    with pytest.raises(NotFound, match="Email not found"):
        await account_service.request_recovery("ghost@example.com")

    assert await recovery_records.all() == []
    assert notifier.sent == []


@pytest.mark.asyncio
async def test_request_recovery_sends_link(account_service, notifier):
    await account_service.create_customer("a@example.com")

    grant = await account_service.request_recovery("a@example.com")

    address, message = notifier.last("recovery")
    assert address == "a@example.com"
    assert f"http://localhost:3001/#/recover/{grant.recovery_token}" in message.body


@pytest.mark.asyncio
async def test_end_to_end_recovery(account_service, credential_store, notifier):
    customer = await account_service.create_customer("a@example.com")
    t1 = customer.token

    grant = await account_service.request_recovery("a@example.com")
    confirmed = await account_service.confirm_recovery(grant.recovery_token)
    assert confirmed.email == "a@example.com"

    recovered = await account_service.complete_recovery(grant.recovery_token)
    t2 = recovered.token

    assert t2 != t1
    assert recovered.id == customer.id
    assert await credential_store.get_by_token(t1) is None
    assert (await credential_store.get_by_token(t2)).email == "a@example.com"
    assert t2 in notifier.last("welcome")[1].body

    with pytest.raises(InvalidRecovery):
        await account_service.complete_recovery(grant.recovery_token)
    with pytest.raises(InvalidRecovery):
        await account_service.confirm_recovery(grant.recovery_token)


@pytest.mark.asyncio
async def test_recovery_expires(account_service, clock):
    await account_service.create_customer("a@example.com")
    grant = await account_service.request_recovery("a@example.com")

    clock.advance(minutes=61)

    with pytest.raises(InvalidRecovery):
        await account_service.confirm_recovery(grant.recovery_token)
    with pytest.raises(InvalidRecovery):
        await account_service.complete_recovery(grant.recovery_token)


@pytest.mark.asyncio
async def test_complete_recovery_after_customer_deleted(account_service):
    customer = await account_service.create_customer("a@example.com")
    grant = await account_service.request_recovery("a@example.com")
    await account_service.delete_customer(customer.id)

    with pytest.raises(NotFound):
        await account_service.complete_recovery(grant.recovery_token)


@pytest.mark.asyncio
async def test_access_token_is_not_a_recovery_token(account_service):
    customer = await account_service.create_customer("a@example.com")

    with pytest.raises(InvalidRecovery):
        await account_service.confirm_recovery(customer.token)
    with pytest.raises(InvalidRecovery):
        await account_service.complete_recovery(customer.token)
