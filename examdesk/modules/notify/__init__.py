"""
Notify Module - Black Box Interface

Purpose: Deliver messages to customers (welcome tokens, recovery links)
Interface: Notifier.notify(address, message) -> NotifyResult
Hidden: Delivery channel (outbox files today; SMTP or a transactional provider later)

Delivery is fire-and-forget. notify() reports failure through its result
instead of raising, so callers decide what to do with it.
"""

from .outbox import (
    Message,
    Notifier,
    NotifyResult,
    OutboxNotifier,
    recovery_message,
    welcome_message,
)

__all__ = [
    "Message",
    "Notifier",
    "NotifyResult",
    "OutboxNotifier",
    "recovery_message",
    "welcome_message",
]
