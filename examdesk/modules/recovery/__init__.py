"""
Recovery Module - Black Box Interface

Purpose: Manage single-use, expiring recovery grants
Interface: issue(), peek(), consume(), purge_inert()
Hidden: Token format, expiry evaluation, storage layout

Replaceable with any backend that preserves the single-use guarantee.
"""

from .ledger import (
    DEFAULT_TTL_MINUTES,
    RECOVERY_TOKEN_PREFIX,
    RecoveryGrant,
    RecoveryLedger,
)

__all__ = [
    "DEFAULT_TTL_MINUTES",
    "RECOVERY_TOKEN_PREFIX",
    "RecoveryGrant",
    "RecoveryLedger",
]
