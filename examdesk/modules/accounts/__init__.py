"""
Accounts Module - Black Box Interface

Purpose: Customer account lifecycle (creation, token rotation, recovery)
Interface: AccountService
Hidden: How credentials, recovery grants and notifications are combined

Depends only on the customers, recovery and notify interfaces.
"""

from .service import AccountService

__all__ = ["AccountService"]
