"""
Customers Module - Black Box Interface

Purpose: Own customer credentials (email to access token)
Interface: create(), get_by_id(), get_by_email(), get_by_token(), remove(), reissue_token()
Hidden: Token format, record layout, locking

Replaceable with any credential backend that keeps email and token unique.
"""

from .credentials import (
    ACCESS_TOKEN_PREFIX,
    Credential,
    CredentialStatus,
    CredentialStore,
    generate_access_token,
)

__all__ = [
    "ACCESS_TOKEN_PREFIX",
    "Credential",
    "CredentialStatus",
    "CredentialStore",
    "generate_access_token",
]
