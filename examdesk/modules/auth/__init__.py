"""
Authentication Module - Black Box Interface

Purpose: Issue and verify admin tokens, guard admin routes
Interface: TokenCodec.issue(), TokenCodec.verify(), AdminGate.authenticate()
Hidden: Token format, signing algorithm, header parsing

This module can be replaced with any other auth implementation
(OAuth, external identity provider) without affecting other modules.
"""

from .codec import TokenCodec
from .gate import AdminGate, AdminPrincipal

__all__ = ["TokenCodec", "AdminGate", "AdminPrincipal"]
