"""
Error taxonomy shared by all modules.

Internal distinctions (why a token failed, whether a recovery grant was used
or expired) exist for logging. The API layer collapses them before anything
reaches an untrusted caller.
"""


class ExamdeskError(Exception):
    """Base class for all domain errors."""


class TokenError(ExamdeskError):
    """A bearer token could not be verified."""


class MalformedToken(TokenError):
    """Token is structurally invalid (segments, encoding or JSON)."""


class InvalidSignature(TokenError):
    """Token signature does not match the configured secret."""


class TokenExpired(TokenError):
    """Token carries an exp claim in the past."""


class DuplicateEmail(ExamdeskError):
    """A credential already owns this email."""

    def __init__(self, email: str):
        super().__init__("Email already exists")
        self.email = email


class NotFound(ExamdeskError):
    """No matching credential, grant or record."""


class InvalidRecovery(ExamdeskError):
    """Recovery token is unknown, already consumed or expired."""


class StorageError(ExamdeskError):
    """The record store failed to read or persist a record."""
