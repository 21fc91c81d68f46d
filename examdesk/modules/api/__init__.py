"""
API Module - Black Box Interface

Purpose: HTTP request and response models
Interface: Pydantic models used by the REST endpoints
Hidden: Validation rules, error message formatting

The API layer only orchestrates - it contains no business logic.
All logic is delegated to appropriate modules.
"""

from .models import (
    CreateCustomerRequest,
    CreateExamRequest,
    CustomerLoginRequest,
    CustomerSummary,
    RecoverRequest,
    RecoveryResult,
    RecoveryStatus,
    validation_message,
)

__all__ = [
    "CreateCustomerRequest",
    "CreateExamRequest",
    "CustomerLoginRequest",
    "CustomerSummary",
    "RecoverRequest",
    "RecoveryResult",
    "RecoveryStatus",
    "validation_message",
]
