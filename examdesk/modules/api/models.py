"""
Examdesk API data models.

Request bodies are validated here; responses keep the camelCase JSON shape of
the stored records and are built from their to_dict() forms.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Request Models (API Input)


class CreateCustomerRequest(BaseModel):
    """Admin request to create a customer."""

    email: str = Field(..., description="Customer email", min_length=1, max_length=320)

    @field_validator("email")
    @classmethod
    def strip_email(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("email required")
        return v


class CustomerLoginRequest(BaseModel):
    """Customer login with an access token."""

    token: str = Field(..., description="Customer access token", min_length=1)

    @field_validator("token")
    @classmethod
    def strip_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("token required")
        return v


class RecoverRequest(BaseModel):
    """Customer request for a recovery link."""

    email: str = Field(..., description="Account email", min_length=1, max_length=320)


class CreateExamRequest(BaseModel):
    """Exam record from the admin dashboard. Unknown fields are kept."""

    model_config = ConfigDict(extra="allow")

    title: str = Field(..., description="Exam title", min_length=1)
    subject: Optional[str] = Field(None, description="Subject, defaults to General")
    description: Optional[str] = Field(None, description="Free-form description")
    durationMinutes: Optional[int] = Field(None, description="Duration in minutes", ge=1)
    questions: Optional[List[Any]] = Field(None, description="Opaque question list")


# Response Models (API Output)


class CustomerSummary(BaseModel):
    """Public view of a customer (no token)."""

    id: str
    email: str


class RecoveryStatus(BaseModel):
    """Result of checking a recovery token."""

    ok: bool = True
    email: str


class RecoveryResult(BaseModel):
    """Result of completing recovery; carries the new access token."""

    ok: bool = True
    token: str


def validation_message(errors: List[Dict[str, Any]]) -> str:
    """Collapse pydantic errors into the single message the API returns."""
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = next((str(part) for part in reversed(first.get("loc", ())) if part != "body"), None)
    if field and first.get("type") in ("missing", "string_too_short"):
        return f"{field} required"
    message = first.get("msg", "Invalid request")
    # pydantic prefixes custom ValueError messages
    return message.removeprefix("Value error, ")
