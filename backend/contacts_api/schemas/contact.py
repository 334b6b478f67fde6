"""
Contact API — Pydantic Request/Response Schemas
=================================================

What:  Pydantic models defining the API contract for /api/contacts.
Why:   Each endpoint gets an explicit body type, so presence checks happen
       before any store call and responses never expose more than intended.
How:   FastAPI validates request bodies against these models, serializes
       responses through them and publishes them in the OpenAPI docs.

Request models deliberately make every field optional: a missing name or
email is a business-rule failure with its own message
("Name and email are required"), not a generic schema error.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from contacts_api.models.contact import EMAIL_MAX_LENGTH, NAME_MAX_LENGTH, PHONE_MAX_LENGTH


# ══════════════════════════════════════════════════════════════════════════
# Request Models — What clients send
# ══════════════════════════════════════════════════════════════════════════


class ContactFields(BaseModel):
    """
    Fields a client may send for a contact.

    Values are kept exactly as sent. Lengths are capped at the column widths,
    so an oversized value is a 400, not a database error. Unknown keys (id,
    createdAt, ...) are ignored; the store owns those.
    """
    name: Optional[str] = Field(
        default=None, max_length=NAME_MAX_LENGTH, description="Contact's display name"
    )
    email: Optional[str] = Field(
        default=None, max_length=EMAIL_MAX_LENGTH, description="Unique email address"
    )
    phone: Optional[str] = Field(
        default=None,
        max_length=PHONE_MAX_LENGTH,
        description="Phone number (null clears it on update)",
    )

    model_config = ConfigDict(extra="ignore")


class ContactCreate(ContactFields):
    """Body of POST /api/contacts."""

    def has_required_fields(self) -> bool:
        """True when both name and email are present and not just whitespace."""
        return bool(self.name and self.name.strip()) and bool(self.email and self.email.strip())


class ContactUpdate(ContactFields):
    """Body of PUT/PATCH /api/contacts/{id}; any subset of the fields."""

    def supplied_fields(self) -> Dict[str, Any]:
        """Only the fields the client actually sent, including explicit nulls."""
        return self.model_dump(exclude_unset=True)


# ══════════════════════════════════════════════════════════════════════════
# Response Models — What the API returns
# ══════════════════════════════════════════════════════════════════════════


class ContactResponse(BaseModel):
    """
    Full representation of a contact.

    Timestamps are emitted as `createdAt` / `updatedAt` in ISO 8601 (UTC).
    """
    id: uuid.UUID = Field(description="Unique contact identifier (UUID)")
    name: str
    email: str
    phone: Optional[str] = None
    created_at: datetime = Field(
        validation_alias=AliasChoices("created_at", "createdAt"),
        serialization_alias="createdAt",
    )
    updated_at: datetime = Field(
        validation_alias=AliasChoices("updated_at", "updatedAt"),
        serialization_alias="updatedAt",
    )

    model_config = ConfigDict(from_attributes=True)


class MessageResponse(BaseModel):
    """Single-message body used for 400/404 outcomes and delete confirmation."""
    message: str


class ErrorResponse(BaseModel):
    """
    Body returned by the centralized handlers for unclassified failures.

    Example:
        {
            "error": "server_error",
            "message": "An internal error occurred. Please try again later.",
            "request_id": "1a2b3c4d"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
