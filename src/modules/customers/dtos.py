"""Customer DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``RegisterCustomerDTO``: self-service registration of the caller's profile.
- ``UpdateContactDTO``: partial update of the contact fields.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# Mirror the column sizes on ``Customer``.
FULL_NAME_MAX_LENGTH = 255
PHONE_MAX_LENGTH = 20


def _require_full_name(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("Full name is required.")
    if len(v) > FULL_NAME_MAX_LENGTH:
        raise ValueError(f"Full name must be at most {FULL_NAME_MAX_LENGTH} characters.")
    return v


class RegisterCustomerDTO(BaseModel):
    """Immutable DTO for customer self-registration.

    The principal link is **not** part of the payload: it always comes from
    the authenticated caller.
    """

    model_config = ConfigDict(frozen=True)

    full_name: str
    email: EmailStr
    phone: str = Field(default="", max_length=PHONE_MAX_LENGTH)

    @field_validator("full_name")
    @classmethod
    def full_name_must_not_be_blank(cls, v: str) -> str:
        return _require_full_name(v)


class UpdateContactDTO(BaseModel):
    """Immutable DTO for contact updates; only supplied fields change."""

    model_config = ConfigDict(frozen=True)

    full_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=PHONE_MAX_LENGTH)

    @field_validator("full_name")
    @classmethod
    def full_name_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        return _require_full_name(v)
