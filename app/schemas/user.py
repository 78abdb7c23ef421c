# app/schemas/user.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, EmailStr, Field, field_validator

from app.schemas.common import ApiModel

# App-level roles. "guest" = no token, so we don't store it here.
Role = Literal["user", "admin"]


class UserRead(ApiModel):
    """Response schema returned to clients."""

    id: str
    email: EmailStr
    name: str
    role: Role
    contact_number: str | None = None
    country: str | None = None
    created_at: datetime


class UserUpdate(ApiModel):
    """
    Partial profile update for authenticated users.
    Email and role are not editable here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    contact_number: str | None = Field(
        default=None, max_length=30, pattern=r"^\+?[\d\s\-\(\)]+$"
    )
    country: str | None = Field(default=None, max_length=100)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UserRoleUpdate(ApiModel):
    """
    Admin-only role update schema.
    """

    model_config = ConfigDict(extra="forbid")
    role: Role
