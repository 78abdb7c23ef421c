# app/models/user.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile.

    Identity:
      - id: MUST match the identity provider's subject ("sub" claim)

    Role:
      - "user" | "admin"
      - "guest" is represented by the absence of a row / missing token.

    This table is *not* responsible for password hashes. The identity
    provider owns credentials. We only mirror identity, profile fields
    and application role.
    """

    __tablename__ = "users"

    id: str = Field(
        primary_key=True,
        max_length=255,
        description="Identity provider subject",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from the identity provider",
    )

    # Display name for the user (e.g. customer name)
    name: str = Field(
        max_length=100,
        description="Customer display name; first part of email by default",
    )

    contact_number: str | None = Field(default=None, max_length=30)
    country: str | None = Field(default=None, max_length=100)

    # Application role
    role: str = Field(
        default="user",
        index=True,
        description="Application role: user | admin",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
