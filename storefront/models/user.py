# storefront/models/user.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Storefront account.

    Role:
      - "client" | "admin" | "superadmin"
      - guests are represented by the absence of a token.

    Permissions:
      - derived from the role unless `permissions` holds a per-user
        override (set by a superadmin).
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Login email (stored lowercase)",
    )

    name: str = Field(
        max_length=50,
        description="Display name; first part of email by default",
    )

    password_hash: str = Field(
        description="bcrypt hash of the password",
    )

    role: str = Field(
        default="client",
        index=True,
        description="Application role: client | admin | superadmin",
    )

    permissions: list[str] | None = Field(
        default=None,
        sa_column=Column(JSON, nullable=True),
        description="Per-user permission override; None => derived from role",
    )

    is_active: bool = Field(
        default=True,
        description="Deactivated accounts cannot authenticate",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
