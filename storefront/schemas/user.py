# storefront/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

# App-level roles. Guests have no token, so they are not stored here.
Role = Literal["client", "admin", "superadmin"]


class UserRegister(SQLModel):
    """
    Payload for self sign-up. New accounts always get role="client".
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    name: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UserLogin(SQLModel):
    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str


class TokenRead(SQLModel):
    access_token: str
    token_type: str = "bearer"


class UserRead(SQLModel):
    """Response schema returned to clients."""

    id: uuid.UUID
    email: str
    name: str
    role: Role
    permissions: list[str]
    is_active: bool
    created_at: datetime


class UserUpdate(SQLModel):
    """
    Partial profile update for authenticated users.
    Only editable field is `name` here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=50)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class UserRoleUpdate(SQLModel):
    """
    Admin-only role update schema.

    `role` is a plain string so roles outside the closed set reach the
    resolver and come back as UnknownRole.
    """

    model_config = ConfigDict(extra="forbid")
    role: str


class UserStatusUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")
    is_active: bool


class UserPermissionsUpdate(SQLModel):
    """
    Superadmin-only override of a user's permission set.
    `permissions=None` resets to the set derived from the role.
    """

    model_config = ConfigDict(extra="forbid")
    permissions: list[str] | None = None
