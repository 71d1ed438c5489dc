# storefront/schemas/review.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


def _clean_comment(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("comment cannot be empty")
    return v


class ReviewCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    rating: int = Field(ge=1, le=5)
    comment: str = Field(max_length=1000)

    @field_validator("comment")
    @classmethod
    def not_blank(cls, v):
        return _clean_comment(v)


class ReviewUpdate(SQLModel):
    """Partial update of one's own review."""

    model_config = ConfigDict(extra="forbid")

    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, max_length=1000)

    @field_validator("comment")
    @classmethod
    def not_blank(cls, v):
        return _clean_comment(v)


class ReviewRead(SQLModel):
    id: uuid.UUID
    product_id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    rating: int
    comment: str
    created_at: datetime
    updated_at: datetime
