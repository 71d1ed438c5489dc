# storefront/schemas/product.py
import math
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


def _strip_required(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


def _finite_price(v: float | None) -> float | None:
    # inf passes ge=0
    if v is not None and not math.isfinite(v):
        raise ValueError("price must be a finite number")
    return v


class ProductCreate(SQLModel):
    """Admin payload for a new catalog entry."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    description: str | None = None
    category: str = Field(max_length=50)
    price: float = Field(ge=0)
    stock_on_hand: int = Field(default=0, ge=0)

    @field_validator("name", "category")
    @classmethod
    def not_blank(cls, v):
        return _strip_required(v)

    @field_validator("price")
    @classmethod
    def finite_price(cls, v):
        return _finite_price(v)


class ProductUpdate(SQLModel):
    """Partial update; omitted (or null) fields keep their value."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    description: str | None = None
    category: str | None = Field(default=None, max_length=50)
    price: float | None = Field(default=None, ge=0)
    stock_on_hand: int | None = Field(default=None, ge=0)

    @field_validator("name", "category")
    @classmethod
    def not_blank(cls, v):
        return _strip_required(v)

    @field_validator("price")
    @classmethod
    def finite_price(cls, v):
        return _finite_price(v)


class ProductRead(SQLModel):
    id: uuid.UUID
    name: str
    description: str | None
    category: str
    price: float
    stock_on_hand: int
    average_rating: float
    review_count: int
    created_at: datetime
    updated_at: datetime
