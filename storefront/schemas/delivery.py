# storefront/schemas/delivery.py
import math
import uuid

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field


def _finite_price(v: float | None) -> float | None:
    if v is not None and not math.isfinite(v):
        raise ValueError("price must be a finite number")
    return v


class EstimatedDays(SQLModel):
    min: int = Field(ge=0)
    max: int = Field(ge=0)

    @model_validator(mode="after")
    def check_range(self):
        if self.max < self.min:
            raise ValueError("max must be >= min")
        return self


class DeliveryOptionCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(min_length=1, max_length=100)
    description: str
    provider: str = Field(min_length=1, max_length=100)
    price: float = Field(ge=0)
    estimated_days: EstimatedDays
    is_available: bool = True

    @field_validator("price")
    @classmethod
    def finite_price(cls, v):
        return _finite_price(v)


class DeliveryOptionUpdate(SQLModel):
    """Partial update; omitted fields keep their value."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = None
    provider: str | None = Field(default=None, min_length=1, max_length=100)
    price: float | None = Field(default=None, ge=0)
    estimated_days: EstimatedDays | None = None
    is_available: bool | None = None

    @field_validator("price")
    @classmethod
    def finite_price(cls, v):
        return _finite_price(v)


class DeliveryOptionRead(SQLModel):
    id: uuid.UUID
    name: str
    description: str
    provider: str
    price: float
    estimated_days: EstimatedDays
    is_available: bool
