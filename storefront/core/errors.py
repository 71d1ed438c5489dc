# storefront/core/errors.py
"""
Typed domain errors.

These are raised by the pricing, permission and cart rules and by the
services built on them. Each one carries the HTTP status the API layer
answers with; `storefront.main` registers a single handler for the base
class. They are deterministic validation failures, so nothing retries them.
"""

from fastapi import status


class StorefrontError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Invalid request"

    def __init__(self, detail: str | None = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidQuantity(StorefrontError):
    default_detail = "Quantity must be a positive integer"


class InvalidPrice(StorefrontError):
    default_detail = "Price must not be negative"


class UnknownRole(StorefrontError):
    default_detail = "Unknown role"


class AccessDenied(StorefrontError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Access denied"


class ProductNotFound(StorefrontError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Product not found"


class InsufficientStock(StorefrontError):
    default_detail = "Not enough stock available"
