"""Shared fixtures for the database-backed tests."""

import os

# Settings are read at import time; point them at a throwaway database.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret")

from sqlmodel import SQLModel, Session  # noqa: E402

from storefront.core.auth import hash_password  # noqa: E402
from storefront.database import build_engine  # noqa: E402
from storefront.models import cart as _cart_models  # noqa: E402,F401
from storefront.models import delivery as _delivery_models  # noqa: E402,F401
from storefront.models import order as _order_models  # noqa: E402,F401
from storefront.models import review as _review_models  # noqa: E402,F401
from storefront.models import wishlist as _wishlist_models  # noqa: E402,F401
from storefront.models.delivery import DeliveryOption  # noqa: E402
from storefront.models.product import Product  # noqa: E402
from storefront.models.user import User  # noqa: E402

PASSWORD = "secret123"


def make_engine():
    """Fresh in-memory database with every table created."""
    engine = build_engine("sqlite://")
    SQLModel.metadata.create_all(engine)
    return engine


def add_user(session: Session, email: str, role: str = "client", **extra) -> User:
    user = User(
        email=email,
        name=email.split("@", 1)[0],
        password_hash=hash_password(PASSWORD),
        role=role,
        **extra,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def add_product(
    session: Session,
    name: str,
    price: float,
    stock: int = 10,
    category: str = "pastry",
) -> Product:
    product = Product(name=name, category=category, price=price, stock_on_hand=stock)
    session.add(product)
    session.commit()
    session.refresh(product)
    return product


def add_delivery_option(
    session: Session,
    price: float,
    name: str = "Standard",
    is_available: bool = True,
) -> DeliveryOption:
    option = DeliveryOption(
        name=name,
        description=f"{name} delivery",
        provider="Post",
        price=price,
        min_days=2,
        max_days=5,
        is_available=is_available,
    )
    session.add(option)
    session.commit()
    session.refresh(option)
    return option


class RecordingSender:
    """Stands in for send_email; keeps every message instead of sending it."""

    def __init__(self):
        self.sent = []

    def __call__(self, to_email, subject, text_body, html_body=None):
        self.sent.append({"to": to_email, "subject": subject, "body": text_body})
