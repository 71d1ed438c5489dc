# storefront/repositories/product_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.product import Product


class ProductRepository:
    """Catalog queries. Writes commit immediately; nothing here is HTTP-aware."""

    def get_by_id(self, session: Session, product_id: uuid.UUID) -> Product | None:
        return session.get(Product, product_id)

    def get_many(
        self,
        session: Session,
        product_ids: list[uuid.UUID],
        lock: bool = False,
    ) -> dict[uuid.UUID, Product]:
        """
        Products keyed by id; ids with no row are simply absent.
        `lock=True` holds the rows until commit (stock deduction/restoration).
        """
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(set(product_ids)))
        if lock:
            stmt = stmt.with_for_update()
        return {p.id: p for p in session.exec(stmt).all()}

    def search(
        self,
        session: Session,
        category: str | None = None,
        keyword: str | None = None,
        in_stock: bool = False,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        stmt = select(Product)
        if category:
            stmt = stmt.where(Product.category == category)
        if keyword:
            stmt = stmt.where(func.lower(Product.name).contains(keyword.lower()))
        if in_stock:
            stmt = stmt.where(Product.stock_on_hand > 0)
        stmt = stmt.order_by(Product.name, Product.id).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def categories(self, session: Session) -> list[str]:
        stmt = select(Product.category).distinct().order_by(Product.category)
        return list(session.exec(stmt).all())

    def save(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.commit()
