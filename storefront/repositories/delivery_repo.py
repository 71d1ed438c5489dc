# storefront/repositories/delivery_repo.py
import uuid

from sqlmodel import Session, select

from storefront.models.delivery import DeliveryOption


class DeliveryOptionRepository:
    """Data access layer for DeliveryOption."""

    def get_by_id(
        self,
        session: Session,
        option_id: uuid.UUID,
    ) -> DeliveryOption | None:
        return session.get(DeliveryOption, option_id)

    def list(
        self,
        session: Session,
        only_available: bool = True,
    ) -> list[DeliveryOption]:
        stmt = select(DeliveryOption)
        if only_available:
            stmt = stmt.where(DeliveryOption.is_available == True)  # noqa: E712
        stmt = stmt.order_by(DeliveryOption.price)
        return session.exec(stmt).all()

    def create(self, session: Session, option: DeliveryOption) -> DeliveryOption:
        session.add(option)
        session.commit()
        session.refresh(option)
        return option

    def update(self, session: Session, option: DeliveryOption) -> DeliveryOption:
        session.add(option)
        session.commit()
        session.refresh(option)
        return option

    def delete(self, session: Session, option: DeliveryOption) -> None:
        session.delete(option)
        session.commit()
