# storefront/services/delivery_service.py
import uuid
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.delivery import DeliveryOption
from storefront.repositories.delivery_repo import DeliveryOptionRepository
from storefront.schemas.delivery import (
    DeliveryOptionCreate,
    DeliveryOptionRead,
    DeliveryOptionUpdate,
    EstimatedDays,
)


class DeliveryOptionService:
    """
    Shipping methods offered at checkout.

    The chosen option's price becomes the order's shipping cost.
    """

    def __init__(self, repo: DeliveryOptionRepository):
        self.repo = repo

    @staticmethod
    def to_read(option: DeliveryOption) -> DeliveryOptionRead:
        return DeliveryOptionRead(
            id=option.id,
            name=option.name,
            description=option.description,
            provider=option.provider,
            price=option.price,
            estimated_days=EstimatedDays(min=option.min_days, max=option.max_days),
            is_available=option.is_available,
        )

    def list_options(
        self,
        session: Session,
        only_available: bool = True,
    ) -> list[DeliveryOptionRead]:
        options = self.repo.list(session, only_available=only_available)
        return [self.to_read(o) for o in options]

    def get_option(self, session: Session, option_id: uuid.UUID) -> DeliveryOption:
        option = self.repo.get_by_id(session, option_id)
        if not option:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Delivery option not found",
            )
        return option

    def get_available_option(
        self,
        session: Session,
        option_id: uuid.UUID,
    ) -> DeliveryOption:
        """Option usable at checkout; 400 if it has been switched off."""
        option = self.get_option(session, option_id)
        if not option.is_available:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Delivery option is not available",
            )
        return option

    def create_option(
        self,
        session: Session,
        payload: DeliveryOptionCreate,
    ) -> DeliveryOptionRead:
        option = DeliveryOption(
            name=payload.name,
            description=payload.description,
            provider=payload.provider,
            price=payload.price,
            min_days=payload.estimated_days.min,
            max_days=payload.estimated_days.max,
            is_available=payload.is_available,
        )
        return self.to_read(self.repo.create(session, option))

    def update_option(
        self,
        session: Session,
        option_id: uuid.UUID,
        payload: DeliveryOptionUpdate,
    ) -> DeliveryOptionRead:
        option = self.get_option(session, option_id)

        if payload.name is not None:
            option.name = payload.name
        if payload.description is not None:
            option.description = payload.description
        if payload.provider is not None:
            option.provider = payload.provider
        if payload.price is not None:
            option.price = payload.price
        if payload.estimated_days is not None:
            option.min_days = payload.estimated_days.min
            option.max_days = payload.estimated_days.max
        if payload.is_available is not None:
            option.is_available = payload.is_available

        option.updated_at = datetime.now(timezone.utc)
        return self.to_read(self.repo.update(session, option))

    def delete_option(self, session: Session, option_id: uuid.UUID) -> None:
        option = self.get_option(session, option_id)
        self.repo.delete(session, option)
