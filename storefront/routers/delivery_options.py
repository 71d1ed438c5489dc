# storefront/routers/delivery_options.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import require_permission
from storefront.database import get_session
from storefront.repositories.delivery_repo import DeliveryOptionRepository
from storefront.schemas.delivery import (
    DeliveryOptionCreate,
    DeliveryOptionRead,
    DeliveryOptionUpdate,
)
from storefront.services.delivery_service import DeliveryOptionService

router = APIRouter(prefix="/delivery-options", tags=["Delivery options"])

service = DeliveryOptionService(DeliveryOptionRepository())


@router.get("", response_model=list[DeliveryOptionRead])
def list_delivery_options(session: Session = Depends(get_session)):
    """
    Delivery options currently offered at checkout.
    """
    return service.list_options(session)


@router.get("/{option_id}", response_model=DeliveryOptionRead)
def get_delivery_option(
    option_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return service.to_read(service.get_option(session, option_id))


@router.post(
    "",
    response_model=DeliveryOptionRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_permission("manage_products"))],
)
def create_delivery_option(
    payload: DeliveryOptionCreate,
    session: Session = Depends(get_session),
):
    return service.create_option(session, payload)


@router.patch(
    "/{option_id}",
    response_model=DeliveryOptionRead,
    dependencies=[Depends(require_permission("manage_products"))],
)
def update_delivery_option(
    option_id: uuid.UUID,
    payload: DeliveryOptionUpdate,
    session: Session = Depends(get_session),
):
    return service.update_option(session, option_id, payload)


@router.delete(
    "/{option_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission("manage_products"))],
)
def delete_delivery_option(
    option_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    service.delete_option(session, option_id)
    return None
