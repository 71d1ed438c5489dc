# storefront/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.database import get_session
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import TokenRead, UserLogin, UserRead, UserRegister
from storefront.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
service = UserService(repo)


@router.post(
    "/register",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: UserRegister,
    session: Session = Depends(get_session),
):
    """
    Create a client account.

    Staff accounts are made by promoting a client (see PATCH /users/{id}/role).
    """
    user = service.register(session, payload)
    return service.to_read(user)


@router.post("/login", response_model=TokenRead)
def login(
    payload: UserLogin,
    session: Session = Depends(get_session),
):
    """
    Exchange email + password for a bearer token.
    """
    return service.login(session, payload)
