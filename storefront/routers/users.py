# storefront/routers/users.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from storefront.core.auth import require_permission
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import (
    UserPermissionsUpdate,
    UserRead,
    UserRoleUpdate,
    UserStatusUpdate,
    UserUpdate,
)
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_permission("manage_own_profile"))):
    """
    Return the authenticated user's profile, with effective permissions.
    """
    return service.to_read(current_user)


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("manage_own_profile")),
):
    """
    Update the authenticated user's profile (partial update).

    Currently, only `name` is editable.
    """
    return service.to_read(service.update_me(session, current_user, payload))


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[UserRead],
    dependencies=[Depends(require_permission("view_clients"))],
)
def list_users(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    role: str | None = None,
    is_active: bool | None = None,
    email: str | None = None,
):
    """
    List users (admin only).

    Optional filters: role, is_active, and `email` (substring match).
    """
    users = service.list_users(
        session,
        skip=skip,
        limit=limit,
        role=role,
        is_active=is_active,
        email_contains=email,
    )
    return [service.to_read(u) for u in users]


@router.get(
    "/{user_id}",
    response_model=UserRead,
    dependencies=[Depends(require_permission("view_clients"))],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a specific user by id (admin only).
    """
    return service.to_read(service.get_user(session, user_id))


@router.patch("/{user_id}/role", response_model=UserRead)
def change_role(
    user_id: uuid.UUID,
    payload: UserRoleUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("manage_clients")),
):
    """
    Update a user's role.

    Allowed roles: client, admin, superadmin. Making or changing a staff
    account additionally requires manage_admins.
    """
    return service.to_read(service.update_role(session, current_user, user_id, payload))


@router.patch("/{user_id}/status", response_model=UserRead)
def change_status(
    user_id: uuid.UUID,
    payload: UserStatusUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_permission("manage_clients")),
):
    """
    Activate or deactivate an account. Deactivated accounts cannot log in.
    """
    return service.to_read(service.set_active(session, current_user, user_id, payload))


@router.put(
    "/{user_id}/permissions",
    response_model=UserRead,
    dependencies=[Depends(require_permission("manage_permissions"))],
)
def set_permissions(
    user_id: uuid.UUID,
    payload: UserPermissionsUpdate,
    session: Session = Depends(get_session),
):
    """
    Override a user's permission set (superadmin only).
    Send `{"permissions": null}` to go back to the role's default set.
    """
    return service.to_read(service.set_permissions(session, user_id, payload))
