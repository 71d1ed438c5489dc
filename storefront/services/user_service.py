# storefront/services/user_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.core.auth import create_access_token, hash_password, verify_password
from storefront.core.permissions import (
    ADMIN,
    ALL_PERMISSIONS,
    SUPERADMIN,
    effective_permissions,
    ensure_access,
    role_rank,
)
from storefront.models.user import User
from storefront.repositories.user_repo import UserRepository
from storefront.schemas.user import (
    TokenRead,
    UserLogin,
    UserPermissionsUpdate,
    UserRead,
    UserRegister,
    UserRoleUpdate,
    UserStatusUpdate,
    UserUpdate,
)

logger = logging.getLogger(__name__)

STAFF_ROLES = {ADMIN, SUPERADMIN}


def _default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email if none was given.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - sign-up / login (password hashing, token issuing)
      - enforce role rules: admins manage clients, only holders of
        manage_admins touch staff accounts
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    @staticmethod
    def to_read(user: User) -> UserRead:
        return UserRead(
            id=user.id,
            email=user.email,
            name=user.name,
            role=user.role,
            permissions=sorted(effective_permissions(user.role, user.permissions)),
            is_active=user.is_active,
            created_at=user.created_at,
        )

    # ----- Auth -----

    def register(self, session: Session, payload: UserRegister) -> User:
        email = payload.email.strip().lower()
        if self.repo.get_by_email(session, email) is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already registered",
            )

        user = User(
            email=email,
            name=payload.name or _default_name_from_email(email),
            password_hash=hash_password(payload.password),
            role="client",
        )
        user = self.repo.save(session, user)
        logger.info("Registered user %s", user.id)
        return user

    def login(self, session: Session, payload: UserLogin) -> TokenRead:
        user = self.repo.get_by_email(session, payload.email)
        if user is None or not verify_password(payload.password, user.password_hash):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated",
            )
        return TokenRead(access_token=create_access_token(user.id))

    # ----- Self profile -----

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update for profile edits.
        Currently, only `name` is editable.
        """
        if payload.name is not None:
            current_user.name = payload.name

        return self.repo.save(session, current_user)

    # ----- Admin operations -----

    def list_users(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        role: str | None = None,
        is_active: bool | None = None,
        email_contains: str | None = None,
    ) -> list[User]:
        """Paginated listing; an unknown role filter is an UnknownRole error."""
        if role is not None:
            role_rank(role)
        return self.repo.find(
            session,
            role=role,
            is_active=is_active,
            email_contains=email_contains,
            skip=skip,
            limit=limit,
        )

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Raises:
            HTTPException(404): if not found.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        return user

    def _ensure_can_manage(self, actor: User, target: User, new_role: str | None = None) -> None:
        """
        Clients are managed with manage_clients; anything touching a staff
        account (or making one) needs manage_admins.
        """
        if actor.id == target.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="You cannot change your own account this way",
            )
        staff = target.role in STAFF_ROLES or new_role in STAFF_ROLES
        needed = "manage_admins" if staff else "manage_clients"
        ensure_access(actor.role, needed, actor.permissions)

    def update_role(
        self,
        session: Session,
        actor: User,
        user_id: uuid.UUID,
        payload: UserRoleUpdate,
    ) -> User:
        """
        Change a user's role. A role change resets any permission override.
        """
        role_rank(payload.role)
        user = self.get_user(session, user_id)
        self._ensure_can_manage(actor, user, payload.role)

        old_role = user.role
        user.role = payload.role
        user.permissions = None
        user = self.repo.save(session, user)
        logger.info("User %s role %s -> %s by %s", user.id, old_role, user.role, actor.id)
        return user

    def set_active(
        self,
        session: Session,
        actor: User,
        user_id: uuid.UUID,
        payload: UserStatusUpdate,
    ) -> User:
        user = self.get_user(session, user_id)
        self._ensure_can_manage(actor, user)
        user.is_active = payload.is_active
        return self.repo.save(session, user)

    def set_permissions(
        self,
        session: Session,
        user_id: uuid.UUID,
        payload: UserPermissionsUpdate,
    ) -> User:
        """
        Store (or clear) a per-user permission override.
        """
        user = self.get_user(session, user_id)

        if payload.permissions is not None:
            unknown = sorted(set(payload.permissions) - ALL_PERMISSIONS)
            if unknown:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Unknown permission: {', '.join(unknown)}",
                )
            user.permissions = sorted(set(payload.permissions))
        else:
            user.permissions = None

        return self.repo.save(session, user)
