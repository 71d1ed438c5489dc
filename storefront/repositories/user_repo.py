# storefront/repositories/user_repo.py
import uuid

from sqlmodel import Session, select

from storefront.models.user import User


class UserRepository:
    """Account lookups and writes. Emails are matched lowercase."""

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        return session.get(User, user_id)

    def get_by_email(self, session: Session, email: str) -> User | None:
        stmt = select(User).where(User.email == email.strip().lower())
        return session.exec(stmt).first()

    def find(
        self,
        session: Session,
        role: str | None = None,
        is_active: bool | None = None,
        email_contains: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[User]:
        """Oldest accounts first; every filter is optional."""
        stmt = select(User)
        if role is not None:
            stmt = stmt.where(User.role == role)
        if is_active is not None:
            stmt = stmt.where(User.is_active == is_active)
        if email_contains:
            stmt = stmt.where(User.email.contains(email_contains.strip().lower()))
        stmt = stmt.order_by(User.created_at, User.email).offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def save(self, session: Session, user: User) -> User:
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
