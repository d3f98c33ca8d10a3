"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select, update, delete

from hoaxify.db.models import User
from hoaxify.db.session import get_session


class SQLRepository:
    """CRUD helpers wrapping the SQLAlchemy session."""

    # -------------------------- lookups --------------------------
    def find_by_id(self, user_id: int) -> Optional[User]:
        with get_session() as session:
            return session.get(User, user_id)

    def find_by_email(self, email: str) -> Optional[User]:
        email_value = (email or "").strip()
        if not email_value:
            return None
        with get_session() as session:
            stmt = select(User).where(User.email == email_value)
            return session.execute(stmt).scalar_one_or_none()

    def find_by_username(self, username: str) -> Optional[User]:
        with get_session() as session:
            stmt = select(User).where(User.username == username)
            return session.execute(stmt).scalar_one_or_none()

    # -------------------------- writes --------------------------
    def create_user(self, username: str, email: str, password_hash: str, *, inactive: bool = False) -> User:
        now = datetime.now(timezone.utc)
        entity = User(
            username=username,
            email=email,
            password_hash=password_hash,
            inactive=inactive,
            image=None,
            created_at=now,
            updated_at=now,
        )
        with get_session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def save(self, user: User) -> User:
        """Persist every column of a (possibly detached) user and return the stored row."""
        user.updated_at = datetime.now(timezone.utc)
        with get_session() as session:
            merged = session.merge(user)
            session.commit()
            session.refresh(merged)
            return merged

    def update_password(self, user_id: int, password_hash: str) -> None:
        with get_session() as session:
            stmt = (
                update(User)
                .where(User.id == user_id)
                .values(password_hash=password_hash, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()

    def delete_user(self, user_id: int) -> None:
        with get_session() as session:
            session.execute(delete(User).where(User.id == user_id))
            session.commit()
