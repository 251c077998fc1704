"""
SQLAlchemy Implementation of User Repository.
"""

from datetime import datetime
from typing import List, Optional

from cinegate.domain.models.user import User
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def username_taken(self, username: str, exclude_id: Optional[str] = None) -> bool:
        query = self.db.query(User.id).filter(User.username == username)
        if exclude_id:
            query = query.filter(User.id != exclude_id)
        return query.first() is not None

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def save(self, user: User) -> User:
        self.db.add(user)
        self.commit()
        self.db.refresh(user)
        return user

    def discard(self, user: User) -> None:
        self.db.delete(user)

    def touch_last_active(self, user_id: str, now: datetime) -> None:
        self.db.query(User).filter(User.id == user_id).update(
            {User.last_active: now}, synchronize_session=False
        )
        self.commit()

    def list_all(self) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc()).all()
