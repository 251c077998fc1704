"""
SQLAlchemy implementation of the Base Repository.
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session
from cinegate.domain.repositories.base import BaseRepository
from cinegate.infrastructure.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class SQLAlchemyRepository(BaseRepository[ModelType], Generic[ModelType]):
    """Generic repository implementation for SQLAlchemy models."""

    def __init__(self, db: Session, model: Type[ModelType]):
        self.db = db
        self.model = model

    def commit(self) -> None:
        """Commit the unit of work, rolling back if the store refuses it."""
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

    def rollback(self) -> None:
        self.db.rollback()

    def savepoint(self):
        return self.db.begin_nested()

    def get_by_id(self, id: Any) -> Optional[ModelType]:
        return self.db.get(self.model, id)

