"""
API Dependencies — repositories and the rate limiter.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from cinegate.infrastructure.database import get_db
from cinegate.domain.models.access_code import AccessCode
from cinegate.domain.models.favorite import Favorite
from cinegate.domain.models.user import User
from cinegate.domain.models.watch_history import WatchHistoryEntry
from cinegate.domain.repositories.access_code_repository import AccessCodeRepository
from cinegate.domain.repositories.library_repository import FavoriteRepository, WatchHistoryRepository
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.infrastructure.rate_limiter import RateLimiter, get_rate_limiter
from cinegate.infrastructure.repositories.access_code_repository import SQLAlchemyAccessCodeRepository
from cinegate.infrastructure.repositories.library_repository import (
    SQLAlchemyFavoriteRepository,
    SQLAlchemyWatchHistoryRepository,
)
from cinegate.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    return SQLAlchemyUserRepository(db, User)


def get_access_code_repository(db: Session = Depends(get_db)) -> AccessCodeRepository:
    return SQLAlchemyAccessCodeRepository(db, AccessCode)


def get_favorite_repository(db: Session = Depends(get_db)) -> FavoriteRepository:
    return SQLAlchemyFavoriteRepository(db, Favorite)


def get_watch_history_repository(db: Session = Depends(get_db)) -> WatchHistoryRepository:
    return SQLAlchemyWatchHistoryRepository(db, WatchHistoryEntry)


def get_password_rate_limiter() -> RateLimiter:
    """Limiter for the shared platform password (verify-password, guest profiles)."""
    return get_rate_limiter("platform-password")


def get_admin_rate_limiter() -> RateLimiter:
    return get_rate_limiter("admin-login")
