"""
SQLAlchemy Implementations of the Favorite and Watch History Repositories.
"""

from typing import Dict, List, Optional

from sqlalchemy import case, func

from cinegate.core.clock import utcnow
from cinegate.domain.models.favorite import Favorite
from cinegate.domain.models.watch_history import WatchHistoryEntry
from cinegate.domain.repositories.library_repository import (
    FavoriteRepository,
    WatchHistoryRepository,
    WatchTotals,
)
from cinegate.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyFavoriteRepository(SQLAlchemyRepository[Favorite], FavoriteRepository):

    def list_for_user(self, user_id: str) -> List[Favorite]:
        return (
            self.db.query(Favorite)
            .filter(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
            .all()
        )

    def get_for_user(self, user_id: str, tmdb_id: int) -> Optional[Favorite]:
        return (
            self.db.query(Favorite)
            .filter(Favorite.user_id == user_id, Favorite.tmdb_id == tmdb_id)
            .first()
        )

    def add(self, user_id: str, data: dict) -> Favorite:
        favorite = Favorite(user_id=user_id, **data)
        self.db.add(favorite)
        self.commit()
        self.db.refresh(favorite)
        return favorite

    def remove(self, user_id: str, tmdb_id: int) -> bool:
        count = (
            self.db.query(Favorite)
            .filter(Favorite.user_id == user_id, Favorite.tmdb_id == tmdb_id)
            .delete(synchronize_session=False)
        )
        self.commit()
        return count > 0

    def delete_for_user(self, user_id: str) -> int:
        return self.db.query(Favorite).filter(Favorite.user_id == user_id).delete(synchronize_session=False)

    def count_by_user(self) -> Dict[str, int]:
        rows = self.db.query(Favorite.user_id, func.count(Favorite.id)).group_by(Favorite.user_id).all()
        return {user_id: count for user_id, count in rows}


class SQLAlchemyWatchHistoryRepository(SQLAlchemyRepository[WatchHistoryEntry], WatchHistoryRepository):

    def list_for_user(self, user_id: str, limit: int) -> List[WatchHistoryEntry]:
        return (
            self.db.query(WatchHistoryEntry)
            .filter(WatchHistoryEntry.user_id == user_id)
            .order_by(WatchHistoryEntry.last_watched.desc(), WatchHistoryEntry.id.desc())
            .limit(limit)
            .all()
        )

    def upsert(self, user_id: str, data: dict) -> WatchHistoryEntry:
        entry = (
            self.db.query(WatchHistoryEntry)
            .filter(WatchHistoryEntry.user_id == user_id, WatchHistoryEntry.tmdb_id == data["tmdb_id"])
            .first()
        )
        if entry is None:
            entry = WatchHistoryEntry(user_id=user_id)
            self.db.add(entry)
        for field, value in data.items():
            setattr(entry, field, value)
        entry.last_watched = utcnow()
        self.commit()
        self.db.refresh(entry)
        return entry

    def evict_beyond(self, user_id: str, keep: int) -> int:
        stale_ids = [
            row.id
            for row in self.db.query(WatchHistoryEntry.id)
            .filter(WatchHistoryEntry.user_id == user_id)
            .order_by(WatchHistoryEntry.last_watched.desc(), WatchHistoryEntry.id.desc())
            .offset(keep)
            .all()
        ]
        if not stale_ids:
            return 0
        count = (
            self.db.query(WatchHistoryEntry)
            .filter(WatchHistoryEntry.id.in_(stale_ids))
            .delete(synchronize_session=False)
        )
        self.commit()
        return count

    def delete_for_user(self, user_id: str) -> int:
        return (
            self.db.query(WatchHistoryEntry)
            .filter(WatchHistoryEntry.user_id == user_id)
            .delete(synchronize_session=False)
        )

    def totals_by_user(self, default_runtimes: Dict[str, int], fallback_runtime: int) -> Dict[str, WatchTotals]:
        minutes = func.coalesce(
            func.nullif(WatchHistoryEntry.runtime, 0),
            case(default_runtimes, value=WatchHistoryEntry.media_type, else_=fallback_runtime),
        )
        rows = (
            self.db.query(WatchHistoryEntry.user_id, func.count(WatchHistoryEntry.id), func.sum(minutes))
            .group_by(WatchHistoryEntry.user_id)
            .all()
        )
        return {user_id: WatchTotals(count, int(total or 0)) for user_id, count, total in rows}

    def count_by_media_type(self) -> Dict[str, int]:
        rows = (
            self.db.query(WatchHistoryEntry.media_type, func.count(WatchHistoryEntry.id))
            .group_by(WatchHistoryEntry.media_type)
            .all()
        )
        return {media_type: count for media_type, count in rows}
