"""
Favorites and Watch History Repository Interfaces.
Per-owner operations plus the aggregates behind the dashboard and leaderboard.
"""

from typing import Dict, List, NamedTuple, Optional

from cinegate.domain.models.favorite import Favorite
from cinegate.domain.models.watch_history import WatchHistoryEntry
from cinegate.domain.repositories.base import BaseRepository


class WatchTotals(NamedTuple):
    watched: int
    minutes: int


class FavoriteRepository(BaseRepository[Favorite]):

    def list_for_user(self, user_id: str) -> List[Favorite]:
        ...

    def get_for_user(self, user_id: str, tmdb_id: int) -> Optional[Favorite]:
        ...

    def add(self, user_id: str, data: dict) -> Favorite:
        ...

    def remove(self, user_id: str, tmdb_id: int) -> bool:
        ...

    def delete_for_user(self, user_id: str) -> int:
        ...

    def count_by_user(self) -> Dict[str, int]:
        ...


class WatchHistoryRepository(BaseRepository[WatchHistoryEntry]):

    def list_for_user(self, user_id: str, limit: int) -> List[WatchHistoryEntry]:
        """Most recently watched first."""
        ...

    def upsert(self, user_id: str, data: dict) -> WatchHistoryEntry:
        ...

    def evict_beyond(self, user_id: str, keep: int) -> int:
        """Delete all but the `keep` most recent entries of a user."""
        ...

    def delete_for_user(self, user_id: str) -> int:
        ...

    def totals_by_user(self, default_runtimes: Dict[str, int], fallback_runtime: int) -> Dict[str, WatchTotals]:
        """
        Entry count and watched minutes per user, aggregated in the store.
        Entries without a runtime count as their media type's default.
        """
        ...

    def count_by_media_type(self) -> Dict[str, int]:
        ...
