"""Library service — favorites, watch history and the watch-time leaderboard."""

from typing import Dict, List

import structlog

from cinegate.config import get_settings
from cinegate.domain.models.favorite import Favorite
from cinegate.domain.models.watch_history import WatchHistoryEntry
from cinegate.domain.repositories.library_repository import (
    FavoriteRepository,
    WatchHistoryRepository,
    WatchTotals,
)
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.domain.schemas.library import FavoriteCreate, LeaderboardEntry, WatchHistoryCreate

logger = structlog.get_logger(__name__)

# Estimates used when the catalog gave no runtime
DEFAULT_RUNTIME_MINUTES = {"movie": 120, "tv": 45}


def watch_totals(history: WatchHistoryRepository) -> Dict[str, WatchTotals]:
    return history.totals_by_user(DEFAULT_RUNTIME_MINUTES, DEFAULT_RUNTIME_MINUTES["tv"])


def list_favorites(repo: FavoriteRepository, user_id: str) -> List[Favorite]:
    return repo.list_for_user(user_id)


def toggle_favorite(repo: FavoriteRepository, user_id: str, media: FavoriteCreate) -> bool:
    """Add the media to favorites, or remove it if already there. Returns the new state."""
    if repo.get_for_user(user_id, media.tmdb_id):
        repo.remove(user_id, media.tmdb_id)
        logger.info("Favorite removed", user_id=user_id, tmdb_id=media.tmdb_id)
        return False

    repo.add(user_id, media.model_dump())
    logger.info("Favorite added", user_id=user_id, tmdb_id=media.tmdb_id)
    return True


def remove_favorite(repo: FavoriteRepository, user_id: str, tmdb_id: int) -> bool:
    return repo.remove(user_id, tmdb_id)


def list_watch_history(repo: WatchHistoryRepository, user_id: str) -> List[WatchHistoryEntry]:
    return repo.list_for_user(user_id, get_settings().WATCH_HISTORY_LIMIT)


def record_watch(repo: WatchHistoryRepository, user_id: str, media: WatchHistoryCreate) -> WatchHistoryEntry:
    """Upsert an entry as the most recent and evict the oldest beyond the cap."""
    entry = repo.upsert(user_id, media.model_dump())
    evicted = repo.evict_beyond(user_id, get_settings().WATCH_HISTORY_LIMIT)
    if evicted:
        logger.debug("Watch history trimmed", user_id=user_id, evicted=evicted)
    return entry


def get_leaderboard(users: UserRepository, history: WatchHistoryRepository) -> List[LeaderboardEntry]:
    totals = watch_totals(history)
    empty = WatchTotals(0, 0)

    board = [
        LeaderboardEntry(
            id=user.id,
            username=user.username or f"User-{user.id[:8]}",
            total_watch_hours=round(totals.get(user.id, empty).minutes / 60),
            total_watched=totals.get(user.id, empty).watched,
            join_date=user.created_at,
            last_active=user.last_active,
        )
        for user in users.list_all()
    ]
    board.sort(key=lambda item: item.total_watch_hours, reverse=True)
    return board
