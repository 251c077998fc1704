"""Admin service — static admin credentials, dashboard listings, stats and user removal.

The admin is a single shared identity configured in the environment. It has
no row in user_profiles and never receives a session token.
"""

import secrets
from datetime import timedelta
from typing import List, Optional

import structlog

from cinegate.application.services.access_code_service import classify_status
from cinegate.application.services.library_service import watch_totals
from cinegate.config import get_settings
from cinegate.core.clock import as_utc, utcnow
from cinegate.core.exceptions import AuthenticationError, ConfigurationError, NotFoundError
from cinegate.domain.models.access_code import ADMIN_OWNER
from cinegate.domain.repositories.access_code_repository import AccessCodeRepository
from cinegate.domain.repositories.library_repository import FavoriteRepository, WatchHistoryRepository
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.domain.schemas.access_code import AccessCodeStatus
from cinegate.domain.schemas.admin import AdminAccessCodeRead, AdminStats, AdminUserRead

logger = structlog.get_logger(__name__)

ACTIVE_WINDOW = timedelta(days=7)


def require_admin_config() -> tuple[str, str]:
    settings = get_settings()
    if not settings.ADMIN_USERNAME or not settings.ADMIN_PASSWORD:
        logger.error("Admin credentials are not configured")
        raise ConfigurationError()
    return settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD


def check_admin_credentials(username: str, password: str) -> None:
    """Constant-time comparison against the configured admin credentials."""
    expected_username, expected_password = require_admin_config()
    username_ok = secrets.compare_digest(username.encode("utf-8"), expected_username.encode("utf-8"))
    password_ok = secrets.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))
    if not (username_ok and password_ok):
        raise AuthenticationError("Invalid credentials")


def _is_recently_active(last_active, now) -> bool:
    return bool(last_active) and as_utc(last_active) > now - ACTIVE_WINDOW


def list_users(
    users: UserRepository,
    favorites: FavoriteRepository,
    history: WatchHistoryRepository,
) -> List[AdminUserRead]:
    now = utcnow()
    favorite_counts = favorites.count_by_user()
    totals = watch_totals(history)

    return [
        AdminUserRead(
            id=user.id,
            username=user.username,
            is_guest=user.is_guest,
            join_date=user.created_at,
            last_active=user.last_active,
            total_watched=totals[user.id].watched if user.id in totals else 0,
            total_favorites=favorite_counts.get(user.id, 0),
            is_active=_is_recently_active(user.last_active, now),
        )
        for user in users.list_all()
    ]


def list_access_codes(codes: AccessCodeRepository, users: UserRepository) -> List[AdminAccessCodeRead]:
    now = utcnow()
    usernames = {user.id: user.username for user in users.list_all()}

    def creator_name(created_by: str) -> str:
        if created_by == ADMIN_OWNER:
            return "Admin"
        return usernames.get(created_by) or "Unknown User"

    return [
        AdminAccessCodeRead(
            id=code.id,
            code=code.code,
            created_by=code.created_by,
            created_by_name=creator_name(code.created_by),
            created_at=code.created_at,
            expires_at=code.expires_at,
            used_by=code.used_by,
            used_at=code.used_at,
            is_active=code.is_active,
            admin_action=code.admin_action,
            status=classify_status(code, now),
        )
        for code in codes.list_all()
    ]


def get_stats(
    users: UserRepository,
    codes: AccessCodeRepository,
    favorites: FavoriteRepository,
    history: WatchHistoryRepository,
) -> AdminStats:
    now = utcnow()
    all_users = users.list_all()

    status_counts = {status: 0 for status in AccessCodeStatus}
    all_codes = codes.list_all()
    for code in all_codes:
        status_counts[classify_status(code, now)] += 1

    total_minutes = sum(t.minutes for t in watch_totals(history).values())
    by_media_type = history.count_by_media_type()

    return AdminStats(
        total_users=len(all_users),
        active_users=sum(1 for user in all_users if _is_recently_active(user.last_active, now)),
        total_access_codes=len(all_codes),
        active_access_codes=status_counts[AccessCodeStatus.ACTIVE],
        used_access_codes=status_counts[AccessCodeStatus.USED],
        expired_access_codes=status_counts[AccessCodeStatus.EXPIRED],
        revoked_access_codes=status_counts[AccessCodeStatus.REVOKED],
        total_watch_time=round(total_minutes / 60),
        total_movies_watched=by_media_type.get("movie", 0),
        total_tv_watched=by_media_type.get("tv", 0),
        total_favorites=sum(favorites.count_by_user().values()),
    )


def remove_user(
    users: UserRepository,
    codes: AccessCodeRepository,
    favorites: FavoriteRepository,
    history: WatchHistoryRepository,
    user_id: Optional[str],
) -> str:
    """Delete a user with their watch history, favorites and self-issued codes, in one transaction."""
    user = users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    username = user.username or user.id

    watched = history.delete_for_user(user_id)
    favorited = favorites.delete_for_user(user_id)
    issued = codes.delete_by_owner(user_id)
    users.discard(user)
    users.commit()

    logger.info(
        "User removed",
        user_id=user_id,
        watch_history=watched,
        favorites=favorited,
        access_codes=issued,
    )
    return username
