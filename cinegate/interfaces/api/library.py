"""Library API routes — favorites, watch history and leaderboard for the signed-in user."""

from fastapi import APIRouter, Depends

from cinegate.application.services import library_service
from cinegate.domain.models.user import User
from cinegate.domain.repositories.library_repository import FavoriteRepository, WatchHistoryRepository
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.domain.schemas.auth import SuccessResponse
from cinegate.domain.schemas.library import FavoriteCreate, FavoriteRead, WatchHistoryCreate, WatchHistoryRead
from cinegate.interfaces.api.deps import get_current_user, get_session_identity
from cinegate.interfaces.deps import (
    get_favorite_repository,
    get_user_repository,
    get_watch_history_repository,
)

router = APIRouter(prefix="/api", tags=["Library"])


@router.get("/favorites")
def list_favorites(
    user: User = Depends(get_current_user),
    repo: FavoriteRepository = Depends(get_favorite_repository),
):
    items = library_service.list_favorites(repo, user.id)
    return {
        "success": True,
        "favorites": [FavoriteRead.model_validate(f).model_dump(mode="json", by_alias=True) for f in items],
    }


@router.post("/favorites/toggle")
def toggle_favorite(
    body: FavoriteCreate,
    user: User = Depends(get_current_user),
    repo: FavoriteRepository = Depends(get_favorite_repository),
):
    favorited = library_service.toggle_favorite(repo, user.id, body)
    return {"success": True, "favorited": favorited}


@router.delete("/favorites/{tmdb_id}", response_model=SuccessResponse)
def remove_favorite(
    tmdb_id: int,
    user: User = Depends(get_current_user),
    repo: FavoriteRepository = Depends(get_favorite_repository),
):
    library_service.remove_favorite(repo, user.id, tmdb_id)
    return SuccessResponse()


@router.get("/watch-history")
def list_watch_history(
    user: User = Depends(get_current_user),
    repo: WatchHistoryRepository = Depends(get_watch_history_repository),
):
    items = library_service.list_watch_history(repo, user.id)
    return {
        "success": True,
        "watchHistory": [WatchHistoryRead.model_validate(e).model_dump(mode="json", by_alias=True) for e in items],
    }


@router.post("/watch-history")
def record_watch(
    body: WatchHistoryCreate,
    user: User = Depends(get_current_user),
    repo: WatchHistoryRepository = Depends(get_watch_history_repository),
):
    entry = library_service.record_watch(repo, user.id, body)
    return {"success": True, "entry": WatchHistoryRead.model_validate(entry).model_dump(mode="json", by_alias=True)}


@router.get("/leaderboard", dependencies=[Depends(get_session_identity)])
def leaderboard(
    users: UserRepository = Depends(get_user_repository),
    history: WatchHistoryRepository = Depends(get_watch_history_repository),
):
    board = library_service.get_leaderboard(users, history)
    return {"success": True, "data": [row.model_dump(mode="json", by_alias=True) for row in board]}
