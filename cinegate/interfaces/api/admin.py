"""Admin API routes — login check, users, access codes, stats, revocation and user removal."""

from fastapi import APIRouter, Depends, Request, Response

from cinegate.application.services import admin_service
from cinegate.application.services.access_code_service import generate_access_code, revoke_access_code
from cinegate.application.services.gate_service import check_admin_login
from cinegate.config import get_settings
from cinegate.core.middleware import client_ip
from cinegate.domain.models.access_code import ADMIN_OWNER
from cinegate.domain.repositories.access_code_repository import AccessCodeRepository
from cinegate.domain.repositories.library_repository import FavoriteRepository, WatchHistoryRepository
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.domain.schemas.access_code import IssuedAccessCode
from cinegate.domain.schemas.admin import AdminLoginRequest, RemoveUserRequest, RevokeAccessCodeRequest
from cinegate.domain.schemas.auth import SuccessResponse
from cinegate.infrastructure.rate_limiter import RateLimiter
from cinegate.interfaces.api.deps import require_admin
from cinegate.interfaces.deps import (
    get_access_code_repository,
    get_admin_rate_limiter,
    get_favorite_repository,
    get_user_repository,
    get_watch_history_repository,
)

router = APIRouter(prefix="/api", tags=["Admin"])
admin_router = APIRouter(prefix="/api/admin", tags=["Admin"], dependencies=[Depends(require_admin)])

NO_CACHE = {
    "Cache-Control": "no-store, no-cache, must-revalidate, proxy-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


@router.post("/admin-login")
def admin_login(
    body: AdminLoginRequest,
    request: Request,
    limiter: RateLimiter = Depends(get_admin_rate_limiter),
):
    """
    Check the static admin credentials. No token is issued: the dashboard
    keeps its own flag and drops it after `expiresIn` seconds.
    """
    check_admin_login(limiter, client_ip(request), body.username, body.password)
    return {
        "success": True,
        "message": "Admin authentication successful",
        "expiresIn": get_settings().ADMIN_SESSION_HOURS * 3600,
    }


@admin_router.get("/users")
def list_users(
    response: Response,
    users: UserRepository = Depends(get_user_repository),
    favorites: FavoriteRepository = Depends(get_favorite_repository),
    history: WatchHistoryRepository = Depends(get_watch_history_repository),
):
    response.headers.update(NO_CACHE)
    rows = admin_service.list_users(users, favorites, history)
    return {"success": True, "users": [row.model_dump(mode="json", by_alias=True) for row in rows]}


@admin_router.get("/access-codes")
def list_access_codes(
    response: Response,
    codes: AccessCodeRepository = Depends(get_access_code_repository),
    users: UserRepository = Depends(get_user_repository),
):
    response.headers.update(NO_CACHE)
    rows = admin_service.list_access_codes(codes, users)
    return {"success": True, "accessCodes": [row.model_dump(mode="json", by_alias=True) for row in rows]}


@admin_router.get("/stats")
def stats(
    response: Response,
    users: UserRepository = Depends(get_user_repository),
    codes: AccessCodeRepository = Depends(get_access_code_repository),
    favorites: FavoriteRepository = Depends(get_favorite_repository),
    history: WatchHistoryRepository = Depends(get_watch_history_repository),
):
    response.headers.update(NO_CACHE)
    result = admin_service.get_stats(users, codes, favorites, history)
    return {"success": True, "stats": result.model_dump(mode="json", by_alias=True)}


@admin_router.post("/generate-access-code", response_model=IssuedAccessCode)
def admin_generate_access_code(codes: AccessCodeRepository = Depends(get_access_code_repository)):
    access_code = generate_access_code(codes, ADMIN_OWNER)
    return IssuedAccessCode(code=access_code.code, expires_at=access_code.expires_at)


@admin_router.post("/revoke-access-code", response_model=SuccessResponse)
def revoke(
    body: RevokeAccessCodeRequest,
    codes: AccessCodeRepository = Depends(get_access_code_repository),
):
    revoke_access_code(codes, body.code_id)
    return SuccessResponse(message="Access code revoked successfully")


@admin_router.post("/remove-user", response_model=SuccessResponse)
def remove_user(
    body: RemoveUserRequest,
    users: UserRepository = Depends(get_user_repository),
    codes: AccessCodeRepository = Depends(get_access_code_repository),
    favorites: FavoriteRepository = Depends(get_favorite_repository),
    history: WatchHistoryRepository = Depends(get_watch_history_repository),
):
    username = admin_service.remove_user(users, codes, favorites, history, body.user_id)
    return SuccessResponse(message=f'User "{username}" removed successfully')
