"""Auth API routes — register, login, logout, me, password and username changes, guest profiles."""

import structlog
from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from cinegate.application.services.auth_service import (
    authenticate_user,
    change_password,
    create_guest_user,
    create_session_token,
    register_user,
    require_signing_secret,
    update_username,
)
from cinegate.application.services.gate_service import check_platform_password
from cinegate.config import get_settings
from cinegate.core.exceptions import AccessCodeError, error_payload
from cinegate.core.middleware import client_ip
from cinegate.domain.models.user import User
from cinegate.domain.repositories.access_code_repository import AccessCodeRepository
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.domain.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    PasswordRequest,
    RegisterRequest,
    SuccessResponse,
    UpdateUsernameRequest,
    UserRead,
)
from cinegate.infrastructure.rate_limiter import RateLimiter
from cinegate.interfaces.api.deps import get_current_user
from cinegate.interfaces.deps import (
    get_access_code_repository,
    get_password_rate_limiter,
    get_user_repository,
)

router = APIRouter(prefix="/api/auth", tags=["Auth"])
logger = structlog.get_logger(__name__)


def _set_session_cookie(response: Response, token: str) -> None:
    """HTTP-only, SameSite=Lax cookie; Secure outside development."""
    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.SESSION_EXPIRE_DAYS * 24 * 60 * 60,
        path="/",
    )


def _clear_session_cookie(response: Response) -> None:
    settings = get_settings()
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


def _signed_in(response: Response, user: User) -> AuthResponse:
    _set_session_cookie(response, create_session_token(user))
    return AuthResponse(user=UserRead.model_validate(user))


@router.post("/register", response_model=AuthResponse)
def register(
    body: RegisterRequest,
    response: Response,
    users: UserRepository = Depends(get_user_repository),
    codes: AccessCodeRepository = Depends(get_access_code_repository),
):
    # Fail before touching the code if we could not sign a session afterwards
    require_signing_secret()
    try:
        user = register_user(users, codes, body.username, body.password, body.access_code)
    except AccessCodeError as exc:
        logger.info("Registration rejected", reason=exc.__class__.__name__)
        return JSONResponse(status_code=400, content=error_payload(exc))

    return _signed_in(response, user)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    users: UserRepository = Depends(get_user_repository),
):
    require_signing_secret()
    user = authenticate_user(users, body.username, body.password)
    logger.info("User logged in", user_id=user.id)
    return _signed_in(response, user)


@router.post("/logout", response_model=SuccessResponse)
def logout(response: Response):
    """Clears the cookie. The token itself stays valid until it expires."""
    _clear_session_cookie(response)
    return SuccessResponse(message="Logged out")


@router.get("/me", response_model=AuthResponse)
def get_me(user: User = Depends(get_current_user)):
    return AuthResponse(user=UserRead.model_validate(user))


@router.post("/change-password", response_model=SuccessResponse)
def change_password_route(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    change_password(users, user.id, body.current_password, body.new_password)
    return SuccessResponse(message="Password updated")


@router.post("/update-username", response_model=AuthResponse)
def update_username_route(
    body: UpdateUsernameRequest,
    user: User = Depends(get_current_user),
    users: UserRepository = Depends(get_user_repository),
):
    updated = update_username(users, user.id, body.username)
    return AuthResponse(user=UserRead.model_validate(updated))


@router.post("/guest", response_model=AuthResponse)
def create_guest(
    body: PasswordRequest,
    request: Request,
    response: Response,
    users: UserRepository = Depends(get_user_repository),
    limiter: RateLimiter = Depends(get_password_rate_limiter),
):
    """Guest profile for the shared-password browsing mode."""
    require_signing_secret()
    check_platform_password(limiter, client_ip(request), body.password)
    user = create_guest_user(users)
    return _signed_in(response, user)
