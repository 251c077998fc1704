"""Access code API routes — issue, inspect and verify one-time codes, plus the platform password gate."""

from fastapi import APIRouter, Depends, Request

from cinegate.application.services.access_code_service import (
    generate_access_code,
    get_current_access_code,
    verify_and_consume,
)
from cinegate.application.services.gate_service import check_platform_password
from cinegate.core.exceptions import ForbiddenError, NotFoundError
from cinegate.core.middleware import client_ip
from cinegate.domain.models.user import User
from cinegate.domain.repositories.access_code_repository import AccessCodeRepository
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.domain.schemas.access_code import (
    AccessCodeRead,
    GenerateAccessCodeRequest,
    IssuedAccessCode,
    VerifyAccessCodeRequest,
)
from cinegate.domain.schemas.auth import PasswordRequest, SessionIdentity, SuccessResponse
from cinegate.infrastructure.rate_limiter import RateLimiter
from cinegate.interfaces.api.deps import get_current_user, get_session_identity
from cinegate.interfaces.deps import (
    get_access_code_repository,
    get_password_rate_limiter,
    get_user_repository,
)

router = APIRouter(prefix="/api", tags=["Access Codes"])


@router.post("/generate-access-code", response_model=IssuedAccessCode)
def generate(
    body: GenerateAccessCodeRequest,
    identity: SessionIdentity = Depends(get_session_identity),
    users: UserRepository = Depends(get_user_repository),
    codes: AccessCodeRepository = Depends(get_access_code_repository),
):
    """Issue a code owned by the signed-in user; supersedes their previous code."""
    user_id = body.user_id or identity.user_id
    if user_id != identity.user_id:
        raise ForbiddenError("Cannot issue access codes for another user")
    if users.get_by_id(user_id) is None:
        raise NotFoundError("User not found")

    access_code = generate_access_code(codes, user_id)
    return IssuedAccessCode(code=access_code.code, expires_at=access_code.expires_at)


@router.get("/access-code")
def current_access_code(
    user: User = Depends(get_current_user),
    codes: AccessCodeRepository = Depends(get_access_code_repository),
):
    """The caller's still-consumable code, if any."""
    access_code = get_current_access_code(codes, user.id)
    return {
        "success": True,
        "accessCode": AccessCodeRead.model_validate(access_code).model_dump(mode="json") if access_code else None,
    }


@router.post("/verify-access-code", response_model=SuccessResponse)
def verify(
    body: VerifyAccessCodeRequest,
    users: UserRepository = Depends(get_user_repository),
    codes: AccessCodeRepository = Depends(get_access_code_repository),
):
    """Consume a code. Unknown, revoked, expired and used codes answer 401."""
    consuming_user_id = None
    if body.user_id and users.get_by_id(body.user_id) is not None:
        consuming_user_id = body.user_id

    verify_and_consume(codes, body.code, consuming_user_id)
    return SuccessResponse()


@router.post("/verify-password", response_model=SuccessResponse)
def verify_password(
    body: PasswordRequest,
    request: Request,
    limiter: RateLimiter = Depends(get_password_rate_limiter),
):
    """Shared platform password for the non-account browsing mode."""
    check_platform_password(limiter, client_ip(request), body.password)
    return SuccessResponse()
