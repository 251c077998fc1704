"""FastAPI dependencies — session cookie auth and the admin gate."""

from typing import Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from cinegate.application.services.admin_service import check_admin_credentials
from cinegate.application.services.auth_service import decode_session_token
from cinegate.config import get_settings
from cinegate.core.exceptions import AuthenticationError
from cinegate.domain.models.user import User
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.domain.schemas.auth import SessionIdentity
from cinegate.interfaces.deps import get_user_repository

logger = structlog.get_logger(__name__)
admin_basic = HTTPBasic(auto_error=False, realm="cinegate-admin")


def read_session_identity(request: Request) -> Optional[SessionIdentity]:
    """Identity from the session cookie, or None when absent or invalid."""
    token = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if not token:
        return None
    identity = decode_session_token(token)
    if identity is not None:
        request.state.identity = identity
    return identity


def get_session_identity(request: Request) -> SessionIdentity:
    """Absent, malformed and expired tokens all produce the same 401."""
    identity = read_session_identity(request)
    if identity is None:
        raise AuthenticationError("Not authenticated")
    return identity


def get_current_user(
    identity: SessionIdentity = Depends(get_session_identity),
    users: UserRepository = Depends(get_user_repository),
) -> User:
    """The session's user, freshly loaded. A token for a removed user is rejected."""
    user = users.get_by_id(identity.user_id)
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


def require_admin(credentials: Optional[HTTPBasicCredentials] = Depends(admin_basic)) -> str:
    """HTTP Basic check against the static admin credentials."""
    if not get_settings().ADMIN_REQUIRE_BASIC_AUTH:
        return "admin"
    if credentials is None:
        raise AuthenticationError("Admin authentication required")
    check_admin_credentials(credentials.username, credentials.password)
    return credentials.username
