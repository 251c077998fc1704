"""Auth service — password hashing, session tokens and account operations."""

from datetime import datetime, timedelta
from typing import Optional

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cinegate.application.services.access_code_service import ensure_consumable, find_consumable
from cinegate.config import get_settings
from cinegate.core.clock import utcnow
from cinegate.core.exceptions import (
    AccessCodeAlreadyUsedError,
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from cinegate.domain.models.user import User
from cinegate.domain.repositories.access_code_repository import AccessCodeRepository
from cinegate.domain.repositories.user_repository import UserRepository
from cinegate.domain.schemas.auth import SessionIdentity

settings = get_settings()
logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

INVALID_CREDENTIALS = "Invalid username or password"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognised or corrupt hash
        return False


def require_signing_secret() -> str:
    secret = get_settings().JWT_SECRET
    if not secret:
        logger.error("JWT_SECRET is not configured")
        raise ConfigurationError()
    return secret


def create_session_token(user: User, now: Optional[datetime] = None) -> str:
    """Signed token carrying the user's id and username, valid SESSION_EXPIRE_DAYS."""
    secret = require_signing_secret()
    now = now or utcnow()
    claims = {
        "sub": user.id,
        "username": user.username,
        "iat": now,
        "exp": now + timedelta(days=get_settings().SESSION_EXPIRE_DAYS),
    }
    return jwt.encode(claims, secret, algorithm=get_settings().JWT_ALGORITHM)


def decode_session_token(token: str) -> Optional[SessionIdentity]:
    """Signature and expiry check only. There is no server-side revocation list."""
    secret = require_signing_secret()
    try:
        payload = jwt.decode(token, secret, algorithms=[get_settings().JWT_ALGORITHM])
    except JWTError:
        return None

    user_id = payload.get("sub")
    if not user_id:
        return None
    return SessionIdentity(user_id=user_id, username=payload.get("username"))


def authenticate_user(users: UserRepository, username: str, password: str) -> User:
    """
    Verify credentials. Unknown users, guests and wrong passwords all raise
    the same AuthenticationError so usernames cannot be enumerated.
    """
    user = users.get_by_username(username)
    if user is None or not user.password_hash:
        # Burn the same hashing time as a real check
        pwd_context.dummy_verify()
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not verify_password(password, user.password_hash):
        raise AuthenticationError(INVALID_CREDENTIALS)

    try:
        users.touch_last_active(user.id, utcnow())
    except SQLAlchemyError:
        users.rollback()
        logger.exception("Failed to update last_active", user_id=user.id)

    return user


def register_user(
    users: UserRepository,
    codes: AccessCodeRepository,
    username: str,
    password: str,
    access_code: str,
    now: Optional[datetime] = None,
) -> User:
    """
    Create an account gated by a consumable access code.

    The code is checked first, then the user is inserted and the code is
    consumed in the same transaction with a conditional update. Losing the
    consumption race rolls the user back. A store failure while marking the
    code is logged and the user is kept.
    """
    now = now or utcnow()
    code = find_consumable(codes, access_code, now)

    if users.username_taken(username):
        raise ValidationError("Username already exists")

    user = User(
        username=username,
        password_hash=hash_password(password),
        is_guest=False,
        created_at=now,
        last_active=now,
    )
    users.add(user)

    consumed = True
    try:
        with codes.savepoint():
            consumed = codes.consume(code.id, user.id, now, commit=False)
    except SQLAlchemyError:
        logger.exception("Failed to mark access code used", code_id=code.id, user_id=user.id)

    if not consumed:
        code_id = code.id
        users.rollback()
        ensure_consumable(codes.reload(code_id), now)
        raise AccessCodeAlreadyUsedError()

    try:
        users.commit()
    except IntegrityError:
        # Same username registered concurrently
        raise ValidationError("Username already exists")

    logger.info("User registered", user_id=user.id, code_id=code.id)
    return user


def create_guest_user(users: UserRepository) -> User:
    """Credential-less profile for the shared-password browsing mode."""
    user = User(is_guest=True)
    users.add(user)
    users.commit()
    logger.info("Guest profile created", user_id=user.id)
    return user


def change_password(users: UserRepository, user_id: str, current_password: str, new_password: str) -> User:
    user = users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    user.password_hash = hash_password(new_password)
    users.save(user)
    logger.info("Password changed", user_id=user.id)
    return user


def update_username(users: UserRepository, user_id: str, username: str) -> User:
    user = users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    if users.username_taken(username, exclude_id=user_id):
        raise ConflictError("Username already taken")

    user.username = username
    try:
        users.save(user)
    except IntegrityError:
        raise ConflictError("Username already taken")
    logger.info("Username updated", user_id=user.id)
    return user
