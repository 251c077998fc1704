"""Access code service — issue, verify, consume and revoke one-time registration codes.

A code is consumable while it is active, unused and unexpired. Consumption
and revocation are terminal: nothing turns an inactive code active again.
"""

import secrets
import string
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cinegate.config import get_settings
from cinegate.core.clock import as_utc, utcnow
from cinegate.core.exceptions import (
    AccessCodeAlreadyUsedError,
    AccessCodeExpiredError,
    AccessCodeNotFoundError,
    GenerationExhaustedError,
    NotFoundError,
)
from cinegate.domain.models.access_code import AccessCode
from cinegate.domain.repositories.access_code_repository import AccessCodeRepository
from cinegate.domain.schemas.access_code import AccessCodeStatus

settings = get_settings()
logger = structlog.get_logger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


def normalize_code(code: str) -> str:
    return code.strip().upper()


def generate_code(length: Optional[int] = None) -> str:
    """Draw a code uniformly from A-Z0-9."""
    length = length or settings.ACCESS_CODE_LENGTH
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def classify_status(code: AccessCode, now: Optional[datetime] = None) -> AccessCodeStatus:
    """Dashboard status of a code. Used wins over revoked, revoked wins over expired."""
    now = now or utcnow()
    if code.used_at is not None:
        return AccessCodeStatus.USED
    if not code.is_active:
        return AccessCodeStatus.REVOKED
    if as_utc(code.expires_at) <= now:
        return AccessCodeStatus.EXPIRED
    return AccessCodeStatus.ACTIVE


def ensure_consumable(code: Optional[AccessCode], now: datetime) -> AccessCode:
    """
    Raise the error a consumer should see for this code, or return it.

    Order: unknown, expired, already used, revoked. Revoked codes report the
    same error as unknown ones.
    """
    if code is None:
        raise AccessCodeNotFoundError()
    if as_utc(code.expires_at) <= now:
        raise AccessCodeExpiredError()
    if code.used_at is not None:
        raise AccessCodeAlreadyUsedError()
    if not code.is_active:
        raise AccessCodeNotFoundError()
    return code


def find_consumable(repo: AccessCodeRepository, code: str, now: Optional[datetime] = None) -> AccessCode:
    """Look a code up and check it without consuming it."""
    now = now or utcnow()
    return ensure_consumable(repo.get_by_code(normalize_code(code)), now)


def generate_access_code(
    repo: AccessCodeRepository,
    owner_id: str,
    now: Optional[datetime] = None,
) -> AccessCode:
    """
    Issue a new code for a principal (a user id or the admin sentinel).

    Collisions are retried up to ACCESS_CODE_MAX_ATTEMPTS times. Once the new
    code is stored, the owner's previous active codes are deactivated; a
    failure there is logged and does not undo the issuance.
    """
    now = now or utcnow()
    expires_at = now + timedelta(hours=settings.ACCESS_CODE_TTL_HOURS)

    access_code = None
    for attempt in range(1, settings.ACCESS_CODE_MAX_ATTEMPTS + 1):
        candidate = generate_code()
        try:
            if repo.code_exists(candidate):
                logger.warning("Access code collision", attempt=attempt)
                continue
            access_code = repo.create_code(candidate, owner_id, now, expires_at)
            break
        except IntegrityError:
            logger.warning("Access code collision on insert", attempt=attempt)
        except SQLAlchemyError:
            repo.rollback()
            logger.exception("Access code insert failed", attempt=attempt)

    if access_code is None:
        logger.error("Access code generation exhausted", owner=owner_id)
        raise GenerationExhaustedError()

    try:
        superseded = repo.deactivate_others(owner_id, access_code.id, "superseded")
        if superseded:
            logger.info("Previous access codes deactivated", owner=owner_id, count=superseded)
    except SQLAlchemyError:
        repo.rollback()
        logger.exception("Failed to deactivate previous access codes", owner=owner_id)

    logger.info("Access code issued", owner=owner_id, code_id=access_code.id)
    return access_code


def verify_and_consume(
    repo: AccessCodeRepository,
    code: str,
    consuming_user_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AccessCode:
    """Check a code and mark it used in one conditional update. Exactly one caller wins."""
    now = now or utcnow()
    access_code = find_consumable(repo, code, now)

    if not repo.consume(access_code.id, consuming_user_id, now):
        # Another request consumed or revoked it between our read and write
        ensure_consumable(repo.reload(access_code.id), now)
        raise AccessCodeAlreadyUsedError()

    logger.info("Access code consumed", code_id=access_code.id, used_by=consuming_user_id)
    return access_code


def revoke_access_code(repo: AccessCodeRepository, code_id: int) -> AccessCode:
    """Deactivate a code. Revoking an inactive code is a successful no-op."""
    if repo.revoke(code_id):
        logger.info("Access code revoked", code_id=code_id)
    access_code = repo.get_by_id(code_id)
    if access_code is None:
        raise NotFoundError("Access code not found")
    return access_code


def get_current_access_code(
    repo: AccessCodeRepository,
    owner_id: str,
    now: Optional[datetime] = None,
) -> Optional[AccessCode]:
    return repo.get_current_for_owner(owner_id, now or utcnow())
