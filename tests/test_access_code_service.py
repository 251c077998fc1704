from datetime import timedelta

import pytest

from cinegate.application.services.access_code_service import (
    CODE_ALPHABET,
    classify_status,
    generate_access_code,
    get_current_access_code,
    revoke_access_code,
    verify_and_consume,
)
from cinegate.core.clock import utcnow
from cinegate.core.exceptions import (
    AccessCodeAlreadyUsedError,
    AccessCodeExpiredError,
    AccessCodeNotFoundError,
    GenerationExhaustedError,
    NotFoundError,
)
from cinegate.domain.models.access_code import ADMIN_OWNER, AccessCode
from cinegate.domain.schemas.access_code import AccessCodeStatus
from cinegate.infrastructure.database import SessionLocal
from cinegate.infrastructure.repositories.access_code_repository import SQLAlchemyAccessCodeRepository


def test_generated_code_shape(codes):
    now = utcnow()
    issued = generate_access_code(codes, ADMIN_OWNER, now=now)

    assert len(issued.code) == 12
    assert set(issued.code) <= set(CODE_ALPHABET)
    assert issued.is_active is True
    assert issued.used_at is None
    assert issued.expires_at == now + timedelta(hours=24)


def test_code_is_consumed_exactly_once(codes):
    issued = generate_access_code(codes, ADMIN_OWNER)

    verify_and_consume(codes, issued.code, "user-1")
    with pytest.raises(AccessCodeAlreadyUsedError):
        verify_and_consume(codes, issued.code, "user-2")

    stored = codes.reload(issued.id)
    assert stored.used_by == "user-1"
    assert stored.is_active is False


def test_lookup_is_case_and_whitespace_insensitive(codes):
    issued = generate_access_code(codes, ADMIN_OWNER)

    verify_and_consume(codes, f"  {issued.code.lower()} ")

    assert codes.reload(issued.id).used_at is not None


def test_unknown_code(codes):
    with pytest.raises(AccessCodeNotFoundError) as exc_info:
        verify_and_consume(codes, "NOSUCHCODE00")
    assert exc_info.value.message == "Invalid or expired access code"


def test_code_valid_at_23_hours_expired_at_25(codes):
    issued_at = utcnow()
    early = generate_access_code(codes, "owner-a", now=issued_at)
    late = generate_access_code(codes, "owner-b", now=issued_at)

    verify_and_consume(codes, early.code, now=issued_at + timedelta(hours=23))
    with pytest.raises(AccessCodeExpiredError):
        verify_and_consume(codes, late.code, now=issued_at + timedelta(hours=25))

    assert codes.reload(late.id).used_at is None


def test_revoked_code_reads_as_unknown(codes):
    issued = generate_access_code(codes, ADMIN_OWNER)
    revoke_access_code(codes, issued.id)

    with pytest.raises(AccessCodeNotFoundError):
        verify_and_consume(codes, issued.code)


def test_expiry_reported_before_revocation(codes):
    issued_at = utcnow() - timedelta(hours=30)
    issued = generate_access_code(codes, ADMIN_OWNER, now=issued_at)
    revoke_access_code(codes, issued.id)

    with pytest.raises(AccessCodeExpiredError):
        verify_and_consume(codes, issued.code)


def test_revoke_is_idempotent_and_unknown_ids_404(codes):
    issued = generate_access_code(codes, ADMIN_OWNER)

    revoke_access_code(codes, issued.id)
    revoked = revoke_access_code(codes, issued.id)
    assert revoked.is_active is False
    assert revoked.admin_action == "revoked"

    with pytest.raises(NotFoundError):
        revoke_access_code(codes, 9999)


def test_revoke_leaves_used_code_alone(codes):
    issued = generate_access_code(codes, ADMIN_OWNER)
    verify_and_consume(codes, issued.code, "user-1")

    revoked = revoke_access_code(codes, issued.id)

    assert revoked.admin_action is None
    assert classify_status(revoked) == AccessCodeStatus.USED


def test_new_code_supersedes_previous_for_same_owner(codes):
    first = generate_access_code(codes, "owner-a")
    other_owner = generate_access_code(codes, "owner-b")
    second = generate_access_code(codes, "owner-a")

    first = codes.reload(first.id)
    assert first.is_active is False
    assert first.admin_action == "superseded"
    assert codes.reload(other_owner.id).is_active is True
    assert get_current_access_code(codes, "owner-a").id == second.id

    with pytest.raises(AccessCodeNotFoundError):
        verify_and_consume(codes, first.code)


def test_generation_gives_up_after_repeated_collisions(codes, monkeypatch):
    monkeypatch.setattr(codes, "code_exists", lambda code: True)

    with pytest.raises(GenerationExhaustedError):
        generate_access_code(codes, ADMIN_OWNER)

    assert codes.list_all() == []


def test_stale_reader_loses_consumption_race(codes):
    issued = generate_access_code(codes, ADMIN_OWNER)
    # Load the code into this session before the other consumer commits
    assert codes.get_by_code(issued.code).used_at is None

    other_session = SessionLocal()
    try:
        other = SQLAlchemyAccessCodeRepository(other_session, AccessCode)
        verify_and_consume(other, issued.code, "winner")
    finally:
        other_session.close()

    with pytest.raises(AccessCodeAlreadyUsedError):
        verify_and_consume(codes, issued.code, "loser")
    assert codes.reload(issued.id).used_by == "winner"


@pytest.mark.parametrize(
    "used, active, expired, expected",
    [
        (False, True, False, AccessCodeStatus.ACTIVE),
        (False, True, True, AccessCodeStatus.EXPIRED),
        (False, False, False, AccessCodeStatus.REVOKED),
        (False, False, True, AccessCodeStatus.REVOKED),
        (True, False, False, AccessCodeStatus.USED),
        (True, False, True, AccessCodeStatus.USED),
    ],
)
def test_classify_status_precedence(used, active, expired, expected):
    now = utcnow()
    code = AccessCode(
        code="ABCDEF123456",
        created_by=ADMIN_OWNER,
        created_at=now - timedelta(hours=1),
        expires_at=now - timedelta(minutes=1) if expired else now + timedelta(hours=1),
        is_active=active,
        used_at=now - timedelta(minutes=5) if used else None,
    )
    assert classify_status(code, now) == expected
