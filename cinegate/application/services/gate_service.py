"""Gate service — the shared platform password and the admin login, both throttled per client."""

import secrets

import structlog

from cinegate.application.services.admin_service import check_admin_credentials
from cinegate.config import get_settings
from cinegate.core.exceptions import AuthenticationError, ConfigurationError, RateLimitedError
from cinegate.infrastructure.rate_limiter import RateLimiter

logger = structlog.get_logger(__name__)


def _remaining(failures: int) -> int:
    return max(get_settings().RATE_LIMIT_MAX_ATTEMPTS - failures, 0)


def check_platform_password(limiter: RateLimiter, client_key: str, password: str) -> None:
    """Compare against PLATFORM_PASSWORD. Success clears the client's failure count."""
    if not limiter.check(client_key):
        raise RateLimitedError()

    expected = get_settings().PLATFORM_PASSWORD
    if not expected:
        logger.error("PLATFORM_PASSWORD is not configured")
        raise ConfigurationError()

    if secrets.compare_digest(password.encode("utf-8"), expected.encode("utf-8")):
        limiter.reset(client_key)
        return

    failures = limiter.record(client_key)
    logger.info("Platform password rejected", client=client_key, failures=failures)
    raise AuthenticationError(
        "Invalid password",
        details={"attemptsRemaining": _remaining(failures)},
    )


def check_admin_login(limiter: RateLimiter, client_key: str, username: str, password: str) -> None:
    if not limiter.check(client_key):
        raise RateLimitedError()
    try:
        check_admin_credentials(username, password)
    except AuthenticationError as exc:
        failures = limiter.record(client_key)
        logger.warning("Admin login rejected", client=client_key, failures=failures)
        exc.details = {"attemptsRemaining": _remaining(failures)}
        raise
    limiter.reset(client_key)
    logger.info("Admin logged in", client=client_key)
