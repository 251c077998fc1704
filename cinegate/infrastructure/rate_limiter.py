"""Failed-attempt rate limiter for password checks.

InMemoryRateLimiter is process local: it resets on restart and is only
correct for a single instance. A multi-instance deployment needs an
implementation of the same protocol backed by a shared TTL store.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Protocol

import structlog

from cinegate.config import get_settings

logger = structlog.get_logger(__name__)

MAX_TRACKED_KEYS = 10_000


class RateLimiter(Protocol):

    def check(self, key: str) -> bool:
        """True when another attempt is allowed for this key."""
        ...

    def record(self, key: str) -> int:
        """Count a failed attempt and return the running total."""
        ...

    def reset(self, key: str) -> None:
        """Forget a key, after a successful attempt."""
        ...


@dataclass
class _Attempts:
    count: int = 0
    last_attempt: float = 0.0


class InMemoryRateLimiter:
    """
    At most `max_attempts` failures per key; the counter resets after
    `window_seconds` of inactivity.

    Keys are kept in least-recently-failed order. Once `max_keys` are tracked,
    lapsed keys are dropped first, then the oldest live ones.
    """

    def __init__(
        self,
        max_attempts: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        max_keys: Optional[int] = None,
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.max_keys = max_keys or MAX_TRACKED_KEYS
        self._clock = clock
        self._attempts: "OrderedDict[str, _Attempts]" = OrderedDict()
        self._lock = threading.Lock()

    def _current(self, key: str, now: float) -> _Attempts:
        attempts = self._attempts.get(key)
        if attempts is None or now - attempts.last_attempt > self.window_seconds:
            attempts = _Attempts()
            self._attempts[key] = attempts
        self._attempts.move_to_end(key)
        return attempts

    def check(self, key: str) -> bool:
        with self._lock:
            attempts = self._attempts.get(key)
            if attempts is None or self._clock() - attempts.last_attempt > self.window_seconds:
                return True
            return attempts.count < self.max_attempts

    def record(self, key: str) -> int:
        with self._lock:
            now = self._clock()
            if key not in self._attempts and len(self._attempts) >= self.max_keys:
                self._make_room_locked(now)
            attempts = self._current(key, now)
            attempts.count += 1
            attempts.last_attempt = now
            if attempts.count >= self.max_attempts:
                logger.warning("Attempt limit reached", key=key, attempts=attempts.count)
            return attempts.count

    def reset(self, key: str) -> None:
        with self._lock:
            self._attempts.pop(key, None)

    def prune(self) -> int:
        """Drop keys whose window has lapsed. Returns how many were removed."""
        with self._lock:
            return self._prune_locked(self._clock())

    def _prune_locked(self, now: float) -> int:
        # Oldest first, so the scan stops at the first live key
        removed = 0
        while self._attempts:
            key, attempts = next(iter(self._attempts.items()))
            if now - attempts.last_attempt <= self.window_seconds:
                break
            del self._attempts[key]
            removed += 1
        return removed

    def _make_room_locked(self, now: float) -> None:
        self._prune_locked(now)
        evicted = 0
        while len(self._attempts) >= self.max_keys:
            self._attempts.popitem(last=False)
            evicted += 1
        if evicted:
            logger.warning("Rate limiter full, evicted live keys", evicted=evicted, max_keys=self.max_keys)


_limiters: Dict[str, InMemoryRateLimiter] = {}
_limiters_lock = threading.Lock()


def get_rate_limiter(scope: str) -> InMemoryRateLimiter:
    """Process-wide limiter for a scope ("platform-password", "admin-login")."""
    with _limiters_lock:
        limiter = _limiters.get(scope)
        if limiter is None:
            settings = get_settings()
            limiter = InMemoryRateLimiter(
                max_attempts=settings.RATE_LIMIT_MAX_ATTEMPTS,
                window_seconds=settings.RATE_LIMIT_WINDOW_MINUTES * 60,
            )
            _limiters[scope] = limiter
        return limiter


def reset_rate_limiters() -> None:
    with _limiters_lock:
        _limiters.clear()
