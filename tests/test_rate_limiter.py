import pytest

from cinegate.application.services.gate_service import check_platform_password
from cinegate.core.exceptions import AuthenticationError, RateLimitedError
from cinegate.infrastructure.rate_limiter import InMemoryRateLimiter, get_rate_limiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return InMemoryRateLimiter(max_attempts=5, window_seconds=15 * 60, clock=clock)


def test_blocks_after_max_failures(limiter):
    for expected in range(1, 6):
        assert limiter.check("1.2.3.4")
        assert limiter.record("1.2.3.4") == expected

    assert not limiter.check("1.2.3.4")
    assert limiter.check("5.6.7.8")


def test_window_is_measured_from_last_failure(limiter, clock):
    for _ in range(5):
        limiter.record("ip")
        clock.advance(60)

    clock.advance(14 * 60)
    assert not limiter.check("ip")

    clock.advance(2 * 60)
    assert limiter.check("ip")
    assert limiter.record("ip") == 1


def test_reset_clears_failures(limiter):
    for _ in range(5):
        limiter.record("ip")

    limiter.reset("ip")

    assert limiter.check("ip")


def test_prune_drops_lapsed_keys(limiter, clock):
    limiter.record("old")
    clock.advance(16 * 60)
    limiter.record("fresh")

    assert limiter.prune() == 1
    assert limiter.record("old") == 1
    assert limiter.record("fresh") == 2


def test_record_prunes_lapsed_keys_when_full(clock):
    limiter = InMemoryRateLimiter(max_attempts=5, window_seconds=15 * 60, clock=clock, max_keys=2)
    limiter.record("a")
    limiter.record("b")
    clock.advance(16 * 60)

    limiter.record("c")

    assert set(limiter._attempts) == {"c"}


def test_tracked_keys_stay_capped_within_one_window(clock):
    limiter = InMemoryRateLimiter(max_attempts=5, window_seconds=15 * 60, clock=clock, max_keys=100)

    for n in range(1000):
        limiter.record(f"10.0.{n // 256}.{n % 256}")
        clock.advance(0.01)

    assert len(limiter._attempts) == 100
    # The most recent failures survive, the oldest were evicted
    assert "10.0.3.231" in limiter._attempts
    assert "10.0.0.0" not in limiter._attempts


def test_failing_again_keeps_a_key_from_eviction(clock):
    limiter = InMemoryRateLimiter(max_attempts=5, window_seconds=15 * 60, clock=clock, max_keys=2)
    limiter.record("a")
    limiter.record("b")
    limiter.record("a")

    limiter.record("c")

    assert set(limiter._attempts) == {"a", "c"}
    assert limiter.record("a") == 3


def test_limiters_are_shared_per_scope():
    assert get_rate_limiter("platform-password") is get_rate_limiter("platform-password")
    assert get_rate_limiter("platform-password") is not get_rate_limiter("admin-login")


def test_platform_password_gate(limiter):
    with pytest.raises(AuthenticationError) as exc_info:
        check_platform_password(limiter, "ip", "wrong")
    assert exc_info.value.details == {"attemptsRemaining": 4}

    check_platform_password(limiter, "ip", "movie-night")
    assert limiter.record("ip") == 1


def test_platform_password_gate_locks_out(limiter):
    for _ in range(5):
        with pytest.raises(AuthenticationError):
            check_platform_password(limiter, "ip", "wrong")

    # Even the right password is refused while locked out
    with pytest.raises(RateLimitedError):
        check_platform_password(limiter, "ip", "movie-night")
