"""
Tests del rate limiter de ventana fija.
"""
from types import SimpleNamespace

from fitdash.shared.utils.rate_limit import (
    DEFAULT_IDENTIFIER,
    RateLimiter,
    get_request_fingerprint,
)


class FakeClock:
    def __init__(self, start: float = 1_000.0):
        self.value = start

    def __call__(self) -> float:
        return self.value

    def advance(self, seconds: float) -> None:
        self.value += seconds


def test_hits_within_limit_are_allowed():
    clock = FakeClock()
    limiter = RateLimiter(limit=3, window_seconds=60, prefix="login", clock=clock)

    results = [limiter.hit("1.2.3.4") for _ in range(3)]

    assert all(info.ok for info in results)
    assert [info.remaining for info in results] == [2, 1, 0]
    assert results[0].reset == 1_060.0


def test_hit_over_limit_is_blocked_until_window_resets():
    clock = FakeClock()
    limiter = RateLimiter(limit=2, window_seconds=60, prefix="login", clock=clock)
    limiter.hit("ip")
    limiter.hit("ip")

    blocked = limiter.hit("ip")
    assert not blocked.ok
    assert blocked.remaining == 0
    assert blocked.retry_after(clock()) == 60

    clock.advance(61)
    assert limiter.hit("ip").ok


def test_buckets_are_independent_per_identifier():
    limiter = RateLimiter(limit=1, window_seconds=60, clock=FakeClock())
    assert limiter.hit("a").ok
    assert not limiter.hit("a").ok
    assert limiter.hit("b").ok


def test_headers_include_retry_after_only_when_blocked():
    clock = FakeClock()
    limiter = RateLimiter(limit=1, window_seconds=30, clock=clock)

    allowed = limiter.hit("x").headers(clock())
    assert allowed["x-ratelimit-limit"] == "1"
    assert allowed["x-ratelimit-remaining"] == "0"
    assert "retry-after" not in allowed

    clock.advance(10)
    blocked = limiter.hit("x").headers(clock())
    assert blocked["retry-after"] == "20"


def test_reset_clears_buckets():
    limiter = RateLimiter(limit=1, window_seconds=60, clock=FakeClock())
    limiter.hit("x")
    limiter.reset()
    assert limiter.hit("x").ok


def test_expired_buckets_are_pruned():
    clock = FakeClock()
    limiter = RateLimiter(limit=5, window_seconds=60, clock=clock)
    for n in range(50):
        limiter.hit(f"10.0.0.{n}")
    assert limiter.bucket_count == 50

    clock.advance(61)
    limiter.hit("10.1.1.1")

    assert limiter.bucket_count == 1


def _request(headers=None, host="10.0.0.1"):
    return SimpleNamespace(
        headers=headers or {},
        client=SimpleNamespace(host=host) if host else None,
    )


def test_fingerprint_prefers_forwarded_for():
    request = _request({"x-forwarded-for": "203.0.113.7, 10.0.0.2", "x-real-ip": "198.51.100.1"})
    assert get_request_fingerprint(request) == "203.0.113.7"


def test_fingerprint_falls_back_to_real_ip_and_socket():
    assert get_request_fingerprint(_request({"x-real-ip": "198.51.100.1"})) == "198.51.100.1"
    assert get_request_fingerprint(_request({"cf-connecting-ip": "192.0.2.5"})) == "192.0.2.5"
    assert get_request_fingerprint(_request()) == "10.0.0.1"
    assert get_request_fingerprint(_request(host=None)) == DEFAULT_IDENTIFIER
