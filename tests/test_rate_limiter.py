"""Tests for the sliding-window RateLimiter"""

import threading

from security.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestRateLimiter:

    def test_allows_up_to_limit(self):
        limiter = RateLimiter(max_events=3, window_seconds=60, clock=FakeClock())
        assert [limiter.allow("a") for _ in range(4)] == [True, True, True, False]

    def test_keys_are_independent(self):
        limiter = RateLimiter(max_events=1, window_seconds=60, clock=FakeClock())
        assert limiter.allow("a")
        assert limiter.allow("b")
        assert not limiter.allow("a")

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(max_events=2, window_seconds=60, clock=clock)
        limiter.allow("a")
        clock.now += 30
        limiter.allow("a")
        assert not limiter.allow("a")
        clock.now += 31  # first event has left the window
        assert limiter.allow("a")
        assert not limiter.allow("a")

    def test_idle_callers_are_forgotten(self):
        clock = FakeClock()
        limiter = RateLimiter(max_events=5, window_seconds=60, clock=clock)
        for i in range(1000):
            limiter.allow(f"198.51.100.{i}")
        clock.now += 3600
        assert limiter.allow("203.0.113.7")
        assert list(limiter._events) == ["203.0.113.7"]

    def test_expired_key_removed_when_checked(self):
        clock = FakeClock()
        limiter = RateLimiter(max_events=1, window_seconds=60, clock=clock)
        limiter.allow("a")
        clock.now += 30
        limiter.allow("b")
        clock.now += 31
        limiter._cleanup("a", clock.now)
        assert "a" not in limiter._events
        assert "b" in limiter._events

    def test_reset(self):
        limiter = RateLimiter(max_events=1, window_seconds=60, clock=FakeClock())
        limiter.allow("a")
        limiter.allow("b")
        limiter.reset("a")
        assert limiter.allow("a")
        assert not limiter.allow("b")
        limiter.reset()
        assert limiter.allow("b")

    def test_concurrent_callers_never_exceed_limit(self):
        limiter = RateLimiter(max_events=5, window_seconds=60)
        results = []
        lock = threading.Lock()

        def worker():
            allowed = limiter.allow("shared")
            with lock:
                results.append(allowed)

        threads = [threading.Thread(target=worker) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert results.count(True) == 5
