from grocery.api.rate_limit import FixedWindowLimiter


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_requests_within_limit_are_allowed():
    limiter = FixedWindowLimiter(limit=3, window_seconds=60, clock=FakeClock())
    results = [limiter.hit("10.0.0.1") for _ in range(3)]
    assert all(r.allowed for r in results)
    assert [r.remaining for r in results] == [2, 1, 0]


def test_excess_requests_are_rejected_until_window_resets():
    clock = FakeClock()
    limiter = FixedWindowLimiter(limit=2, window_seconds=60, clock=clock)
    limiter.hit("10.0.0.1")
    limiter.hit("10.0.0.1")

    blocked = limiter.hit("10.0.0.1")
    assert blocked.allowed is False
    assert blocked.retry_after_seconds == 60

    clock.now += 60
    assert limiter.hit("10.0.0.1").allowed is True


def test_clients_are_counted_separately():
    limiter = FixedWindowLimiter(limit=1, window_seconds=60, clock=FakeClock())
    limiter.hit("10.0.0.1")
    assert limiter.hit("10.0.0.2").allowed is True
    assert limiter.hit("10.0.0.1").allowed is False


def test_closed_windows_are_forgotten():
    clock = FakeClock()
    limiter = FixedWindowLimiter(limit=5, window_seconds=60, clock=clock)
    for n in range(500):
        limiter.hit(f"10.0.{n // 250}.{n % 250}")
    assert limiter.tracked_clients == 500

    clock.now += 60
    limiter.hit("10.9.9.9")
    assert limiter.tracked_clients == 1
