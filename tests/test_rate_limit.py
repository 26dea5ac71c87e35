from api_gateway.rate_limit import SlidingWindowLimiter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_rejects():
    limiter = SlidingWindowLimiter(3, 60, clock=FakeClock())
    results = [limiter.check("1.2.3.4") for _ in range(4)]
    assert [r.allowed for r in results] == [True, True, True, False]
    assert results[-1].current == 3
    assert results[-1].retry_after == 60


def test_window_slides():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(2, 60, clock=clock)
    assert limiter.check("a").allowed
    clock.now += 30
    assert limiter.check("a").allowed
    assert not limiter.check("a").allowed

    # First hit leaves the window; only one slot frees up
    clock.now += 30
    assert limiter.check("a").allowed
    result = limiter.check("a")
    assert not result.allowed
    assert result.retry_after == 30


def test_rejected_requests_do_not_extend_window():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(1, 10, clock=clock)
    assert limiter.check("a").allowed
    for _ in range(5):
        clock.now += 1
        assert not limiter.check("a").allowed
    clock.now += 5
    assert limiter.check("a").allowed


def test_clients_are_independent():
    limiter = SlidingWindowLimiter(1, 60, clock=FakeClock())
    assert limiter.check("a").allowed
    assert not limiter.check("a").allowed
    assert limiter.check("b").allowed


def test_idle_clients_are_evicted():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(5, 60, clock=clock)
    for n in range(1000):
        limiter.check(f"10.0.{n // 256}.{n % 256}")
    assert len(limiter._hits) == 1000

    clock.now += 3600
    assert limiter.check("10.9.9.9").allowed
    assert list(limiter._hits) == ["10.9.9.9"]


def test_active_clients_survive_sweep():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(2, 60, clock=clock)
    limiter.check("idle")
    clock.now += 50
    limiter.check("busy")
    clock.now += 20
    limiter.check("other")
    assert set(limiter._hits) == {"busy", "other"}
    assert limiter.check("busy").allowed
    assert not limiter.check("busy").allowed
