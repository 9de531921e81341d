import threading

from taskninja.app import create_app
from taskninja.middleware.rate_limit import RateLimiter, TokenBucket


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_bucket_refills_up_to_burst():
    bucket = TokenBucket(rate=1.0, burst=2, tokens=0.0, updated=0.0)
    assert not bucket.allow(0.5)
    assert bucket.allow(1.0)
    assert bucket.allow(10.0)
    assert bucket.allow(10.0)
    assert not bucket.allow(10.0)


def test_burst_plus_one_is_rejected():
    clock = FakeClock()
    limiter = RateLimiter(rate=2.0, burst=4, clock=clock)

    results = [limiter.allow("10.0.0.1") for _ in range(5)]
    assert results == [True, True, True, True, False]


def test_clients_have_separate_buckets():
    clock = FakeClock()
    limiter = RateLimiter(rate=1.0, burst=1, clock=clock)

    assert limiter.allow("a")
    assert not limiter.allow("a")
    assert limiter.allow("b")


def test_tokens_come_back_over_time():
    clock = FakeClock()
    limiter = RateLimiter(rate=2.0, burst=1, clock=clock)

    assert limiter.allow("a")
    assert not limiter.allow("a")
    clock.now += 0.5
    assert limiter.allow("a")


def test_disabled_limiter_passes_everything():
    limiter = RateLimiter(rate=0.0, burst=0, enabled=False)
    assert all(limiter.allow("a") for _ in range(100))
    assert len(limiter) == 0


def test_idle_clients_are_swept():
    clock = FakeClock()
    limiter = RateLimiter(idle_after=180.0, sweep_every=60.0, clock=clock)
    limiter.allow("old")
    clock.now += 120
    limiter.allow("new")
    assert len(limiter) == 2

    clock.now += 100
    limiter.sweep()
    assert len(limiter) == 1


def test_sweep_runs_lazily_on_allow():
    clock = FakeClock()
    limiter = RateLimiter(idle_after=10.0, sweep_every=5.0, clock=clock)
    limiter.allow("old")
    clock.now += 60
    limiter.allow("new")
    assert len(limiter) == 1


def test_concurrent_requests_never_exceed_burst():
    limiter = RateLimiter(rate=0.0, burst=50)
    allowed = []
    lock = threading.Lock()

    def worker():
        for _ in range(20):
            ok = limiter.allow("shared")
            with lock:
                allowed.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert allowed.count(True) == 50


def test_middleware_returns_429(store):
    app = create_app({"TESTING": True, "LIMITER_BURST": 2, "LIMITER_RPS": 0.001}, store=store)
    client = app.test_client()

    codes = [client.get("/healthcheck").status_code for _ in range(3)]
    assert codes == [200, 200, 429]

    response = client.get("/healthcheck")
    assert response.get_json() == {"error": "rate limit exceeded"}

    other = client.get("/healthcheck", environ_base={"REMOTE_ADDR": "192.0.2.10"})
    assert other.status_code == 200


def test_middleware_disabled_by_config(store):
    app = create_app({"TESTING": True, "LIMITER_ENABLED": False, "LIMITER_BURST": 1}, store=store)
    client = app.test_client()
    assert all(client.get("/healthcheck").status_code == 200 for _ in range(5))
