"""Per-client token bucket rate limiting.

Each client address owns a bucket holding up to ``burst`` tokens, refilled at
``rate`` tokens per second. A request spends one token or is rejected with 429
before it reaches any view. Clients idle for longer than ``idle_after`` seconds
are evicted on the next sweep.
"""
import threading
import time
from dataclasses import dataclass

from flask import current_app, request
from werkzeug.exceptions import TooManyRequests


@dataclass
class TokenBucket:
    rate: float
    burst: int
    tokens: float
    updated: float

    def allow(self, now: float) -> bool:
        elapsed = max(0.0, now - self.updated)
        self.tokens = min(float(self.burst), self.tokens + elapsed * self.rate)
        self.updated = now
        if self.tokens >= 1.0:
            self.tokens -= 1.0
            return True
        return False


@dataclass
class _Client:
    bucket: TokenBucket
    last_seen: float


def remote_address():
    return request.remote_addr or "unknown"


class RateLimiter:
    def __init__(
        self,
        rate=2.0,
        burst=4,
        enabled=True,
        idle_after=180.0,
        sweep_every=60.0,
        key_func=remote_address,
        clock=time.monotonic,
    ):
        self.rate = rate
        self.burst = burst
        self.enabled = enabled
        self.idle_after = idle_after
        self.sweep_every = sweep_every
        self.key_func = key_func
        self.clock = clock
        self._clients = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @classmethod
    def from_config(cls, config):
        return cls(
            rate=config["LIMITER_RPS"],
            burst=config["LIMITER_BURST"],
            enabled=config["LIMITER_ENABLED"],
            idle_after=config["LIMITER_IDLE_SECONDS"],
            sweep_every=config["LIMITER_SWEEP_SECONDS"],
        )

    def init_app(self, app):
        app.extensions["rate_limiter"] = self
        app.before_request(self.check)

    def __len__(self):
        with self._lock:
            return len(self._clients)

    def allow(self, key) -> bool:
        if not self.enabled:
            return True
        now = self.clock()
        with self._lock:
            if now - self._last_sweep >= self.sweep_every:
                self._sweep(now)
            client = self._clients.get(key)
            if client is None:
                bucket = TokenBucket(self.rate, self.burst, float(self.burst), now)
                client = self._clients[key] = _Client(bucket, now)
            client.last_seen = now
            return client.bucket.allow(now)

    def sweep(self):
        with self._lock:
            self._sweep(self.clock())

    def _sweep(self, now):
        idle = [k for k, c in self._clients.items() if now - c.last_seen > self.idle_after]
        for key in idle:
            del self._clients[key]
        self._last_sweep = now

    def check(self):
        if not self.enabled:
            return None
        key = self.key_func()
        if not self.allow(key):
            current_app.logger.debug("rate limit exceeded for %s", key)
            raise TooManyRequests()
        return None
