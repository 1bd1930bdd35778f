from __future__ import annotations

import hmac
import secrets
import threading
import time
from collections import defaultdict, deque
from collections.abc import Callable
from typing import Any, Protocol

from careerdesk.config import Settings, get_settings
from careerdesk.core.errors import RateLimited, ValidationError

Clock = Callable[[], float]


class ExpiringStore(Protocol):
    def put(self, key: str, value: Any, ttl: float) -> None: ...

    def get(self, key: str) -> Any | None: ...

    def consume(self, key: str) -> Any | None: ...


class InMemoryExpiringStore:
    """Single-process keyed store with per-entry expiry."""

    def __init__(self, clock: Clock = time.monotonic):
        self._clock = clock
        self._items: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def put(self, key: str, value: Any, ttl: float) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be positive")
        with self._lock:
            self._items[key] = (self._clock() + ttl, value)

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._live_value(key)

    def consume(self, key: str) -> Any | None:
        with self._lock:
            value = self._live_value(key)
            self._items.pop(key, None)
            return value

    def _live_value(self, key: str) -> Any | None:
        item = self._items.get(key)
        if item is None:
            return None
        expires_at, value = item
        if self._clock() >= expires_at:
            del self._items[key]
            return None
        return value


class RateLimiter:
    """Sliding window: at most ``max_hits`` per key within ``window_sec``."""

    def __init__(self, max_hits: int, window_sec: float, clock: Clock = time.monotonic):
        self.max_hits = max_hits
        self.window_sec = window_sec
        self._clock = clock
        self._hits: dict[str, deque[float]] = defaultdict(deque)
        self._lock = threading.Lock()

    def hit(self, key: str) -> bool:
        now = self._clock()
        with self._lock:
            hits = self._hits[key]
            while hits and now - hits[0] >= self.window_sec:
                hits.popleft()
            if len(hits) >= self.max_hits:
                return False
            hits.append(now)
            return True


class OneTimeCodes:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        store: ExpiringStore | None = None,
        limiter: RateLimiter | None = None,
        clock: Clock = time.monotonic,
    ):
        self.settings = settings or get_settings()
        self.store = store or InMemoryExpiringStore(clock=clock)
        self.limiter = limiter or RateLimiter(
            max_hits=self.settings.otp_max_requests,
            window_sec=self.settings.otp_window_minutes * 60,
            clock=clock,
        )

    def issue(self, key: str) -> str:
        if not self.limiter.hit(key):
            raise RateLimited("Too many code requests. Please try again later.")
        code = f"{secrets.randbelow(900_000) + 100_000}"
        self.store.put(key, code, ttl=self.settings.otp_expire_minutes * 60)
        return code

    def verify(self, key: str, code: str) -> bool:
        expected = self.store.get(key)
        return expected is not None and hmac.compare_digest(str(expected), str(code))

    def redeem(self, key: str, code: str) -> None:
        if not self.verify(key, code):
            raise ValidationError("Code expired or invalid")
        self.store.consume(key)
