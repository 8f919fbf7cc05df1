"""
Fixed-window request limiting.

The limiter is an object owned by whoever serves requests (the service layer,
a web adapter). It keeps no module-level state; counters live in an injected
store so a shared backend can replace the in-memory one.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from .errors import RateLimitError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitRecord:
    count: int
    reset_at: float


@dataclass
class RateLimitStatus:
    limit: int
    remaining: int
    reset_at: float


class RateLimitStore(Protocol):
    def get(self, key: str) -> RateLimitRecord | None: ...

    def set(self, key: str, record: RateLimitRecord) -> None: ...


class InMemoryStore:
    """Per-process counters. Entries are replaced when their window ends."""

    def __init__(self):
        self._records: dict[str, RateLimitRecord] = {}

    def get(self, key: str) -> RateLimitRecord | None:
        return self._records.get(key)

    def set(self, key: str, record: RateLimitRecord) -> None:
        self._records[key] = record


class RateLimiter:
    """
    Allow at most max_requests per identity in each window.

    Args:
        max_requests: Requests allowed per window.
        window_seconds: Window length.
        store: Counter storage. Defaults to a fresh InMemoryStore.
        clock: Returns the current time in seconds.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        store: RateLimitStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.store = store if store is not None else InMemoryStore()
        self.clock = clock

    @classmethod
    def from_settings(cls, settings) -> "RateLimiter":
        return cls(
            max_requests=settings.rate_limit_max_requests,
            window_seconds=settings.rate_limit_window_ms / 1000,
        )

    def hit(self, identity: str | None) -> RateLimitStatus:
        """
        Count one request for identity.

        Raises:
            RateLimitError: If identity has used up its window.
        """
        key = identity or "unknown"
        now = self.clock()

        record = self.store.get(key)
        if record is None or now > record.reset_at:
            record = RateLimitRecord(count=0, reset_at=now + self.window_seconds)

        record.count += 1
        self.store.set(key, record)

        if record.count > self.max_requests:
            logger.warning(
                "Rate limit exceeded for %s (%d/%d)", key, record.count, self.max_requests
            )
            raise RateLimitError("Too many requests", reset_at=record.reset_at)

        return RateLimitStatus(
            limit=self.max_requests,
            remaining=self.max_requests - record.count,
            reset_at=record.reset_at,
        )
