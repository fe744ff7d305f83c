"""Per-client sliding-window rate limiting."""

import logging
import math
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Optional

from starlette.types import Scope

logger = logging.getLogger("cineconcerts.ratelimit")

UNKNOWN_CLIENT = "unknown"


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one rate limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_after: int


class RateLimiter:
    """Sliding-window rate limiter with one deque of timestamps per key."""

    def __init__(self, max_requests: int = 60, window_seconds: float = 60, clock=time.monotonic):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._buckets: Dict[str, Deque[float]] = {}

    def check(self, key: str, now: Optional[float] = None) -> RateLimitDecision:
        """Record a request for *key* if allowed and report the outcome."""
        if now is None:
            now = self._clock()
        bucket = self._buckets.setdefault(key, deque())
        self._evict(bucket, now)

        allowed = len(bucket) < self.max_requests
        if allowed:
            bucket.append(now)
        else:
            logger.warning("Rate limit exceeded for %s", key)

        reset_after = self.window_seconds - (now - bucket[0]) if bucket else 0
        return RateLimitDecision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(self.max_requests - len(bucket), 0),
            reset_after=max(math.ceil(reset_after), 0),
        )

    def prune(self, now: Optional[float] = None) -> int:
        """Drop keys with no requests inside the window. Returns keys dropped."""
        if now is None:
            now = self._clock()
        stale = []
        for key, bucket in self._buckets.items():
            self._evict(bucket, now)
            if not bucket:
                stale.append(key)
        for key in stale:
            del self._buckets[key]
        return len(stale)

    def reset(self) -> None:
        """Forget all recorded requests."""
        self._buckets.clear()

    @property
    def tracked_keys(self) -> int:
        return len(self._buckets)

    def _evict(self, bucket: Deque[float], now: float) -> None:
        while bucket and now - bucket[0] >= self.window_seconds:
            bucket.popleft()

    def headers(self, decision: RateLimitDecision) -> Dict[str, str]:
        """Standard ``RateLimit`` / ``RateLimit-Policy`` response headers."""
        window = int(self.window_seconds)
        return {
            "RateLimit-Policy": f"{self.max_requests};w={window}",
            "RateLimit": (
                f"limit={decision.limit}, remaining={decision.remaining}, "
                f"reset={decision.reset_after}"
            ),
        }


def client_key(scope: Scope) -> str:
    """
    Rate limit key for a request.

    First X-Forwarded-For entry, else the direct peer address, else a
    shared "unknown" bucket.
    """
    for name, value in scope.get("headers") or []:
        if name.lower() == b"x-forwarded-for":
            first = value.decode("latin-1").split(",")[0].strip()
            if first:
                return first
            break
    client = scope.get("client")
    if client and client[0]:
        return client[0]
    return UNKNOWN_CLIENT
