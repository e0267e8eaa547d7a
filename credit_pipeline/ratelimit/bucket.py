"""
Token bucket bounding the outbound model call rate.
The bucket state is owned by one TokenBucket and mutated only under its lock.
"""
from __future__ import annotations

import asyncio
import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from credit_pipeline.cancellation import CancellationToken
from credit_pipeline.ratelimit.settings import RateLimitSettings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


@dataclass
class RateBucket:
    tokens: float
    capacity: int
    refill_per_interval: int
    interval_ms: int
    last_refill_at: float


class TokenBucket:
    """
    Continuous-refill token bucket. acquire() polls on a fixed interval until
    the requested tokens are available, then consumes them atomically.
    A cancelled wait raises OperationCancelled and consumes nothing.
    """

    def __init__(
        self,
        capacity: int,
        refill_per_interval: int,
        interval_ms: int,
        *,
        poll_interval_ms: int = 100,
        clock: Clock = time.monotonic,
    ) -> None:
        if capacity < 1 or refill_per_interval < 1 or interval_ms < 1:
            raise ValueError("capacity, refill_per_interval and interval_ms must be >= 1")
        self._clock = clock
        self._poll_s = poll_interval_ms / 1000.0
        self._lock = threading.Lock()
        self._bucket = RateBucket(
            tokens=float(capacity),
            capacity=capacity,
            refill_per_interval=refill_per_interval,
            interval_ms=interval_ms,
            last_refill_at=clock(),
        )

    @classmethod
    def from_settings(cls, settings: RateLimitSettings, *, clock: Clock = time.monotonic) -> "TokenBucket":
        return cls(
            settings.capacity,
            settings.refill_per_interval,
            settings.interval_ms,
            poll_interval_ms=settings.poll_interval_ms,
            clock=clock,
        )

    @property
    def capacity(self) -> int:
        return self._bucket.capacity

    def _refill(self) -> None:
        # Caller holds the lock.
        b = self._bucket
        now = self._clock()
        elapsed_ms = (now - b.last_refill_at) * 1000.0
        if elapsed_ms <= 0:
            return
        added = math.floor(elapsed_ms / b.interval_ms * b.refill_per_interval)
        if added > 0:
            b.tokens = min(float(b.capacity), b.tokens + added)
            b.last_refill_at = now

    def available(self) -> float:
        with self._lock:
            self._refill()
            return self._bucket.tokens

    def try_acquire(self, n: int = 1) -> bool:
        """Consume n tokens if available right now. n < 1 is a caller bug and raises ValueError."""
        if n < 1:
            raise ValueError("n must be >= 1")
        with self._lock:
            self._refill()
            if self._bucket.tokens >= n:
                self._bucket.tokens -= n
                return True
            return False

    async def acquire(
        self,
        n: int = 1,
        *,
        cancel: CancellationToken | None = None,
    ) -> None:
        """
        Wait until n tokens are available and consume them.

        Waiting for tokens never raises. Only a call that can never be satisfied
        (n < 1 or n > capacity) raises ValueError, before anything is consumed.
        Cancellation raises OperationCancelled.
        """
        if n < 1:
            raise ValueError("n must be >= 1")
        if n > self._bucket.capacity:
            raise ValueError(f"cannot acquire {n} tokens from a bucket of capacity {self._bucket.capacity}")
        waited = False
        while True:
            if cancel is not None:
                cancel.raise_if_cancelled()
            if self.try_acquire(n):
                if waited:
                    logger.debug("rate limiter released after wait", extra={"tokens": n})
                return
            waited = True
            if cancel is not None:
                await cancel.sleep(self._poll_s)
            else:
                await asyncio.sleep(self._poll_s)
