"""Shared request budget for the Riot API.

Riot enforces its limits per API key, so every coroutine that talks to the
API draws from one bucket. A 429 empties the bucket and all callers back
off together instead of each one discovering the limit on its own.
"""

import asyncio
import time
from dataclasses import dataclass, field

from lp_recap.config import Settings
from lp_recap.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimiter:
    """Token bucket that refills continuously over a fixed period.

    Attributes:
        capacity: Requests allowed per period
        period_seconds: Seconds for an empty bucket to fill up again
    """

    capacity: int = 100
    period_seconds: float = 120.0
    _available: float = field(init=False, repr=False)
    _updated_at: float = field(init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.capacity < 1 or self.period_seconds <= 0:
            raise ValueError("Rate limiter needs a positive capacity and period")
        self._available = float(self.capacity)
        self._updated_at = time.monotonic()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RateLimiter":
        return cls(
            capacity=settings.rate_limit_requests,
            period_seconds=settings.rate_limit_window_seconds,
        )

    @property
    def tokens_per_second(self) -> float:
        return self.capacity / self.period_seconds

    def _settle(self) -> float:
        now = time.monotonic()
        gained = (now - self._updated_at) * self.tokens_per_second
        self._available = min(float(self.capacity), self._available + gained)
        self._updated_at = now
        return self._available

    async def acquire(self, tokens: int = 1) -> float:
        """Take ``tokens`` from the bucket, sleeping until they are available.

        Returns:
            Seconds spent waiting
        """
        async with self._lock:
            shortfall = tokens - self._settle()
            delay = max(shortfall, 0.0) / self.tokens_per_second
            if delay:
                logger.info(
                    "Waiting for request budget",
                    shortfall=round(shortfall, 2),
                    delay_seconds=round(delay, 2),
                )
                # Sleeping under the lock keeps callers in arrival order
                await asyncio.sleep(delay)
                self._settle()
            self._available -= tokens
            return delay

    async def drain(self) -> None:
        """Empty the bucket after upstream reported a rate limit."""
        async with self._lock:
            self._settle()
            self._available = 0.0

    def available_tokens(self) -> float:
        """Tokens left as of the last acquire (no refill applied)."""
        return self._available
