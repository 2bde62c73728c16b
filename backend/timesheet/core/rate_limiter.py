"""Rate limiting for the external text-completion API.

Gemini calls are throttled with a token bucket so a burst of parse
requests stays under the configured requests-per-minute quota.
"""

from __future__ import annotations

import asyncio
import time
from typing import Optional

from timesheet.config import settings


class TokenBucket:
    """Token-bucket rate limiter.

    Tokens are refilled at ``rate`` per second and accumulate up to
    ``burst``.

    Attributes:
        rate: Allowed requests per second.
        burst: Maximum number of stored tokens.
    """

    def __init__(self, rate: float, burst: int) -> None:
        self.rate = rate
        self.burst = burst
        self._tokens: float = float(burst)
        self._last_refill: float = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        """Add the tokens earned since the last refill."""
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self.burst, self._tokens + elapsed * self.rate)
        self._last_refill = now

    async def acquire(self) -> None:
        """Take one token, waiting asynchronously until one is available."""
        while True:
            async with self._lock:
                self._refill()
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return
                # time until the next token is available
                wait_time = (1.0 - self._tokens) / self.rate
            await asyncio.sleep(wait_time)


class ExternalAPIRateLimiter:
    """Central place for outbound API throttling.

    Gemini: token bucket at ``GEMINI_REQUESTS_PER_MINUTE``.
    """

    def __init__(self, gemini_rpm: int) -> None:
        self._gemini_bucket = TokenBucket(rate=gemini_rpm / 60.0, burst=gemini_rpm)

    async def acquire_gemini(self) -> None:
        """Call before every Gemini request."""
        await self._gemini_bucket.acquire()


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_rate_limiter: Optional[ExternalAPIRateLimiter] = None


def get_rate_limiter() -> ExternalAPIRateLimiter:
    """Return the process-wide ExternalAPIRateLimiter."""
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = ExternalAPIRateLimiter(settings.GEMINI_REQUESTS_PER_MINUTE)
    return _rate_limiter
