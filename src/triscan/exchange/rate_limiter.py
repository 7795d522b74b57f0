"""
Token bucket rate limiter for API requests.

Implements an async-compatible rate limiter that paces scans so the
exchange's public market data limits are never exceeded.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Final

from triscan.utils.time import get_monotonic


# Default rate limit (conservative)
DEFAULT_BURST_MULTIPLIER: Final[int] = 2


@dataclass
class TokenBucket:
    """
    Token bucket implementation for rate limiting.

    Tokens are added at a constant rate up to a maximum capacity.
    Each request consumes one or more tokens.
    """

    capacity: int
    refill_rate: float  # tokens per second
    tokens: float = field(init=False)
    last_refill: float = field(init=False)  # monotonic seconds
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        """Initialize with full bucket."""
        self.tokens = float(self.capacity)
        self.last_refill = get_monotonic()

    def _refill(self) -> None:
        """Add tokens based on elapsed time."""
        now = get_monotonic()
        elapsed_seconds = now - self.last_refill

        self.tokens = min(
            self.capacity,
            self.tokens + (elapsed_seconds * self.refill_rate),
        )
        self.last_refill = now

    async def acquire(self, tokens: int = 1) -> None:
        """
        Acquire tokens, waiting if necessary.

        The lock is held while waiting so callers are served in order.

        Args:
            tokens: Number of tokens to acquire.
        """
        async with self._lock:
            self._refill()

            if self.tokens < tokens:
                wait_seconds = (tokens - self.tokens) / self.refill_rate
                await asyncio.sleep(wait_seconds)
                self._refill()

            self.tokens -= tokens

    async def try_acquire(self, tokens: int = 1) -> bool:
        """
        Try to acquire tokens without waiting.

        Args:
            tokens: Number of tokens to acquire.

        Returns:
            True if tokens were acquired, False if not enough available.
        """
        async with self._lock:
            self._refill()

            if self.tokens >= tokens:
                self.tokens -= tokens
                return True
            return False


class RateLimiter:
    """
    Request pacing for the REST client.

    Allows short bursts of up to twice the per-second rate, then
    throttles to the configured rate.
    """

    def __init__(self, requests_per_second: int = 10) -> None:
        """
        Initialize rate limiter.

        Args:
            requests_per_second: Maximum sustained requests per second.
        """
        if requests_per_second <= 0:
            raise ValueError("requests_per_second must be positive")

        self._bucket = TokenBucket(
            capacity=requests_per_second * DEFAULT_BURST_MULTIPLIER,
            refill_rate=float(requests_per_second),
        )

    async def acquire(self, weight: int = 1) -> None:
        """
        Wait until a request of the given weight may be sent.

        Args:
            weight: Number of tokens the request consumes.
        """
        await self._bucket.acquire(weight)

    async def try_acquire(self, weight: int = 1) -> bool:
        """
        Try to acquire request permission without waiting.

        Args:
            weight: Number of tokens the request consumes.

        Returns:
            True if permission granted.
        """
        return await self._bucket.try_acquire(weight)

    @property
    def available(self) -> float:
        """Get approximate number of available tokens."""
        return self._bucket.tokens
