"""Pacing library: rate limiters for upstream-friendly sync runs.

Public API:
    - BaseRateLimiter: Abstract pacing gate
    - FixedIntervalRateLimiter: Minimum delay between acquisitions
    - TokenBucketRateLimiter: Bursty token bucket
    - build_rate_limiter: Construct the configured limiter from settings
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from civic_sync.lib.pacing.limiters import BaseRateLimiter, FixedIntervalRateLimiter, TokenBucketRateLimiter

if TYPE_CHECKING:
    from civic_sync.core.config import Settings


def build_rate_limiter(settings: Settings) -> BaseRateLimiter:
    """Build the rate limiter selected by ``settings.sync_rate_limiter``.

    A token bucket refills at one token per ``sync_pacing_seconds``; with a
    pacing of zero the fixed limiter is used since it then never waits.
    """
    if settings.sync_rate_limiter == "token_bucket" and settings.sync_pacing_seconds > 0:
        return TokenBucketRateLimiter(
            rate=1 / settings.sync_pacing_seconds,
            capacity=settings.sync_token_bucket_capacity,
        )
    return FixedIntervalRateLimiter(settings.sync_pacing_seconds)


__all__ = [
    "BaseRateLimiter",
    "FixedIntervalRateLimiter",
    "TokenBucketRateLimiter",
    "build_rate_limiter",
]
