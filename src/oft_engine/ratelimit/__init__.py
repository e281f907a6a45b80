"""Rate Limiter — inbound/outbound flow control per remote pathway.

- Linear-regeneration token bucket per remote endpoint id
- Two instances per engine (inbound, outbound) driven by the net-flow
  cross-release pattern
"""

from .rate_limiter import (
    Direction,
    RateLimitBucket,
    RateLimitConfig,
    RateLimiter,
    RateLimitUpdate,
)

__all__ = [
    "Direction",
    "RateLimitBucket",
    "RateLimitConfig",
    "RateLimiter",
    "RateLimitUpdate",
]
