"""Rate Limiter — per-pathway flow control for one transfer direction.

Model: a continuously regenerating capacity bucket per remote endpoint id,
bounded by ``limit`` and refilled linearly over ``window_seconds``
(token bucket with rate limit / window).

Operations:
- configure(eid, limit, window_seconds, now_ms): bucket starts full
- unconfigure(eid): pathway becomes unlimited
- available_capacity(eid, now_ms): capacity after regeneration, <= limit
- try_consume(eid, amount, now_ms): RateLimitExceeded if amount > capacity
- release(eid, amount, now_ms): capacity += amount, capped at limit
- in_flight(eid, now_ms): limit - available_capacity

Every call recomputes regeneration from the clock it is given; no timestamp
is cached between calls other than the bucket's own last update. A pathway
without a bucket is unlimited: consume and release are no-ops.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional

from oft_engine.core.errors import InvalidRateLimitConfig, RateLimitExceeded
from oft_engine.core.math.integer_safeguards import U64_MAX, validate_u32, validate_u64


logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Transfer direction a limiter instance accounts for."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"


@dataclass(frozen=True)
class RateLimitConfig:
    """Configured ceiling and refill window of one pathway."""

    limit: int
    window_seconds: int

    def __post_init__(self) -> None:
        validate_u64(self.limit, "limit")
        validate_u64(self.window_seconds, "window_seconds")
        if self.window_seconds == 0:
            raise InvalidRateLimitConfig("window_seconds must be positive")

    @property
    def window_ms(self) -> int:
        return self.window_seconds * 1000


@dataclass(frozen=True)
class RateLimitBucket:
    """State of one pathway.

    Capacity is held in amount*millisecond units (``scaled_capacity``) so
    regeneration over short intervals is never truncated away; the visible
    capacity is its floor.
    """

    config: RateLimitConfig
    scaled_capacity: int
    last_update_ms: int

    @classmethod
    def full(cls, config: RateLimitConfig, now_ms: int) -> "RateLimitBucket":
        return cls(
            config=config,
            scaled_capacity=config.limit * config.window_ms,
            last_update_ms=now_ms,
        )

    @property
    def limit(self) -> int:
        return self.config.limit

    @property
    def window_seconds(self) -> int:
        return self.config.window_seconds

    @property
    def available_capacity(self) -> int:
        return self.scaled_capacity // self.config.window_ms

    def regenerated(self, now_ms: int) -> "RateLimitBucket":
        """Bucket after linear refill up to ``now_ms``.

        A clock reading older than the last update refills nothing.
        """
        elapsed_ms = max(0, now_ms - self.last_update_ms)
        ceiling = self.config.limit * self.config.window_ms
        scaled = min(ceiling, self.scaled_capacity + self.config.limit * elapsed_ms)
        return replace(
            self,
            scaled_capacity=scaled,
            last_update_ms=max(now_ms, self.last_update_ms),
        )


@dataclass(frozen=True)
class RateLimitUpdate:
    """Result of a consume or release."""

    eid: int
    direction: Direction
    amount: int
    available_capacity: int  # U64_MAX when unlimited
    limited: bool


class RateLimiter:
    """Flow-control accounting for every pathway of one direction.

    Buckets are keyed by remote endpoint id and are independent of each
    other. The instance is owned by exactly one engine.
    """

    def __init__(self, direction: Direction):
        self.direction = direction
        self._buckets: Dict[int, RateLimitBucket] = {}

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def configure(self, eid: int, limit: int, window_seconds: int, now_ms: int) -> RateLimitBucket:
        """(Re)initialize the pathway's bucket at full capacity."""
        validate_u32(eid, "eid")
        bucket = RateLimitBucket.full(RateLimitConfig(limit, window_seconds), now_ms)
        self._buckets[eid] = bucket
        logger.info(
            "%s rate limit set: eid=%d limit=%d window=%ds",
            self.direction.value, eid, limit, window_seconds,
        )
        return bucket

    def unconfigure(self, eid: int) -> bool:
        """Remove the pathway's limit. Returns False if it had none."""
        removed = self._buckets.pop(eid, None) is not None
        if removed:
            logger.info("%s rate limit removed: eid=%d", self.direction.value, eid)
        return removed

    def is_configured(self, eid: int) -> bool:
        return eid in self._buckets

    def config(self, eid: int) -> Optional[RateLimitConfig]:
        bucket = self._buckets.get(eid)
        return bucket.config if bucket is not None else None

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    def available_capacity(self, eid: int, now_ms: int) -> int:
        bucket = self._buckets.get(eid)
        if bucket is None:
            return U64_MAX
        return bucket.regenerated(now_ms).available_capacity

    def in_flight(self, eid: int, now_ms: int) -> int:
        """Consumed-but-not-released exposure; 0 for an unlimited pathway."""
        bucket = self._buckets.get(eid)
        if bucket is None:
            return 0
        return bucket.limit - bucket.regenerated(now_ms).available_capacity

    # -------------------------------------------------------------------------
    # Accounting
    # -------------------------------------------------------------------------

    def try_consume(self, eid: int, amount: int, now_ms: int) -> RateLimitUpdate:
        """
        Consume ``amount`` of the pathway's capacity.

        Raises:
            RateLimitExceeded: If amount exceeds the regenerated capacity;
                the bucket is left untouched
        """
        validate_u64(amount, "amount")
        bucket = self._buckets.get(eid)
        if bucket is None:
            return RateLimitUpdate(eid, self.direction, amount, U64_MAX, limited=False)

        bucket = bucket.regenerated(now_ms)
        available = bucket.available_capacity
        if amount > available:
            logger.warning(
                "%s rate limit exceeded: eid=%d requested=%d available=%d",
                self.direction.value, eid, amount, available,
            )
            raise RateLimitExceeded(eid=eid, requested=amount, available=available)

        bucket = replace(bucket, scaled_capacity=bucket.scaled_capacity - amount * bucket.config.window_ms)
        self._buckets[eid] = bucket
        logger.debug(
            "%s consume: eid=%d amount=%d available=%d",
            self.direction.value, eid, amount, bucket.available_capacity,
        )
        return RateLimitUpdate(eid, self.direction, amount, bucket.available_capacity, limited=True)

    def release(self, eid: int, amount: int, now_ms: int) -> RateLimitUpdate:
        """Return ``amount`` of capacity to the pathway, never above its limit."""
        validate_u64(amount, "amount")
        bucket = self._buckets.get(eid)
        if bucket is None:
            return RateLimitUpdate(eid, self.direction, amount, U64_MAX, limited=False)

        bucket = bucket.regenerated(now_ms)
        ceiling = bucket.limit * bucket.config.window_ms
        bucket = replace(
            bucket,
            scaled_capacity=min(ceiling, bucket.scaled_capacity + amount * bucket.config.window_ms),
        )
        self._buckets[eid] = bucket
        logger.debug(
            "%s release: eid=%d amount=%d available=%d",
            self.direction.value, eid, amount, bucket.available_capacity,
        )
        return RateLimitUpdate(eid, self.direction, amount, bucket.available_capacity, limited=True)

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    def snapshot(self) -> Dict[int, RateLimitBucket]:
        # Buckets are immutable, a shallow copy is a full snapshot
        return dict(self._buckets)

    def restore(self, snapshot: Dict[int, RateLimitBucket]) -> None:
        self._buckets = dict(snapshot)
