"""Token-bucket rate limiting middleware."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import structlog

from sluice.core.errors import ErrorCode, ProcedureError
from sluice.core.procedure import ProcedureType
from sluice.core.results import ChainError, ChainResult
from sluice.middleware.auth import user_id_from_ctx
from sluice.middleware.base import Middleware, NextFn

logger = structlog.get_logger()

KeyGetter = Callable[[Any], str | None]


class TokenBucket:
    def __init__(self, rate: float, burst: int) -> None:
        self._rate = rate  # tokens per second
        self._burst = burst
        self._tokens = float(burst)
        self._last_refill = time.monotonic()

    def consume(self) -> bool:
        self._refill()
        if self._tokens >= 1.0:
            self._tokens -= 1.0
            return True
        return False

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last_refill
        self._tokens = min(self._burst, self._tokens + elapsed * self._rate)
        self._last_refill = now

    def is_full(self) -> bool:
        self._refill()
        return self._tokens >= self._burst


class RateLimitMiddleware(Middleware):
    """One bucket per caller key; callers without a key share ``"anonymous"``.

    Once more than ``max_buckets`` keys are tracked, buckets that have
    refilled completely are dropped; a new bucket for the same key starts
    full, so this loses no limiting state.
    """

    def __init__(
        self,
        requests_per_minute: int,
        burst: int = 5,
        *,
        key_of: KeyGetter | None = None,
        max_buckets: int = 10_000,
    ) -> None:
        self._rate = requests_per_minute / 60.0
        self._burst = burst
        self._key_of = key_of or user_id_from_ctx
        self._max_buckets = max_buckets
        self._buckets: dict[str, TokenBucket] = {}

    def _prune(self) -> None:
        idle = [key for key, bucket in self._buckets.items() if bucket.is_full()]
        for key in idle:
            del self._buckets[key]
        logger.debug("rate_limit_buckets_pruned", removed=len(idle))

    def _get_bucket(self, key: str) -> TokenBucket:
        if key not in self._buckets:
            if len(self._buckets) >= self._max_buckets:
                self._prune()
            self._buckets[key] = TokenBucket(self._rate, self._burst)
        return self._buckets[key]

    async def __call__(
        self,
        *,
        ctx: Any,
        type: ProcedureType,
        path: str,
        raw_input: Any,
        options: Any,
        call_next: NextFn,
    ) -> ChainResult:
        key = self._key_of(ctx) or "anonymous"
        if self._get_bucket(key).consume():
            return await call_next()

        logger.warning("rate_limited", key=key, path=path)
        return ChainError(
            error=ProcedureError(
                ErrorCode.TOO_MANY_REQUESTS,
                "Rate limited. Please wait before calling again.",
            )
        )
