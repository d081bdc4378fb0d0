"""
Per-IP rate limiting middleware using the token bucket algorithm.

Every client IP gets one bucket per limit class. OTP endpoints (any path
containing ``/auth``) use the stricter ``auth_limit`` to slow down code
guessing; everything else uses ``default_limit``. Client IPs come from
``client_ip``, which only believes X-Forwarded-For from TRUSTED_PROXIES.
Both limits are requests per minute with a burst equal to the limit.

Buckets live in process memory; each worker enforces its own limits.
"""

import time
from typing import Callable, Dict, Tuple
import logging

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.middleware.context import client_ip

logger = logging.getLogger(__name__)

# Buckets idle this long are dropped
BUCKET_IDLE_SECONDS = 600


class TokenBucket:
    """
    Token bucket for rate limiting.

    Attributes:
        capacity: Maximum number of tokens in the bucket
        refill_rate: Number of tokens added per second
        tokens: Current number of available tokens
        last_refill: Timestamp of last refill operation
    """

    def __init__(self, capacity: int, refill_rate: float):
        self.capacity = capacity
        self.refill_rate = refill_rate
        self.tokens = float(capacity)
        self.last_refill = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self.last_refill
        self.tokens = min(self.capacity, self.tokens + elapsed * self.refill_rate)
        self.last_refill = now

    def consume(self, tokens: int = 1) -> bool:
        """
        Take ``tokens`` from the bucket after refilling for elapsed time.

        Returns:
            True if the request may proceed, False if the bucket is empty
        """
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    def get_wait_time(self) -> float:
        """Seconds until one token is available again."""
        if self.tokens >= 1:
            return 0.0
        return (1 - self.tokens) / self.refill_rate


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Rate limiting middleware using a token bucket per client IP.

    Rejected requests get 429 in the store error envelope plus
    ``Retry-After`` and ``X-RateLimit-*`` headers.

    Example:
        app.add_middleware(
            RateLimitMiddleware,
            auth_limit=settings.auth_rate_limit,
            default_limit=settings.default_rate_limit,
        )
    """

    def __init__(
        self,
        app,
        auth_limit: int = 10,
        default_limit: int = 60,
        cleanup_interval: int = 300,
    ):
        super().__init__(app)
        self.auth_limit = auth_limit
        self.default_limit = default_limit
        self.cleanup_interval = cleanup_interval

        # {(ip, limit class): (bucket, last access)}
        self.buckets: Dict[Tuple[str, str], Tuple[TokenBucket, float]] = {}
        self.last_cleanup = time.monotonic()

        logger.info(
            "Rate limiting initialized",
            extra={
                "auth_limit": auth_limit,
                "default_limit": default_limit,
            }
        )

    def _get_limit_class(self, path: str) -> Tuple[str, int]:
        if "/auth" in path:
            return "auth", self.auth_limit
        return "default", self.default_limit

    def _get_or_create_bucket(self, ip: str, limit_class: str, limit: int) -> TokenBucket:
        now = time.monotonic()

        if now - self.last_cleanup > self.cleanup_interval:
            self._cleanup_old_buckets(now)

        key = (ip, limit_class)
        entry = self.buckets.get(key)
        if entry is not None:
            bucket = entry[0]
        else:
            bucket = TokenBucket(capacity=limit, refill_rate=limit / 60.0)
        self.buckets[key] = (bucket, now)
        return bucket

    def _cleanup_old_buckets(self, now: float) -> None:
        stale = [
            key for key, (_, last_access) in self.buckets.items()
            if now - last_access > BUCKET_IDLE_SECONDS
        ]
        for key in stale:
            del self.buckets[key]

        if stale:
            logger.info(
                "Cleaned up old rate limit buckets",
                extra={"count": len(stale)}
            )
        self.last_cleanup = now

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        if request.method == "OPTIONS":
            return await call_next(request)

        ip = getattr(request.state, "client_ip", None) or client_ip(request)
        path = request.url.path
        limit_class, limit = self._get_limit_class(path)
        bucket = self._get_or_create_bucket(ip, limit_class, limit)

        if not bucket.consume():
            retry_after = int(bucket.get_wait_time()) + 1

            logger.warning(
                "Rate limit exceeded",
                extra={
                    "client_ip": ip,
                    "path": path,
                    "limit": limit,
                    "retry_after": retry_after,
                    "request_id": getattr(request.state, "request_id", None),
                }
            )

            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={
                    "success": False,
                    "error": {
                        "message": "Too many requests. Please try again later.",
                        "limit": limit,
                        "window": "1 minute",
                        "retry_after": retry_after,
                    },
                },
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(limit),
                    "X-RateLimit-Remaining": "0",
                }
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(limit)
        response.headers["X-RateLimit-Remaining"] = str(int(bucket.tokens))
        return response
