"""
Access logging.

One record when a request starts and one when it completes, carrying
method, path, status code, latency, client address and the correlation
id. Server errors are logged at WARNING so they stand out from regular
traffic; unhandled exceptions are logged with a traceback and re-raised
for the exception handlers.

Runs inside RequestContextMiddleware, which sets request_id and client_ip.
"""

import time
from typing import Any, Callable, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.logging_config import get_logger


logger = get_logger(__name__)

# Probes are polled constantly by the platform; keep them out of the logs
QUIET_PATHS = ("/health", "/health/ready")


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every non-probe request and its outcome."""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        path = request.url.path
        context: Dict[str, Any] = {
            "method": request.method,
            "path": path,
            "client_ip": getattr(request.state, "client_ip", None),
            "request_id": getattr(request.state, "request_id", None),
        }
        quiet = path in QUIET_PATHS

        if not quiet:
            logger.info(
                "Request started",
                extra={**context, "query_params": str(request.query_params) or None},
            )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                f"Request failed: {exc}",
                extra={**context, "latency_ms": _elapsed_ms(started), "exception_type": type(exc).__name__},
                exc_info=True
            )
            raise

        if not quiet:
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "Request completed",
                extra={**context, "status_code": response.status_code, "latency_ms": _elapsed_ms(started)},
            )

        return response
