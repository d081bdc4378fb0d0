"""
Per-request context: correlation id and client address.

Every request carries an ``X-Request-ID``: the client's value when it is
a sane token, a fresh UUID4 otherwise. The id and the resolved client IP
are stored on ``request.state`` for the logging and rate limiting layers,
and the id is echoed back on the response.
"""

import re
import uuid
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from storefront.core.config import settings

REQUEST_ID_HEADER = "X-Request-ID"

# Accepted client-supplied ids; anything else is replaced
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def client_ip(request: Request) -> str:
    """
    Address the request is attributed to.

    The first X-Forwarded-For hop is used only when the direct peer is
    listed in TRUSTED_PROXIES; otherwise the header is client controlled
    and the peer address wins.
    """
    peer = request.client.host if request.client else None
    forwarded = request.headers.get("X-Forwarded-For")
    trusted = settings.trusted_proxies
    if forwarded and ("*" in trusted or (peer is not None and peer in trusted)):
        return forwarded.split(",")[0].strip()
    return peer or "unknown"


def resolve_request_id(header_value: Optional[str]) -> str:
    if header_value and _REQUEST_ID_PATTERN.match(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Populate ``request.state.request_id`` and ``request.state.client_ip``.

    Must be the outermost application middleware so every other layer
    sees the context.
    """

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        request.state.client_ip = client_ip(request)

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
