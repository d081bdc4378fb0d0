"""
Exception handlers rendering every failure as the store error envelope.

Registered on the application by ``register_exception_handlers``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.core.exceptions import StoreError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, **extra) -> JSONResponse:
    """Build ``{"success": false, "error": {"message": ...}}``."""
    error = {"message": message}
    error.update(extra)
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": jsonable_encoder(error)},
    )


async def store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{type(exc).__name__}: {exc.message}",
            extra={
                "path": request.url.path,
                "request_id": getattr(request.state, "request_id", None),
            },
        )
    return error_response(exc.status_code, exc.message)


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    # Unknown route
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = "Route not found"
    response = error_response(exc.status_code, message)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    first = details[0]["msg"] if details else "Invalid request"
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        f"Validation error: {first}",
        details=details,
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error: {exc}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "request_id": getattr(request.state, "request_id", None),
            "exception_type": type(exc).__name__,
        },
        exc_info=exc,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, store_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
