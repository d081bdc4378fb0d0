"""
Dependency checks for the readiness endpoint.

Checks answer True or False and never raise, so a failing dependency
turns into a 503 rather than an unhandled error.
"""

import asyncio
import logging

from sqlalchemy import text

from storefront.core.database import async_session_maker

logger = logging.getLogger(__name__)

DATABASE_CHECK_TIMEOUT = 2.0


async def check_database(timeout_seconds: float = DATABASE_CHECK_TIMEOUT) -> bool:
    """
    Run ``SELECT 1`` on a fresh session within ``timeout_seconds``.

    The bound keeps an unreachable database host from holding the
    platform's readiness poll open.
    """
    try:
        async with asyncio.timeout(timeout_seconds):
            async with async_session_maker() as session:
                (await session.execute(text("SELECT 1"))).scalar()
        return True
    except asyncio.TimeoutError:
        logger.warning("Database probe timed out", extra={"timeout_seconds": timeout_seconds})
    except Exception as exc:
        logger.warning(f"Database probe failed: {exc}", extra={"exception_type": type(exc).__name__})
    return False
