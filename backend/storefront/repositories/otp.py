"""
OTP repository.

Keeps at most one code row per user: issuing a new code deletes the old
ones in the same transaction.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.otp import OTPCode


class OTPRepository:
    """
    Repository for one-time password rows.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def replace_for_user(
        self,
        user_id: str,
        code: str,
        expires_at: datetime
    ) -> OTPCode:
        """
        Store a fresh code for ``user_id``, dropping any previous codes.

        Args:
            user_id: Customer or admin id
            code: Six-digit code
            expires_at: UTC expiry instant

        Returns:
            The inserted OTPCode row
        """
        await self.session.execute(delete(OTPCode).where(OTPCode.user_id == user_id))

        otp = OTPCode(user_id=user_id, code=code, expires_at=expires_at, used=False)
        self.session.add(otp)
        await self.session.flush()
        return otp

    async def get_latest_unused(self, user_id: str) -> Optional[OTPCode]:
        """Unused code with the latest ``expires_at`` for the user."""
        stmt = (
            select(OTPCode)
            .where(OTPCode.user_id == user_id, OTPCode.used.is_(False))
            .order_by(OTPCode.expires_at.desc())
            .limit(1)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_used(self, otp_id: str) -> None:
        await self.session.execute(
            update(OTPCode).where(OTPCode.id == otp_id).values(used=True)
        )
