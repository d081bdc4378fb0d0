"""
One-time password rows.

``user_id`` holds either a customer id (``users``) or an admin id
(``admin_users``); it is deliberately not a foreign key.
"""

from sqlalchemy import Boolean, Column, DateTime, Index, String

from storefront.models.base import Base, CreatedAtMixin, ModelMixin, UUIDMixin


class OTPCode(Base, UUIDMixin, CreatedAtMixin, ModelMixin):
    """
    A six-digit code waiting to be redeemed.

    Attributes:
        user_id: Owner (customer or admin id)
        code: The digits as sent to the user
        expires_at: UTC instant after which the code is rejected
        used: Set once the code has been redeemed
    """

    __tablename__ = "otp_codes"
    __table_args__ = (
        Index("ix_otp_codes_user_used", "user_id", "used"),
    )

    user_id = Column(String(36), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    used = Column(Boolean, nullable=False, default=False)

    def __repr__(self) -> str:
        # code is a credential, keep it out of reprs
        return f"OTPCode(id={self.id!r}, user_id={self.user_id!r}, used={self.used!r})"
