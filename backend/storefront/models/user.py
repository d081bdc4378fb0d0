"""
Customer and admin account models.

Customers sign in with an OTP sent to their email (or registered with a
phone number); admins are pre-provisioned rows in ``admin_users`` and also
sign in with an emailed OTP.
"""

from sqlalchemy import Boolean, Column, String

from storefront.models.base import Base, ModelMixin, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin, ModelMixin):
    """
    Store customer.

    Attributes:
        id: UUID primary key (from UUIDMixin)
        email: Contact email, unique when present
        phone: Contact phone, unique when present
        full_name: Display name supplied at OTP request time

    At least one of email/phone is set; rows are created on the first
    OTP request for an unknown contact.
    """

    __tablename__ = "users"

    email = Column(String(320), unique=True, index=True, nullable=True)
    phone = Column(String(32), unique=True, index=True, nullable=True)
    full_name = Column(String(255), nullable=True)


class AdminUser(Base, UUIDMixin, TimestampMixin, ModelMixin):
    """
    Admin dashboard account.

    Attributes:
        email: Lower-cased login email (unique)
        is_active: Inactive admins cannot request or redeem OTPs
        admin_key: Opaque per-admin key managed outside this service

    Security considerations:
        - Never log or expose admin_key
    """

    __tablename__ = "admin_users"

    email = Column(String(320), unique=True, index=True, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    admin_key = Column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"AdminUser(id={self.id!r}, email={self.email!r})"
