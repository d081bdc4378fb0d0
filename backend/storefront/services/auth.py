"""
OTP sign-in flows for customers and admins.

Both flows share one lifecycle:

1. send: generate a six-digit code, replace the user's previous codes,
   deliver it (or log it when no provider is configured)
2. verify: take the latest unused code by expiry, reject it if expired or
   different, mark it used, issue a JWT

Customers are created on their first request; admins must already exist
and be active.
"""

import logging
import re
from typing import Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.exceptions import AuthenticationFailed, StoreError, ValidationFailed
from storefront.core.otp import codes_match, generate_otp, is_expired, is_well_formed, otp_expires_at
from storefront.core.security import create_admin_token, create_customer_token
from storefront.models.user import User
from storefront.repositories.otp import OTPRepository
from storefront.repositories.user import AdminUserRepository, UserRepository
from storefront.services.interfaces.email_sender import IEmailSender

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# Returned instead of an admin id when the email is unknown or inactive
INVALID_ADMIN_ID = "invalid"


async def issue_otp(session: AsyncSession, user_id: str) -> str:
    """Store a fresh code for ``user_id`` (dropping older ones) and return it."""
    code = generate_otp()
    await OTPRepository(session).replace_for_user(user_id, code, otp_expires_at())
    return code


async def redeem_otp(session: AsyncSession, user_id: str, submitted: str) -> None:
    """
    Check ``submitted`` against the user's latest unused code and consume it.

    Raises:
        ValidationFailed: No active code, expired code or wrong code

    Note:
        Failing to mark the code used is logged and ignored; the update
        runs in a savepoint so the surrounding transaction stays usable.
    """
    otp_repo = OTPRepository(session)
    record = await otp_repo.get_latest_unused(user_id)

    if record is None:
        raise ValidationFailed("No active OTP found. Please request a new one.")
    if is_expired(record.expires_at):
        raise ValidationFailed("OTP has expired. Please request a new one.")
    if not codes_match(record.code, submitted):
        logger.info("Incorrect OTP submitted", extra={"user_id": user_id})
        raise ValidationFailed("Incorrect OTP. Please try again.")

    try:
        async with session.begin_nested():
            await otp_repo.mark_used(record.id)
    except SQLAlchemyError as e:
        logger.error(f"Failed to mark OTP used: {e}", extra={"user_id": user_id, "otp_id": record.id})


class CustomerAuthService:
    """
    Customer OTP sign-in.

    Attributes:
        session: Request database session
        mailer: Sender for customer emails
    """

    def __init__(self, session: AsyncSession, mailer: IEmailSender):
        self.session = session
        self.mailer = mailer
        self.users = UserRepository(session)

    async def _resolve_user(
        self,
        email: Optional[str],
        phone: Optional[str],
        name: Optional[str]
    ) -> User:
        user = await self.users.find_by_contact(email=email, phone=phone)
        if user is None:
            user = await self.users.create(email=email, phone=phone, full_name=name)
            logger.info("Customer created", extra={"user_id": user.id})
            return user

        if name:
            user.full_name = name
        # Backfill a contact the row is missing, when nobody else holds it
        if email and not user.email:
            user.email = email
        if phone and not user.phone and await self.users.find_by_contact(phone=phone) is None:
            user.phone = phone
        await self.session.flush()
        return user

    async def send_otp(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        name: Optional[str] = None
    ) -> str:
        """
        Issue a login code for a customer, creating the account if needed.

        Args:
            email: Contact email (the code is emailed when present)
            phone: Contact phone
            name: Display name, updates the account when given

        Returns:
            The customer's user id

        Raises:
            ValidationFailed: Neither contact given, or malformed email
            EmailDeliveryError: The email provider failed
        """
        email = email.strip() if email else None
        phone = phone.strip() if phone else None
        name = name.strip() if name else None

        if not email and not phone:
            raise ValidationFailed("Email or phone required")
        if email and not EMAIL_PATTERN.match(email):
            raise ValidationFailed("Invalid email format")

        user = await self._resolve_user(email, phone, name)
        code = await issue_otp(self.session, user.id)

        if email:
            await self.mailer.send_otp(email, code)
        else:
            # No SMS provider; the code only reaches the log with OTP_LOG_FALLBACK
            if settings.otp_log_fallback:
                logger.warning(
                    f"No SMS provider configured; OTP for user {user.id} is {code}",
                    extra={"user_id": user.id, "phone": phone}
                )
            else:
                logger.warning(
                    "No SMS provider configured; OTP not delivered",
                    extra={"user_id": user.id, "phone": phone}
                )

        logger.info("Customer OTP issued", extra={"user_id": user.id})
        return user.id

    async def verify_otp(
        self,
        otp: Optional[str],
        user_id: Optional[str] = None,
        email: Optional[str] = None
    ) -> Tuple[str, User]:
        """
        Redeem a customer code.

        Returns:
            Tuple of (JWT, user)

        Raises:
            ValidationFailed: Bad input, unknown email, or a rejected code
            StoreError: The user row vanished after the code was accepted
        """
        if not is_well_formed(otp):
            raise ValidationFailed("A 6-digit OTP is required")
        if not user_id and not email:
            raise ValidationFailed("userId or email is required")

        if not user_id:
            user = await self.users.get_by_email(email.strip())
            if user is None:
                raise ValidationFailed("User not found")
            user_id = user.id

        await redeem_otp(self.session, user_id, otp)

        token = create_customer_token(user_id)

        user = await self.users.get_by_id(user_id)
        if user is None:
            logger.error("Verified OTP for missing user", extra={"user_id": user_id})
            raise StoreError("Verified but could not load user data")

        logger.info("Customer signed in", extra={"user_id": user_id})
        return token, user


class AdminAuthService:
    """
    Admin OTP sign-in.

    Unknown or inactive emails never reveal themselves: send answers with
    the INVALID_ADMIN_ID placeholder and verify rejects it.
    """

    def __init__(self, session: AsyncSession, mailer: IEmailSender):
        self.session = session
        self.mailer = mailer
        self.admins = AdminUserRepository(session)

    async def send_otp(self, email: Optional[str]) -> Optional[str]:
        """
        Issue an admin login code.

        Returns:
            The admin id, or None when the email is unknown or inactive

        Raises:
            ValidationFailed: Email missing or blank
            EmailDeliveryError: The SMTP relay failed
        """
        if not email or not email.strip():
            raise ValidationFailed("Email is required")

        normalized = email.strip().lower()
        admin = await self.admins.get_by_email(normalized)
        if admin is None or not admin.is_active:
            logger.warning("Admin OTP requested for unknown or inactive email", extra={"email": normalized})
            return None

        code = await issue_otp(self.session, admin.id)
        await self.mailer.send_otp(admin.email, code)

        logger.info("Admin OTP issued", extra={"admin_id": admin.id})
        return admin.id

    async def verify_otp(self, user_id: Optional[str], otp: Optional[str]) -> Tuple[str, str]:
        """
        Redeem an admin code.

        Returns:
            Tuple of (JWT, admin email)

        Raises:
            ValidationFailed: Missing fields or a rejected code
            AuthenticationFailed: Placeholder id, or admin missing/inactive
        """
        if not user_id or not otp:
            raise ValidationFailed("userId and otp are required")
        if not is_well_formed(otp):
            raise ValidationFailed("OTP must be 6 digits")
        if user_id == INVALID_ADMIN_ID:
            raise AuthenticationFailed("Invalid or expired OTP")

        await redeem_otp(self.session, user_id, otp)

        admin = await self.admins.get_by_id(user_id)
        if admin is None or not admin.is_active:
            logger.warning("Admin OTP redeemed for missing or inactive admin", extra={"admin_id": user_id})
            raise AuthenticationFailed("Admin user not found")

        logger.info("Admin signed in", extra={"admin_id": admin.id})
        return create_admin_token(admin.id, admin.email), admin.email
