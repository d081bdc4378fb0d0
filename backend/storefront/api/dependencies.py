"""
FastAPI dependency functions.

Provides the database session, bearer-token authentication for customers
and admins, and the external provider clients. Providers are built from
settings per request; tests replace them through
``app.dependency_overrides``.
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.database import get_db
from storefront.core.security import ROLE_ADMIN, ROLE_CUSTOMER, TokenData, decode_access_token
from storefront.services.interfaces import IEmailSender, IImageStorage, IPaymentGateway
from storefront.services.mailer import LoggingEmailSender, ResendEmailSender, SMTPEmailSender
from storefront.services.razorpay_client import RazorpayClient
from storefront.services.storage import SupabaseImageStorage


# Missing headers are reported by the dependencies with the store's own messages
security = HTTPBearer(auto_error=False)

DatabaseSession = Annotated[AsyncSession, Depends(get_db)]


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_customer(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> TokenData:
    """
    Dependency returning the claims of a valid customer token.

    Raises:
        HTTPException 401: Missing, invalid, expired or non-customer token

    Example:
        @router.get("/me")
        async def me(customer: Annotated[TokenData, Depends(get_current_customer)]):
            ...
    """
    if credentials is None:
        raise _unauthorized("No token provided")

    token_data = decode_access_token(credentials.credentials)
    if token_data is None or token_data.role != ROLE_CUSTOMER:
        raise _unauthorized("Invalid or expired token")
    return token_data


async def get_current_admin(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> TokenData:
    """
    Dependency guarding every /api/admin route.

    Security:
        - Validates JWT signature and expiry with SECRET_KEY
        - Requires the "admin" role claim; customer tokens are rejected
        - Answers 401 with WWW-Authenticate on any failure

    Raises:
        HTTPException 401: "No admin token provided" when the Authorization
            header is missing or not a Bearer token, "Invalid or expired
            admin token" otherwise
    """
    if credentials is None:
        raise _unauthorized("No admin token provided")

    token_data = decode_access_token(credentials.credentials)
    if token_data is None or token_data.role != ROLE_ADMIN:
        raise _unauthorized("Invalid or expired admin token")
    return token_data


CurrentCustomer = Annotated[TokenData, Depends(get_current_customer)]
CurrentAdmin = Annotated[TokenData, Depends(get_current_admin)]


def get_payment_gateway() -> Optional[IPaymentGateway]:
    """Razorpay client, or None when the key pair is not configured."""
    if not settings.razorpay_configured:
        return None
    return RazorpayClient(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        base_url=settings.razorpay_base_url,
    )


def get_customer_mailer() -> IEmailSender:
    """Resend sender, or the logging fallback without RESEND_API_KEY."""
    if not settings.resend_api_key:
        return LoggingEmailSender(channel="email", reveal_code=settings.otp_log_fallback)
    return ResendEmailSender(
        api_key=settings.resend_api_key,
        sender=settings.email_from,
        store_name=settings.store_name,
        ttl_minutes=settings.otp_ttl_minutes,
        api_url=settings.resend_api_url,
    )


def get_admin_mailer() -> IEmailSender:
    """SMTP sender, or the logging fallback without SMTP settings."""
    if not settings.smtp_configured:
        return LoggingEmailSender(channel="smtp", reveal_code=settings.otp_log_fallback)
    return SMTPEmailSender(
        host=settings.smtp_host,
        port=settings.smtp_port,
        user=settings.smtp_user,
        password=settings.smtp_pass,
        store_name=settings.store_name,
        ttl_minutes=settings.otp_ttl_minutes,
    )


def get_image_storage() -> Optional[IImageStorage]:
    """Supabase storage, or None when the project URL/key are not configured."""
    if not settings.storage_configured:
        return None
    return SupabaseImageStorage(
        base_url=settings.supabase_url,
        service_key=settings.supabase_service_key,
        bucket=settings.storage_bucket,
    )


PaymentGateway = Annotated[Optional[IPaymentGateway], Depends(get_payment_gateway)]
CustomerMailer = Annotated[IEmailSender, Depends(get_customer_mailer)]
AdminMailer = Annotated[IEmailSender, Depends(get_admin_mailer)]
ImageStorage = Annotated[Optional[IImageStorage], Depends(get_image_storage)]
