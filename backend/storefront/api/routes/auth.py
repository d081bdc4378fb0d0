"""
OTP sign-in endpoints for customers and admins.

Customer flow:  POST /auth/send-otp        -> POST /auth/verify-otp
Admin flow:     POST /auth/admin-send-otp  -> POST /auth/admin-verify-otp
"""


from fastapi import APIRouter, status

from storefront.api.dependencies import (
    AdminMailer,
    CurrentCustomer,
    CustomerMailer,
    DatabaseSession,
)
from storefront.core.exceptions import NotFound
from storefront.repositories.user import UserRepository
from storefront.schemas.auth import (
    AdminSendOTPRequest,
    AdminSendOTPResponse,
    AdminVerifyOTPRequest,
    AdminVerifyOTPResponse,
    MeResponse,
    SendOTPRequest,
    SendOTPResponse,
    UserOut,
    VerifyOTPRequest,
    VerifyOTPResponse,
)
from storefront.services.auth import INVALID_ADMIN_ID, AdminAuthService, CustomerAuthService


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/send-otp", response_model=SendOTPResponse, status_code=status.HTTP_200_OK)
async def send_otp(
    body: SendOTPRequest,
    db: DatabaseSession,
    mailer: CustomerMailer,
) -> SendOTPResponse:
    """
    Issue a customer login code.

    Finds the customer by email or phone (creating the account on first
    use), stores a fresh six-digit code valid for OTP_TTL_MINUTES and
    emails it when an email was given.

    Example:
        POST /api/auth/send-otp
        {"email": "driver@example.com", "name": "Asha"}

        Response:
        {"success": true, "message": "OTP sent successfully", "userId": "..."}
    """
    user_id = await CustomerAuthService(db, mailer).send_otp(
        email=body.email, phone=body.phone, name=body.name
    )
    return SendOTPResponse(user_id=user_id)


@router.post("/verify-otp", response_model=VerifyOTPResponse, status_code=status.HTTP_200_OK)
async def verify_otp(
    body: VerifyOTPRequest,
    db: DatabaseSession,
    mailer: CustomerMailer,
) -> VerifyOTPResponse:
    """
    Redeem a customer code for a 7-day JWT.

    Either ``userId`` (from send-otp) or ``email`` identifies the customer.
    """
    token, user = await CustomerAuthService(db, mailer).verify_otp(
        otp=body.otp, user_id=body.user_id, email=body.email
    )
    return VerifyOTPResponse(token=token, user=UserOut.model_validate(user))


@router.get("/me", response_model=MeResponse)
async def me(customer: CurrentCustomer, db: DatabaseSession) -> MeResponse:
    """Profile of the signed-in customer."""
    user = await UserRepository(db).get_by_id(customer.user_id)
    if user is None:
        raise NotFound("User not found")
    return MeResponse(user=UserOut.model_validate(user))


@router.post("/admin-send-otp", response_model=AdminSendOTPResponse, status_code=status.HTTP_200_OK)
async def admin_send_otp(
    body: AdminSendOTPRequest,
    db: DatabaseSession,
    mailer: AdminMailer,
) -> AdminSendOTPResponse:
    """
    Issue an admin login code.

    Unknown or inactive emails get the same 200 answer with
    ``userId: "invalid"`` so the endpoint cannot be used to discover
    admin addresses.
    """
    admin_id = await AdminAuthService(db, mailer).send_otp(body.email)
    if admin_id is None:
        return AdminSendOTPResponse(user_id=INVALID_ADMIN_ID, message="OTP sent if email is registered")
    return AdminSendOTPResponse(user_id=admin_id, message="OTP sent")


@router.post("/admin-verify-otp", response_model=AdminVerifyOTPResponse, status_code=status.HTTP_200_OK)
async def admin_verify_otp(
    body: AdminVerifyOTPRequest,
    db: DatabaseSession,
    mailer: AdminMailer,
) -> AdminVerifyOTPResponse:
    """Redeem an admin code for an 8-hour admin JWT."""
    token, email = await AdminAuthService(db, mailer).verify_otp(body.user_id, body.otp)
    return AdminVerifyOTPResponse(token=token, email=email)
