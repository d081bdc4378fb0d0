"""
Request/response schemas for customer and admin OTP sign-in.

Request fields are optional at the schema level: the auth services own the
presence checks so the error messages stay exact. JSON keys follow the
storefront client (``userId``); Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _digits_to_str(value: Any) -> Any:
    # Forms sometimes post the code as a number
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class SendOTPRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Customer email (code is emailed)")
    phone: Optional[str] = Field(default=None, description="Customer phone")
    name: Optional[str] = Field(default=None, description="Display name")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"email": "driver@example.com", "name": "Asha"}
        }
    )


class SendOTPResponse(BaseModel):
    success: bool = True
    message: str = "OTP sent successfully"
    user_id: str = Field(alias="userId")

    model_config = ConfigDict(populate_by_name=True)


class VerifyOTPRequest(BaseModel):
    """
    Customer code redemption.

    Attributes:
        otp: Six-digit code
        user_id: Id returned by send-otp (``userId``)
        email: Alternative to user_id
    """
    otp: Optional[str] = None
    user_id: Optional[str] = Field(default=None, alias="userId")
    email: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("otp", mode="before")
    @classmethod
    def coerce_otp(cls, v: Any) -> Any:
        return _digits_to_str(v)


class UserOut(BaseModel):
    id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    full_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class VerifyOTPResponse(BaseModel):
    success: bool = True
    token: str
    user: UserOut


class MeResponse(BaseModel):
    success: bool = True
    user: UserOut


class AdminSendOTPRequest(BaseModel):
    email: Optional[str] = None


class AdminSendOTPResponse(BaseModel):
    """``userId`` is "invalid" when the email is not a registered, active admin."""
    user_id: str = Field(alias="userId")
    message: str

    model_config = ConfigDict(populate_by_name=True)


class AdminVerifyOTPRequest(BaseModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    otp: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("otp", mode="before")
    @classmethod
    def coerce_otp(cls, v: Any) -> Any:
        return _digits_to_str(v)


class AdminVerifyOTPResponse(BaseModel):
    token: str
    email: str
