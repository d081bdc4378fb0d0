"""
Security module for token issuing and validation.

Provides JWT token handling for customers and admins using python-jose.
Both kinds of session start from a verified one-time password; the
``role`` claim tells them apart.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Literal
from jose import JWTError, jwt
from pydantic import BaseModel

from storefront.core.config import settings

# JWT Algorithm
ALGORITHM = "HS256"

ROLE_CUSTOMER = "customer"
ROLE_ADMIN = "admin"


class TokenData(BaseModel):
    """
    JWT token payload data model.

    Contains the claims stored in the JWT token.
    """
    user_id: str
    role: Literal["customer", "admin"]
    email: Optional[str] = None
    exp: Optional[datetime] = None


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary of claims to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.customer_token_expire_minutes
        )

    to_encode.update({"exp": expire})

    return jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=ALGORITHM
    )


def create_customer_token(user_id: str) -> str:
    """Token for a customer who just verified an OTP (7 days by default)."""
    return create_access_token(
        {"sub": user_id, "userId": user_id, "role": ROLE_CUSTOMER},
        expires_delta=timedelta(minutes=settings.customer_token_expire_minutes),
    )


def create_admin_token(admin_id: str, email: str) -> str:
    """Token for the admin dashboard (8 hours by default)."""
    return create_access_token(
        {"sub": admin_id, "userId": admin_id, "email": email, "role": ROLE_ADMIN},
        expires_delta=timedelta(minutes=settings.admin_token_expire_minutes),
    )


def decode_access_token(token: str) -> Optional[TokenData]:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        TokenData if valid, None if invalid, expired or missing claims
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[ALGORITHM]
        )
    except JWTError:
        return None

    user_id = payload.get("sub") or payload.get("userId")
    role = payload.get("role")
    if not user_id or role not in (ROLE_CUSTOMER, ROLE_ADMIN):
        return None

    return TokenData(
        user_id=user_id,
        role=role,
        email=payload.get("email"),
        exp=payload.get("exp"),
    )
