"""
Store exception hierarchy.

Services and repositories raise these; the application-level handlers in
``storefront.core.errors`` render them as the JSON error envelope:

    {"success": false, "error": {"message": "..."}}
"""

from fastapi import status


class StoreError(Exception):
    """Base exception for the store API"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(StoreError):
    """Raised when request data fails a business validation rule"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationFailed(StoreError):
    """Raised when credentials, OTPs or tokens are rejected"""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFound(StoreError):
    """Raised when the requested row does not exist"""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class Conflict(StoreError):
    """Raised when a unique constraint would be violated"""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class PayloadTooLarge(StoreError):
    """Raised when an upload exceeds the configured size"""

    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "File too large"


class ServiceNotConfigured(StoreError):
    """Raised when a feature needs provider credentials that are not set"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service not configured"


class UpstreamServiceError(StoreError):
    """Raised when a payment, email or storage provider call fails"""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service error"


class EmailDeliveryError(UpstreamServiceError):
    """Raised when an OTP email cannot be delivered"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Failed to send OTP email"
