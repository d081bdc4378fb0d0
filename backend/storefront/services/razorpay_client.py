"""
Razorpay payment gateway client.

Implements IPaymentGateway against the Razorpay REST API with httpx:
- Orders are created with HTTP basic auth (key id / key secret)
- Transient failures (connection errors, 5xx, 525) are retried with backoff
- Checkout callbacks are verified with HMAC-SHA256 over "order_id|payment_id"
"""

import hashlib
import hmac
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.core.exceptions import UpstreamServiceError
from storefront.core.retry import (
    TRANSIENT_HTTP_ERRORS,
    raise_for_retryable_status,
    retry_with_backoff,
)
from storefront.services.interfaces.payment_gateway import IPaymentGateway

logger = logging.getLogger(__name__)


def compute_signature(order_id: str, payment_id: str, key_secret: str) -> str:
    """Hex HMAC-SHA256 of ``"{order_id}|{payment_id}"`` keyed with the merchant secret."""
    body = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(key_secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


class RazorpayClient(IPaymentGateway):
    """
    Razorpay REST client.

    Attributes:
        key_id: Public key id (basic-auth user)
        key_secret: Secret key (basic-auth password and signature key)
        base_url: API root, "https://api.razorpay.com/v1" in production
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.key_id = key_id
        self.key_secret = key_secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.key_id, self.key_secret),
            timeout=self.timeout,
            transport=self._transport,
        )

    @retry_with_backoff(max_retries=2, base_delay=0.8, exceptions=TRANSIENT_HTTP_ERRORS)
    async def _post_order(self, payload: Dict[str, Any]) -> httpx.Response:
        async with self._client() as client:
            response = await client.post("/orders", json=payload)
        return raise_for_retryable_status(response)

    async def create_order(
        self,
        amount_minor: int,
        currency: str,
        receipt: str
    ) -> Dict[str, Any]:
        payload = {"amount": amount_minor, "currency": currency, "receipt": receipt}

        try:
            response = await self._post_order(payload)
        except TRANSIENT_HTTP_ERRORS as e:
            raise UpstreamServiceError(f"Payment gateway unavailable: {e}") from e

        if response.is_error:
            description = _error_description(response)
            logger.error(
                "Razorpay order creation rejected",
                extra={"status_code": response.status_code, "receipt": receipt}
            )
            raise UpstreamServiceError(f"Payment gateway error: {description}")

        order = response.json()
        logger.info(
            "Razorpay order created",
            extra={"razorpay_order_id": order.get("id"), "amount": amount_minor, "receipt": receipt}
        )
        return order

    def verify_signature(
        self,
        order_id: str,
        payment_id: str,
        signature: str
    ) -> bool:
        expected = compute_signature(order_id, payment_id, self.key_secret)
        return hmac.compare_digest(expected.encode("utf-8"), (signature or "").encode("utf-8"))


def _error_description(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("description"):
        return error["description"]
    return f"HTTP {response.status_code}"
