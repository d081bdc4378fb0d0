"""
Payment Gateway Interface (IPaymentGateway)

Abstract base class for the hosted-checkout payment provider. The store
never handles card data: it creates a gateway order, the browser completes
payment with the provider, and the provider's signed callback is verified
here before anything is written to the database.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IPaymentGateway(ABC):
    """
    Abstract interface for payment gateway operations.

    Implementations must:
    - Retry transient transport failures with backoff
    - Raise UpstreamServiceError when the provider rejects a call
    - Compare signatures in constant time
    """

    @abstractmethod
    async def create_order(
        self,
        amount_minor: int,
        currency: str,
        receipt: str
    ) -> Dict[str, Any]:
        """
        Create a gateway order the browser checkout can pay.

        Args:
            amount_minor: Amount in the currency's minor unit (paise for INR)
            currency: ISO currency code, e.g. "INR"
            receipt: Merchant reference, e.g. "rcpt_1700000000000"

        Returns:
            The provider's order object, at least:
            {
                "id": "order_Abc123",
                "amount": 49900,
                "currency": "INR",
                "receipt": "rcpt_1700000000000",
                "status": "created"
            }

        Raises:
            UpstreamServiceError: If the provider call fails
        """
        pass

    @abstractmethod
    def verify_signature(
        self,
        order_id: str,
        payment_id: str,
        signature: str
    ) -> bool:
        """
        Check the checkout callback signature.

        Args:
            order_id: Gateway order id returned by create_order
            payment_id: Gateway payment id from the callback
            signature: Hex signature from the callback

        Returns:
            True when the signature was produced with the merchant secret
        """
        pass
