"""
Checkout: gateway order creation and payment verification.

Nothing is written to the database until the gateway's callback
signature checks out. A verified payment then becomes, in one
transaction, an order, its lines, the stock decrements and a payment
record.
"""

import logging
import math
import time
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.config import settings
from storefront.core.exceptions import ServiceNotConfigured, ValidationFailed
from storefront.repositories.catalog import ProductRepository
from storefront.repositories.order import OrderRepository
from storefront.repositories.user import UserRepository
from storefront.services.interfaces.payment_gateway import IPaymentGateway

logger = logging.getLogger(__name__)


def to_minor_units(amount: float) -> int:
    """Major currency units to the gateway's minor units (rupees to paise)."""
    return int(round(amount * 100))


def make_receipt() -> str:
    return f"rcpt_{int(time.time() * 1000)}"


class CheckoutService:
    """
    Payment flow around the gateway.

    Attributes:
        session: Request database session
        gateway: Payment gateway, None when credentials are not configured
    """

    def __init__(self, session: AsyncSession, gateway: Optional[IPaymentGateway]):
        self.session = session
        self.gateway = gateway

    def _require_gateway(self) -> IPaymentGateway:
        if self.gateway is None:
            raise ServiceNotConfigured("Payment gateway not configured")
        return self.gateway

    async def create_payment_order(
        self,
        amount: float,
        currency: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a gateway order for ``amount`` major units.

        Raises:
            ValidationFailed: amount is not positive, not finite or above max_order_amount
            ServiceNotConfigured: No gateway credentials
            UpstreamServiceError: The gateway call failed
        """
        gateway = self._require_gateway()
        if amount is None or amount <= 0:
            raise ValidationFailed("Amount must be greater than 0")
        if not math.isfinite(amount) or amount > settings.max_order_amount:
            raise ValidationFailed(f"Amount must not exceed {settings.max_order_amount:,.0f}")

        return await gateway.create_order(
            amount_minor=to_minor_units(amount),
            currency=currency or settings.payment_currency,
            receipt=make_receipt(),
        )

    async def verify_payment(
        self,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
        user_id: Optional[str],
        items: List[Dict[str, Any]],
        total_amount: float,
        shipping_address: Optional[Dict[str, Any]],
    ) -> str:
        """
        Verify a checkout callback and record the order.

        Args:
            razorpay_order_id: Gateway order id
            razorpay_payment_id: Gateway payment id
            razorpay_signature: Callback signature
            user_id: Paying customer (optional)
            items: Lines as {"id": product id, "quantity": n, "price": unit price}
            total_amount: Amount paid in major units
            shipping_address: Address as submitted by the checkout form

        Returns:
            The order id (the existing one when this payment was already
            recorded, including by a concurrent request)

        Raises:
            ValidationFailed: Signature mismatch
            ServiceNotConfigured: No gateway credentials
        """
        gateway = self._require_gateway()
        if not gateway.verify_signature(razorpay_order_id, razorpay_payment_id, razorpay_signature):
            logger.warning(
                "Payment signature mismatch",
                extra={"razorpay_order_id": razorpay_order_id, "razorpay_payment_id": razorpay_payment_id}
            )
            raise ValidationFailed("Payment verification failed")

        orders = OrderRepository(self.session)

        existing = await orders.get_by_payment_id(razorpay_payment_id)
        if existing is not None:
            logger.info(
                "Payment already recorded",
                extra={"order_id": existing.id, "razorpay_payment_id": razorpay_payment_id}
            )
            return existing.id

        if user_id and await UserRepository(self.session).get_by_id(user_id) is None:
            logger.warning("Order placed for unknown user, storing without owner", extra={"user_id": user_id})
            user_id = None

        try:
            order = await orders.create_order(
                user_id=user_id,
                total_amount=total_amount,
                shipping_address=shipping_address,
                razorpay_order_id=razorpay_order_id,
                razorpay_payment_id=razorpay_payment_id,
                status="confirmed",
            )
        except IntegrityError:
            # A concurrent callback recorded this payment first. Nothing has
            # been written yet in this transaction, so rolling back is safe.
            await self.session.rollback()
            existing = await orders.get_by_payment_id(razorpay_payment_id)
            if existing is None:
                raise
            logger.info(
                "Payment recorded by a concurrent request",
                extra={"order_id": existing.id, "razorpay_payment_id": razorpay_payment_id}
            )
            return existing.id

        products = ProductRepository(self.session)
        known = await products.get_many([item["id"] for item in items])

        for item in items:
            product = known.get(item["id"])
            quantity = item["quantity"]

            if product is None:
                logger.warning(
                    "Order line references unknown product",
                    extra={"order_id": order.id, "product_id": item["id"]}
                )
            elif product.stock_qty < quantity:
                logger.warning(
                    "Stock shortfall on paid order",
                    extra={
                        "order_id": order.id,
                        "product_id": product.id,
                        "requested": quantity,
                        "available": product.stock_qty,
                    }
                )

            await orders.add_item(
                order_id=order.id,
                product_id=product.id if product is not None else None,
                quantity=quantity,
                price_at_purchase=item["price"],
            )
            if product is not None:
                await products.decrement_stock(product.id, quantity)

        await orders.add_payment(
            order_id=order.id,
            amount=total_amount,
            status="success",
            razorpay_order_id=razorpay_order_id,
            razorpay_payment_id=razorpay_payment_id,
            razorpay_signature=razorpay_signature,
        )

        logger.info(
            "Order recorded",
            extra={"order_id": order.id, "items": len(items), "total_amount": total_amount}
        )
        return order.id
