"""
Checkout endpoints backed by the Razorpay gateway.
"""

from fastapi import APIRouter

from storefront.api.dependencies import DatabaseSession, PaymentGateway
from storefront.schemas.orders import (
    CreatePaymentOrderRequest,
    CreatePaymentOrderResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from storefront.services.checkout import CheckoutService

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/create-razorpay-order", response_model=CreatePaymentOrderResponse)
async def create_razorpay_order(
    body: CreatePaymentOrderRequest,
    db: DatabaseSession,
    gateway: PaymentGateway,
) -> CreatePaymentOrderResponse:
    """
    Create a gateway order for the browser checkout.

    ``amount`` is in major units; the gateway is asked for
    ``round(amount * 100)`` minor units.
    """
    order = await CheckoutService(db, gateway).create_payment_order(body.amount, body.currency)
    return CreatePaymentOrderResponse(order=order)


@router.post("/verify-payment", response_model=VerifyPaymentResponse)
async def verify_payment(
    body: VerifyPaymentRequest,
    db: DatabaseSession,
    gateway: PaymentGateway,
) -> VerifyPaymentResponse:
    """
    Verify the checkout callback signature and record the order.

    Replaying the same payment id returns the order recorded the first time.
    """
    data = body.order_data
    order_id = await CheckoutService(db, gateway).verify_payment(
        razorpay_order_id=body.razorpay_order_id,
        razorpay_payment_id=body.razorpay_payment_id,
        razorpay_signature=body.razorpay_signature,
        user_id=data.user_id,
        items=[line.model_dump() for line in data.items],
        total_amount=data.total_amount,
        shipping_address=data.shipping_address,
    )
    return VerifyPaymentResponse(order_id=order_id)
