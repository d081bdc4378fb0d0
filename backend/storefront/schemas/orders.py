"""
Checkout request/response schemas.

The checkout client posts camelCase keys (``orderData``, ``totalAmount``,
``shippingAddress``); aliases map them onto snake_case attributes.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CreatePaymentOrderRequest(BaseModel):
    amount: Optional[float] = Field(default=None, description="Amount in major units (rupees)")
    currency: Optional[str] = Field(default=None, description="ISO currency, defaults to INR")


class CreatePaymentOrderResponse(BaseModel):
    success: bool = True
    order: Dict[str, Any] = Field(description="Gateway order object")


class OrderLine(BaseModel):
    """
    One cart line.

    Attributes:
        id: Product id
        quantity: Units bought
        price: Unit price paid in major units
    """
    id: str
    quantity: int = Field(gt=0)
    price: float = Field(ge=0)


class OrderData(BaseModel):
    user_id: Optional[str] = Field(default=None, alias="userId")
    items: List[OrderLine] = Field(min_length=1)
    total_amount: float = Field(alias="totalAmount", ge=0)
    shipping_address: Optional[Dict[str, Any]] = Field(default=None, alias="shippingAddress")

    model_config = ConfigDict(populate_by_name=True)


class VerifyPaymentRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
    order_data: OrderData = Field(alias="orderData")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "razorpay_order_id": "order_Abc123",
                "razorpay_payment_id": "pay_Xyz789",
                "razorpay_signature": "5f1c...e9",
                "orderData": {
                    "userId": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
                    "items": [{"id": "b1d2...", "quantity": 1, "price": 4999.0}],
                    "totalAmount": 4999.0,
                    "shippingAddress": {"line1": "12 MG Road", "city": "Pune", "pincode": "411001"},
                },
            }
        },
    )


class VerifyPaymentResponse(BaseModel):
    success: bool = True
    order_id: str = Field(alias="orderId")

    model_config = ConfigDict(populate_by_name=True)
