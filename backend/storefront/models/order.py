"""
Order, order line and payment models.

Orders are only written after the payment gateway signature has been
verified, so every order starts out ``confirmed``.
"""

from sqlalchemy import JSON, CheckConstraint, Column, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from storefront.models.base import Base, CreatedAtMixin, ModelMixin, TimestampMixin, UUIDMixin

ORDER_STATUSES = ("pending", "confirmed", "shipped", "delivered", "cancelled")


class Order(Base, UUIDMixin, TimestampMixin, ModelMixin):
    """
    Customer order.

    Attributes:
        user_id: Customer who paid (nullable for guest checkout)
        status: One of ORDER_STATUSES
        total_amount: Amount charged in major currency units
        shipping_address: JSON object as submitted at checkout
        razorpay_order_id: Gateway order reference
        razorpay_payment_id: Gateway payment reference (unique)
    """

    __tablename__ = "orders"

    user_id = Column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status = Column(String(20), nullable=False, default="pending")
    total_amount = Column(Float, nullable=False, default=0.0)
    shipping_address = Column(JSON, nullable=True)
    razorpay_order_id = Column(String(64), nullable=True, index=True)
    razorpay_payment_id = Column(String(64), nullable=True, unique=True)

    user = relationship("User")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    payments = relationship(
        "Payment",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_orders_status", "status"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'shipped', 'delivered', 'cancelled')",
            name="ck_orders_status"
        ),
    )


class OrderItem(Base, UUIDMixin, ModelMixin):
    """
    One order line.

    ``price_at_purchase`` freezes the unit price; ``product_id`` is nulled
    if the product is later deleted.
    """

    __tablename__ = "order_items"

    order_id = Column(
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(
        String(36),
        ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
    )
    quantity = Column(Integer, nullable=False)
    price_at_purchase = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )


class Payment(Base, UUIDMixin, CreatedAtMixin, ModelMixin):
    """Gateway payment recorded against an order."""

    __tablename__ = "payments"

    order_id = Column(
        String(36),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = Column(Float, nullable=False)
    status = Column(String(20), nullable=False)
    razorpay_order_id = Column(String(64), nullable=True)
    razorpay_payment_id = Column(String(64), nullable=True)
    razorpay_signature = Column(String(128), nullable=True)

    order = relationship("Order", back_populates="payments")
