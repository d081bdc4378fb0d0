"""
Order repository: checkout writes, admin listing and dashboard stats.
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import NotFound
from storefront.models.order import Order, OrderItem, Payment
from storefront.models.user import User


class OrderRepository:
    """
    Repository for orders, order lines and payments.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        result = await self.session.execute(select(Order).where(Order.id == order_id))
        return result.scalar_one_or_none()

    async def get_by_payment_id(self, razorpay_payment_id: str) -> Optional[Order]:
        result = await self.session.execute(
            select(Order).where(Order.razorpay_payment_id == razorpay_payment_id)
        )
        return result.scalar_one_or_none()

    async def create_order(
        self,
        user_id: Optional[str],
        total_amount: float,
        shipping_address: Optional[Dict[str, Any]],
        razorpay_order_id: str,
        razorpay_payment_id: str,
        status: str = "confirmed",
    ) -> Order:
        order = Order(
            user_id=user_id,
            status=status,
            total_amount=total_amount,
            shipping_address=shipping_address,
            razorpay_order_id=razorpay_order_id,
            razorpay_payment_id=razorpay_payment_id,
        )
        self.session.add(order)
        await self.session.flush()
        return order

    async def add_item(
        self,
        order_id: str,
        product_id: Optional[str],
        quantity: int,
        price_at_purchase: float
    ) -> OrderItem:
        item = OrderItem(
            order_id=order_id,
            product_id=product_id,
            quantity=quantity,
            price_at_purchase=price_at_purchase,
        )
        self.session.add(item)
        await self.session.flush()
        return item

    async def add_payment(
        self,
        order_id: str,
        amount: float,
        status: str,
        razorpay_order_id: str,
        razorpay_payment_id: str,
        razorpay_signature: str,
    ) -> Payment:
        payment = Payment(
            order_id=order_id,
            amount=amount,
            status=status,
            razorpay_order_id=razorpay_order_id,
            razorpay_payment_id=razorpay_payment_id,
            razorpay_signature=razorpay_signature,
        )
        self.session.add(payment)
        await self.session.flush()
        return payment

    async def list_with_user_email(self) -> List[Tuple[Order, Optional[str]]]:
        """All orders newest first, paired with the customer's email (or None)."""
        stmt = (
            select(Order, User.email)
            .outerjoin(User, Order.user_id == User.id)
            .order_by(Order.created_at.desc())
        )
        return [(order, email) for order, email in (await self.session.execute(stmt)).all()]

    async def update_status(self, order_id: str, status: str) -> Order:
        order = await self.get_by_id(order_id)
        if order is None:
            raise NotFound("Order not found")
        order.status = status
        await self.session.flush()
        await self.session.refresh(order)
        return order

    async def get_stats(self) -> Dict[str, float]:
        """
        Dashboard counters over all orders.

        Returns:
            Dict with total_orders, total_revenue (non-cancelled orders only)
            and pending_orders
        """
        stmt = select(
            func.count(Order.id),
            func.coalesce(
                func.sum(case((Order.status != "cancelled", Order.total_amount), else_=0.0)),
                0.0,
            ),
            func.coalesce(func.sum(case((Order.status == "pending", 1), else_=0)), 0),
        )
        total_orders, total_revenue, pending_orders = (await self.session.execute(stmt)).one()
        return {
            "total_orders": int(total_orders),
            "total_revenue": float(total_revenue),
            "pending_orders": int(pending_orders),
        }
