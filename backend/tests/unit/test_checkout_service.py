"""
Unit tests for CheckoutService used directly against a session.
"""

import logging

import pytest
from sqlalchemy import select

from storefront.core.exceptions import ServiceNotConfigured, ValidationFailed
from storefront.models import Order, OrderItem, Product
from storefront.repositories.order import OrderRepository
from storefront.services.checkout import CheckoutService, make_receipt, to_minor_units
from storefront.services.razorpay_client import compute_signature


class TestHelpers:

    def test_minor_units_round_half_paise(self):
        assert to_minor_units(499.99) == 49999
        assert to_minor_units(0.1 + 0.2) == 30
        assert to_minor_units(1) == 100

    def test_receipt_prefix(self):
        assert make_receipt().startswith("rcpt_")


class TestCreatePaymentOrder:

    @pytest.mark.asyncio
    async def test_missing_gateway(self, db_session):
        service = CheckoutService(db_session, gateway=None)

        with pytest.raises(ServiceNotConfigured):
            await service.create_payment_order(100)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -5, None])
    async def test_rejects_non_positive_amount(self, db_session, providers, amount):
        service = CheckoutService(db_session, providers.gateway)

        with pytest.raises(ValidationFailed, match="Amount must be greater than 0"):
            await service.create_payment_order(amount)

        assert providers.gateway.created == []

    @pytest.mark.asyncio
    async def test_default_currency_from_settings(self, db_session, providers):
        service = CheckoutService(db_session, providers.gateway)

        order = await service.create_payment_order(12.5)

        assert order["amount"] == 1250
        assert order["currency"] == "INR"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [float("inf"), float("nan"), 1e308])
    async def test_rejects_unbounded_amount(self, db_session, providers, amount):
        service = CheckoutService(db_session, providers.gateway)

        with pytest.raises(ValidationFailed, match="Amount must not exceed"):
            await service.create_payment_order(amount)

        assert providers.gateway.created == []


class TestVerifyPayment:

    @staticmethod
    def _signed(order_id="order_u1", payment_id="pay_u1"):
        return {
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": compute_signature(order_id, payment_id, "test_razorpay_key_secret"),
        }

    @pytest.mark.asyncio
    async def test_records_order_within_callers_transaction(self, db_session, providers, make_product):
        """
        Test that the service only flushes.

        Arrange: One product in stock
        Act: Verify a payment, then roll the session back
        Assert: Order visible before rollback, gone after
        """
        # Arrange
        product = await make_product("crawler", price=800, stock_qty=3)
        service = CheckoutService(db_session, providers.gateway)

        # Act
        order_id = await service.verify_payment(
            **self._signed(),
            user_id=None,
            items=[{"id": product.id, "quantity": 1, "price": 800}],
            total_amount=800,
            shipping_address=None,
        )
        before = (await db_session.execute(select(Order.id))).scalars().all()
        await db_session.rollback()
        after = (await db_session.execute(select(Order.id))).scalars().all()

        # Assert
        assert before == [order_id]
        assert after == []

    @pytest.mark.asyncio
    async def test_shortfall_logged_and_stock_floored(self, db_session, providers, make_product, caplog):
        # Arrange
        product = await make_product("quad", price=5000, stock_qty=1)
        service = CheckoutService(db_session, providers.gateway)

        # Act
        with caplog.at_level(logging.WARNING, logger="storefront.services.checkout"):
            await service.verify_payment(
                **self._signed(),
                user_id=None,
                items=[{"id": product.id, "quantity": 3, "price": 5000}],
                total_amount=15000,
                shipping_address={"city": "Delhi"},
            )

        # Assert
        assert "Stock shortfall on paid order" in caplog.text
        stock = (await db_session.execute(select(Product.stock_qty).where(Product.id == product.id))).scalar_one()
        assert stock == 0
        line = (await db_session.execute(select(OrderItem))).scalar_one()
        assert line.quantity == 3

    @pytest.mark.asyncio
    async def test_signature_mismatch(self, db_session, providers):
        service = CheckoutService(db_session, providers.gateway)
        payload = self._signed()
        payload["razorpay_signature"] = "0" * 64

        with pytest.raises(ValidationFailed, match="Payment verification failed"):
            await service.verify_payment(
                **payload, user_id=None, items=[], total_amount=1, shipping_address=None
            )

        assert (await db_session.execute(select(Order))).first() is None

    @pytest.mark.asyncio
    async def test_missing_gateway(self, db_session):
        service = CheckoutService(db_session, gateway=None)

        with pytest.raises(ServiceNotConfigured):
            await service.verify_payment(
                **self._signed(), user_id=None, items=[], total_amount=1, shipping_address=None
            )

    @pytest.mark.asyncio
    async def test_concurrent_recording_returns_existing_order(self, db_session, providers, make_order, monkeypatch):
        """
        Test the payment being recorded between the replay check and the insert.

        Arrange: Order already stored for pay_u1; first lookup reports nothing
        Act: Verify the same payment
        Assert: Existing order id returned and no second order written
        """
        # Arrange
        recorded_id = (await make_order(total_amount=800, payment_id="pay_u1")).id
        real_lookup = OrderRepository.get_by_payment_id
        lookups = []

        async def lookup_missing_first(self, razorpay_payment_id):
            lookups.append(razorpay_payment_id)
            if len(lookups) == 1:
                return None
            return await real_lookup(self, razorpay_payment_id)

        monkeypatch.setattr(OrderRepository, "get_by_payment_id", lookup_missing_first)
        service = CheckoutService(db_session, providers.gateway)

        # Act
        order_id = await service.verify_payment(
            **self._signed(),
            user_id=None,
            items=[],
            total_amount=800,
            shipping_address=None,
        )

        # Assert
        assert order_id == recorded_id
        assert len(lookups) == 2
        assert (await db_session.execute(select(Order.id))).scalars().all() == [recorded_id]
