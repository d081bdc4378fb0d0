"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- Database fixtures (in-memory SQLite, tables created per test)
- An HTTP client bound to the application
- Fake payment, email and storage providers wired in through
  ``app.dependency_overrides``
- Row factories for customers, admins, categories, products and orders
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest


# Set test environment variables BEFORE any imports
# This must happen first to ensure settings load with test values
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test_secret_key_at_least_32_characters_long_for_jwt"
os.environ["DISABLE_RATE_LIMIT"] = "true"  # Disable rate limiting for tests
os.environ["LOG_JSON"] = "false"
os.environ["RAZORPAY_KEY_ID"] = ""
os.environ["RAZORPAY_KEY_SECRET"] = ""
os.environ["RESEND_API_KEY"] = ""
os.environ["SMTP_HOST"] = ""
os.environ["SUPABASE_URL"] = ""
os.environ["SUPABASE_SERVICE_KEY"] = ""

# Add backend directory to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from httpx import ASGITransport, AsyncClient  # noqa: E402

from storefront.core.exceptions import EmailDeliveryError, UpstreamServiceError  # noqa: E402
from storefront.services.interfaces import IEmailSender, IImageStorage, IPaymentGateway  # noqa: E402
from storefront.services.razorpay_client import compute_signature  # noqa: E402


TEST_KEY_SECRET = "test_razorpay_key_secret"


class FakeMailer(IEmailSender):
    """Records every OTP instead of sending it."""

    def __init__(self):
        self.sent: List[Dict[str, str]] = []
        self.fail = False

    async def send_otp(self, to: str, code: str) -> None:
        if self.fail:
            raise EmailDeliveryError("Email delivery failed: provider down")
        self.sent.append({"to": to, "code": code})

    @property
    def last_code(self) -> Optional[str]:
        return self.sent[-1]["code"] if self.sent else None


class FakeGateway(IPaymentGateway):
    """Gateway double that signs with TEST_KEY_SECRET like the real one."""

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.fail = False

    async def create_order(self, amount_minor: int, currency: str, receipt: str) -> Dict[str, Any]:
        if self.fail:
            raise UpstreamServiceError("Payment gateway error: bad request")
        order = {
            "id": f"order_test{len(self.created) + 1}",
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
            "status": "created",
        }
        self.created.append(order)
        return order

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        return compute_signature(order_id, payment_id, TEST_KEY_SECRET) == signature


class FakeStorage(IImageStorage):
    def __init__(self):
        self.uploads: List[Dict[str, Any]] = []

    async def upload(self, path: str, content: bytes, content_type: str) -> str:
        self.uploads.append({"path": path, "size": len(content), "content_type": content_type})
        return f"https://cdn.test/storage/v1/object/public/product-images/{path}"


class Providers:
    """Handles on the fakes a test can inspect or break."""

    def __init__(self):
        self.customer_mailer = FakeMailer()
        self.admin_mailer = FakeMailer()
        self.gateway: Optional[FakeGateway] = FakeGateway()
        self.storage: Optional[FakeStorage] = FakeStorage()


def sign(order_id: str, payment_id: str) -> str:
    """Signature the fake gateway accepts."""
    return compute_signature(order_id, payment_id, TEST_KEY_SECRET)


@pytest.fixture(scope="function")
async def db_session():
    """
    Provide a database session for tests.

    Creates tables before test and cleans up after.
    """
    from storefront.core.database import async_session_maker, create_schema, drop_schema

    await create_schema()

    async with async_session_maker() as session:
        yield session

    await drop_schema()


@pytest.fixture
def providers():
    """
    Swap external providers for fakes.

    Set ``providers.gateway`` or ``providers.storage`` to None to simulate
    missing credentials.
    """
    from storefront.main import app
    from storefront.api import dependencies

    fakes = Providers()
    app.dependency_overrides[dependencies.get_customer_mailer] = lambda: fakes.customer_mailer
    app.dependency_overrides[dependencies.get_admin_mailer] = lambda: fakes.admin_mailer
    app.dependency_overrides[dependencies.get_payment_gateway] = lambda: fakes.gateway
    app.dependency_overrides[dependencies.get_image_storage] = lambda: fakes.storage

    yield fakes

    app.dependency_overrides.clear()


@pytest.fixture
async def client(db_session, providers):
    """HTTP client talking to the application in-process."""
    from storefront.main import app

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Row factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_customer(db_session):
    from storefront.models import User

    async def _make(email: Optional[str] = "driver@example.com", phone: Optional[str] = None,
                    full_name: Optional[str] = "Test Driver"):
        user = User(email=email, phone=phone, full_name=full_name)
        db_session.add(user)
        await db_session.commit()
        return user

    return _make


@pytest.fixture
def make_admin(db_session):
    from storefront.models import AdminUser

    async def _make(email: str = "owner@bigdawgs.test", is_active: bool = True):
        admin = AdminUser(email=email, is_active=is_active)
        db_session.add(admin)
        await db_session.commit()
        return admin

    return _make


@pytest.fixture
async def admin_headers(make_admin):
    """Authorization header carrying a valid admin token."""
    from storefront.core.security import create_admin_token

    admin = await make_admin()
    return {"Authorization": f"Bearer {create_admin_token(admin.id, admin.email)}"}


@pytest.fixture
def make_otp(db_session):
    from storefront.models import OTPCode

    async def _make(user_id: str, code: str = "123456", expires_in: timedelta = timedelta(minutes=10),
                    used: bool = False):
        otp = OTPCode(
            user_id=user_id,
            code=code,
            expires_at=datetime.now(timezone.utc) + expires_in,
            used=used,
        )
        db_session.add(otp)
        await db_session.commit()
        return otp

    return _make


@pytest.fixture
def make_category(db_session):
    from storefront.models import Category

    async def _make(slug: str = "rc-cars", name: str = "RC Cars", **extra):
        category = Category(slug=slug, name=name, **extra)
        db_session.add(category)
        await db_session.commit()
        return category

    return _make


@pytest.fixture
def make_product(db_session):
    """
    Product factory.

    ``age_minutes`` backdates created_at so "newest first" orderings are
    deterministic.
    """
    from storefront.models import Product, ProductImage, ProductVideo

    async def _make(slug: str, price: float = 1000.0, stock_qty: int = 10, category=None,
                    age_minutes: int = 0, images: int = 1, videos: int = 0, **extra):
        created = datetime.now(timezone.utc) - timedelta(minutes=age_minutes)
        product = Product(
            slug=slug,
            name=extra.pop("name", slug.replace("-", " ").title()),
            price=price,
            stock_qty=stock_qty,
            category_id=category.id if category is not None else None,
            created_at=created,
            updated_at=created,
            **extra,
        )
        db_session.add(product)
        await db_session.flush()
        for i in range(images):
            db_session.add(ProductImage(
                product_id=product.id,
                url=f"https://cdn.test/{slug}-{i}.jpg",
                alt_text=f"{slug} {i}",
                sort_order=images - i,
            ))
        for i in range(videos):
            db_session.add(ProductVideo(product_id=product.id, url=f"https://video.test/{slug}-{i}", type="youtube"))
        await db_session.commit()
        return product

    return _make


@pytest.fixture
def make_order(db_session):
    from storefront.models import Order

    async def _make(total_amount: float = 1000.0, status: str = "confirmed", user=None,
                    payment_id: Optional[str] = None, age_minutes: int = 0):
        created = datetime.now(timezone.utc) - timedelta(minutes=age_minutes)
        order = Order(
            user_id=user.id if user is not None else None,
            status=status,
            total_amount=total_amount,
            shipping_address={"city": "Pune"},
            razorpay_order_id="order_seed",
            razorpay_payment_id=payment_id,
            created_at=created,
            updated_at=created,
        )
        db_session.add(order)
        await db_session.commit()
        return order

    return _make


@pytest.fixture
def signed_payment():
    """Build a verify-payment body the fake gateway accepts."""

    def _build(order_data, order_id="order_test1", payment_id="pay_test1", signature=None):
        return {
            "razorpay_order_id": order_id,
            "razorpay_payment_id": payment_id,
            "razorpay_signature": signature if signature is not None else sign(order_id, payment_id),
            "orderData": order_data,
        }

    return _build
