"""
Tests for JWT issuing and validation.
"""

from datetime import datetime, timedelta, timezone

from jose import jwt

from storefront.core.config import settings
from storefront.core.security import (
    ALGORITHM,
    create_access_token,
    create_admin_token,
    create_customer_token,
    decode_access_token,
)

class TestCustomerToken:

    def test_round_trip(self):
        token = create_customer_token("user-1")

        data = decode_access_token(token)

        assert data.user_id == "user-1"
        assert data.role == "customer"
        assert data.email is None

    def test_claims(self):
        """The storefront client reads ``userId`` from the payload."""
        payload = jwt.decode(create_customer_token("user-1"), settings.secret_key, algorithms=[ALGORITHM])

        assert payload["sub"] == "user-1"
        assert payload["userId"] == "user-1"
        assert payload["role"] == "customer"

    def test_lifetime_is_seven_days(self):
        payload = jwt.decode(create_customer_token("user-1"), settings.secret_key, algorithms=[ALGORITHM])

        remaining = payload["exp"] - datetime.now(timezone.utc).timestamp()
        assert 7 * 24 * 3600 - 60 < remaining <= 7 * 24 * 3600

class TestAdminToken:

    def test_round_trip(self):
        data = decode_access_token(create_admin_token("admin-1", "owner@bigdawgs.test"))

        assert data.user_id == "admin-1"
        assert data.role == "admin"
        assert data.email == "owner@bigdawgs.test"

class TestDecode:

    def test_expired(self):
        token = create_access_token({"sub": "user-1", "role": "customer"}, timedelta(seconds=-1))

        assert decode_access_token(token) is None

    def test_wrong_key(self):
        token = jwt.encode({"sub": "user-1", "role": "customer"}, "x" * 32, algorithm=ALGORITHM)

        assert decode_access_token(token) is None

    def test_missing_role(self):
        assert decode_access_token(create_access_token({"sub": "user-1"})) is None

    def test_unknown_role(self):
        assert decode_access_token(create_access_token({"sub": "user-1", "role": "root"})) is None

    def test_garbage(self):
        assert decode_access_token("not-a-token") is None
