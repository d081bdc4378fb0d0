"""
Tests for POST /api/contact.
"""

import pytest
from sqlalchemy import select

from storefront.models import ContactMessage


class TestContact:

    @pytest.mark.asyncio
    async def test_message_stored_trimmed(self, client, db_session):
        """
        Test a valid submission.

        Arrange: Padded field values
        Act: POST /api/contact
        Assert: 200 and one trimmed row
        """
        # Act
        response = await client.post(
            "/api/contact",
            json={
                "name": " Asha ",
                "email": "asha@example.com",
                "phone": " +91 98000 00001",
                "message": "Do you ship drones to Goa?  ",
            },
        )

        # Assert
        assert response.status_code == 200
        assert response.json() == {"success": True}
        row = (await db_session.execute(select(ContactMessage))).scalar_one()
        assert row.name == "Asha"
        assert row.phone == "+91 98000 00001"
        assert row.message == "Do you ship drones to Goa?"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"name": "Asha", "email": "a@b.co", "phone": "1"},
            {"name": "   ", "email": "a@b.co", "phone": "1", "message": "hi"},
            {"name": "Asha", "email": "a@b.co", "phone": 12345, "message": "hi"},
        ],
    )
    async def test_missing_or_blank_fields(self, client, db_session, payload):
        response = await client.post("/api/contact", json=payload)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": {"message": "All fields are required"}}
        assert (await db_session.execute(select(ContactMessage))).first() is None
