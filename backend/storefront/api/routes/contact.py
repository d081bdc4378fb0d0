"""Contact form endpoint."""

from fastapi import APIRouter

from storefront.api.dependencies import DatabaseSession
from storefront.core.exceptions import ValidationFailed
from storefront.repositories.contact import ContactRepository
from storefront.schemas.contact import ContactRequest, ContactResponse

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", response_model=ContactResponse)
async def submit_contact(body: ContactRequest, db: DatabaseSession) -> ContactResponse:
    """Store a contact message; every field must be a non-blank string."""
    fields = (body.name, body.email, body.phone, body.message)
    if not all(isinstance(value, str) and value.strip() for value in fields):
        raise ValidationFailed("All fields are required")

    await ContactRepository(db).create(
        name=body.name.strip(),
        email=body.email.strip(),
        phone=body.phone.strip(),
        message=body.message.strip(),
    )
    return ContactResponse()
