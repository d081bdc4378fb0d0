"""Contact message repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from storefront.models.contact import ContactMessage


class ContactRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, name: str, email: str, phone: str, message: str) -> ContactMessage:
        row = ContactMessage(name=name, email=email, phone=phone, message=message)
        self.session.add(row)
        await self.session.flush()
        return row
