"""Contact form submissions."""

from sqlalchemy import Column, String, Text

from storefront.models.base import Base, CreatedAtMixin, ModelMixin, UUIDMixin


class ContactMessage(Base, UUIDMixin, CreatedAtMixin, ModelMixin):
    __tablename__ = "contact_messages"

    name = Column(String(255), nullable=False)
    email = Column(String(320), nullable=False)
    phone = Column(String(32), nullable=False)
    message = Column(Text, nullable=False)
