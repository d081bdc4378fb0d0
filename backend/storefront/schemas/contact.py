"""Contact form schemas."""

from typing import Any, Optional

from pydantic import BaseModel


class ContactRequest(BaseModel):
    # Presence is checked by the route so a missing field answers 400
    name: Optional[Any] = None
    email: Optional[Any] = None
    phone: Optional[Any] = None
    message: Optional[Any] = None


class ContactResponse(BaseModel):
    success: bool = True
