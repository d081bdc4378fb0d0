"""
Declarative base and the column mixins shared by the store tables.

Every table keys on a string UUID and stores timestamps as timezone-aware
UTC values, so the same models run on SQLite and PostgreSQL.
"""

from datetime import datetime, timezone
import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import declarative_base


Base = declarative_base()

# Columns worth showing when a row is printed in logs or a debugger
REPR_COLUMNS = ("id", "slug", "email", "status")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class UUIDMixin:
    """String UUID primary key, generated client side."""

    id = Column(String(36), primary_key=True, default=new_id)


class CreatedAtMixin:
    """Insert timestamp for rows that are written once (payments, codes, messages)."""

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


class TimestampMixin(CreatedAtMixin):
    """
    Insert and last-modified timestamps.

    Attributes:
        created_at: Set on insert
        updated_at: Refreshed by SQLAlchemy on every ORM update
    """

    updated_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)


class ModelMixin:
    """Short repr built from identifying columns."""

    def __repr__(self) -> str:
        shown = ", ".join(
            f"{name}={getattr(self, name)!r}"
            for name in REPR_COLUMNS
            if name in self.__table__.columns
        )
        return f"{self.__class__.__name__}({shown})"
