"""
SQLAlchemy ORM models for the store.

This module exports all database models and the declarative base.
Import models from this module to ensure they're registered with SQLAlchemy.
"""

from storefront.models.base import Base, TimestampMixin, UUIDMixin, ModelMixin
from storefront.models.user import User, AdminUser
from storefront.models.otp import OTPCode
from storefront.models.catalog import Category, Product, ProductImage, ProductVideo
from storefront.models.order import Order, OrderItem, Payment, ORDER_STATUSES
from storefront.models.contact import ContactMessage

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "ModelMixin",
    # Models
    "User",
    "AdminUser",
    "OTPCode",
    "Category",
    "Product",
    "ProductImage",
    "ProductVideo",
    "Order",
    "OrderItem",
    "Payment",
    "ORDER_STATUSES",
    "ContactMessage",
]
