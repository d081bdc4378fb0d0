"""
Catalog models: categories, products and their media.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from storefront.models.base import Base, ModelMixin, TimestampMixin, UUIDMixin


class Category(Base, UUIDMixin, TimestampMixin, ModelMixin):
    """
    Product category addressed by slug in catalog URLs.

    Attributes:
        slug: URL segment, unique (e.g. "rc-cars")
        name: Display name
        description: Optional blurb for category pages
        sort_order: Position in navigation menus
    """

    __tablename__ = "categories"

    slug = Column(String(120), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    products = relationship("Product", back_populates="category", passive_deletes=True)


class Product(Base, UUIDMixin, TimestampMixin, ModelMixin):
    """
    Sellable product.

    Attributes:
        slug: URL segment, unique across the catalog
        name: Display name
        description: Long description
        brand: Manufacturer
        price: Selling price in major currency units
        compare_price: Struck-through "was" price (optional)
        stock_qty: Units on hand (never negative)
        category_id: Foreign key to Category (nullable)
        specs: JSON object of technical specifications
        tags: JSON array of search tags
        is_active: Hidden from the storefront when false
        is_featured: Listed on the featured shelf
        is_solar: Solar-powered product flag
    """

    __tablename__ = "products"

    slug = Column(String(200), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    brand = Column(String(120), nullable=True)
    price = Column(Float, nullable=False)
    compare_price = Column(Float, nullable=True)
    stock_qty = Column(Integer, nullable=False, default=0)
    category_id = Column(
        String(36),
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        doc="Foreign key to Category"
    )
    specs = Column(JSON, nullable=False, default=dict)
    tags = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_solar = Column(Boolean, nullable=False, default=False)

    category = relationship("Category", back_populates="products")
    images = relationship(
        "ProductImage",
        back_populates="product",
        order_by="ProductImage.sort_order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    videos = relationship(
        "ProductVideo",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_products_active_created", "is_active", "created_at"),
        Index("idx_products_category", "category_id"),
        CheckConstraint("stock_qty >= 0", name="ck_products_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )


class ProductImage(Base, UUIDMixin, ModelMixin):
    """Image attached to a product, shown in ``sort_order``."""

    __tablename__ = "product_images"

    product_id = Column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = Column(String(1024), nullable=False)
    alt_text = Column(String(255), nullable=True)
    sort_order = Column(Integer, nullable=False, default=0)

    product = relationship("Product", back_populates="images")


class ProductVideo(Base, UUIDMixin, ModelMixin):
    """Video attached to a product (``type`` e.g. "youtube", "mp4")."""

    __tablename__ = "product_videos"

    product_id = Column(
        String(36),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = Column(String(1024), nullable=False)
    type = Column(String(50), nullable=True)

    product = relationship("Product", back_populates="videos")
