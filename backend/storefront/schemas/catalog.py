"""
Catalog response schemas.

Built from ORM rows with ``from_attributes``; relationship attributes
(``images``, ``videos``) are read under their ORM names and emitted under
the storefront keys ``product_images`` / ``product_videos``.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CategoryRef(BaseModel):
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class CategoryOut(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProductImageOut(BaseModel):
    url: str
    alt_text: Optional[str] = None
    sort_order: int = 0

    model_config = ConfigDict(from_attributes=True)


class ProductVideoOut(BaseModel):
    url: str
    type: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProductSummary(BaseModel):
    """
    Product card as shown in listings.

    Attributes:
        price: Selling price in major currency units
        compare_price: Struck-through "was" price
        category: Category name and slug (None if uncategorised)
        product_images: Images ordered by sort_order
    """
    id: str
    slug: str
    name: str
    brand: Optional[str] = None
    price: float
    compare_price: Optional[float] = None
    stock_qty: int
    is_featured: bool
    is_solar: bool
    category: Optional[CategoryRef] = None
    product_images: List[ProductImageOut] = Field(default_factory=list, validation_alias="images")

    model_config = ConfigDict(from_attributes=True)


class ProductDetail(ProductSummary):
    description: Optional[str] = None
    category_id: Optional[str] = None
    specs: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    is_active: bool
    product_videos: List[ProductVideoOut] = Field(default_factory=list, validation_alias="videos")
    created_at: datetime
    updated_at: datetime


class ListMeta(BaseModel):
    page: int
    limit: int
    total: int


class ProductListResponse(BaseModel):
    success: bool = True
    data: List[ProductSummary]
    meta: ListMeta


class FeaturedResponse(BaseModel):
    success: bool = True
    data: List[ProductSummary]


class CategoryProductsResponse(BaseModel):
    success: bool = True
    data: List[ProductSummary]
    category: CategoryOut


class ProductDetailResponse(BaseModel):
    success: bool = True
    data: ProductDetail
