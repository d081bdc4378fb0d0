"""
Admin panel schemas: product CRUD, stock, orders and dashboard stats.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class AdminProduct(BaseModel):
    """Product row as the admin panel edits it (inactive rows included)."""
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    brand: Optional[str] = None
    price: float
    compare_price: Optional[float] = None
    stock_qty: int
    category_id: Optional[str] = None
    specs: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    is_active: bool
    is_featured: bool
    is_solar: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductCreate(BaseModel):
    """
    New product.

    Attributes:
        slug: Lower-case URL segment, unique (e.g. "traxxas-slash-4x4")
        price: Selling price in major units
        stock_qty: Initial units on hand
    """
    slug: str = Field(min_length=1, max_length=200, pattern=SLUG_PATTERN)
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    brand: Optional[str] = Field(default=None, max_length=120)
    price: float = Field(ge=0)
    compare_price: Optional[float] = Field(default=None, ge=0)
    stock_qty: int = Field(default=0, ge=0)
    category_id: Optional[str] = None
    specs: Dict[str, Any] = Field(default_factory=dict)
    tags: List[str] = Field(default_factory=list)
    is_active: bool = True
    is_featured: bool = False
    is_solar: bool = False

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "slug": "traxxas-slash-4x4",
                "name": "Traxxas Slash 4X4",
                "brand": "Traxxas",
                "price": 38999.0,
                "stock_qty": 4,
                "specs": {"scale": "1:10", "motor": "Brushless"},
                "tags": ["short-course", "4wd"],
            }
        }
    )


class ProductUpdate(BaseModel):
    """Partial update; only the fields present in the body are written."""
    slug: Optional[str] = Field(default=None, min_length=1, max_length=200, pattern=SLUG_PATTERN)
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    brand: Optional[str] = Field(default=None, max_length=120)
    price: Optional[float] = Field(default=None, ge=0)
    compare_price: Optional[float] = Field(default=None, ge=0)
    stock_qty: Optional[int] = Field(default=None, ge=0)
    category_id: Optional[str] = None
    specs: Optional[Dict[str, Any]] = None
    tags: Optional[List[str]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_solar: Optional[bool] = None


# Columns that may not be cleared to NULL through a partial update
NON_NULLABLE_PRODUCT_FIELDS = frozenset({
    "slug", "name", "price", "stock_qty", "specs", "tags", "is_active", "is_featured", "is_solar",
})


class StockUpdate(BaseModel):
    stock: int = Field(ge=0, description="New units on hand")


class ProductResponse(BaseModel):
    product: AdminProduct


class ProductsResponse(BaseModel):
    products: List[AdminProduct]


class SuccessResponse(BaseModel):
    success: bool = True


class UploadImageResponse(BaseModel):
    url: str


class AdminStats(BaseModel):
    total_orders: int
    total_revenue: float = Field(description="Sum of non-cancelled order totals")
    total_products: int
    pending_orders: int


class StatsResponse(BaseModel):
    stats: AdminStats


class AdminOrder(BaseModel):
    id: str
    user_id: Optional[str] = None
    user_email: Optional[str] = None
    status: str
    total_amount: float
    shipping_address: Optional[Dict[str, Any]] = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrdersResponse(BaseModel):
    orders: List[AdminOrder]


class OrderStatusUpdate(BaseModel):
    status: Optional[str] = None


class OrderResponse(BaseModel):
    order: AdminOrder
