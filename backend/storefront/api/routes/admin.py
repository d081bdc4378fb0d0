"""
Admin panel endpoints.

Every route requires an admin bearer token (see ``get_current_admin``).
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from storefront.api.dependencies import (
    CurrentAdmin,
    DatabaseSession,
    ImageStorage,
    get_current_admin,
)
from storefront.core.config import settings
from storefront.core.exceptions import (
    NotFound,
    PayloadTooLarge,
    ServiceNotConfigured,
    ValidationFailed,
)
from storefront.models.order import ORDER_STATUSES
from storefront.repositories.catalog import ProductRepository
from storefront.repositories.order import OrderRepository
from storefront.schemas.admin import (
    NON_NULLABLE_PRODUCT_FIELDS,
    AdminOrder,
    AdminProduct,
    AdminStats,
    OrderResponse,
    OrdersResponse,
    OrderStatusUpdate,
    ProductCreate,
    ProductResponse,
    ProductsResponse,
    ProductUpdate,
    StatsResponse,
    StockUpdate,
    SuccessResponse,
    UploadImageResponse,
)
from storefront.services.storage import build_image_path

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(get_current_admin)],
)


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: DatabaseSession) -> StatsResponse:
    """
    Dashboard counters.

    ``total_revenue`` sums the totals of every order that is not cancelled.
    """
    order_stats = await OrderRepository(db).get_stats()
    total_products = await ProductRepository(db).count()
    return StatsResponse(stats=AdminStats(total_products=total_products, **order_stats))


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

@router.get("/products", response_model=ProductsResponse)
async def list_products(db: DatabaseSession) -> ProductsResponse:
    """All products newest first, inactive ones included."""
    products = await ProductRepository(db).list_all()
    return ProductsResponse(products=[AdminProduct.model_validate(p) for p in products])


@router.post("/products", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    db: DatabaseSession,
    admin: CurrentAdmin,
) -> ProductResponse:
    product = await ProductRepository(db).create(body.model_dump())
    logger.info("Product created", extra={"product_id": product.id, "admin_id": admin.user_id})
    return ProductResponse(product=AdminProduct.model_validate(product))


@router.put("/products/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    db: DatabaseSession,
    admin: CurrentAdmin,
) -> ProductResponse:
    """
    Partial update: only keys present in the body are written.

    Raises:
        400: A required column was sent as null
        404: Unknown product
        409: The new slug belongs to another product
    """
    changes = body.model_dump(exclude_unset=True)
    for field in NON_NULLABLE_PRODUCT_FIELDS & changes.keys():
        if changes[field] is None:
            raise ValidationFailed(f"{field} cannot be null")

    product = await ProductRepository(db).update(product_id, changes)
    logger.info(
        "Product updated",
        extra={"product_id": product_id, "fields": sorted(changes), "admin_id": admin.user_id}
    )
    return ProductResponse(product=AdminProduct.model_validate(product))


@router.delete("/products/{product_id}", response_model=SuccessResponse)
async def delete_product(
    product_id: str,
    db: DatabaseSession,
    admin: CurrentAdmin,
) -> SuccessResponse:
    if not await ProductRepository(db).delete(product_id):
        raise NotFound("Product not found")
    logger.info("Product deleted", extra={"product_id": product_id, "admin_id": admin.user_id})
    return SuccessResponse()


@router.put("/products/{product_id}/stock", response_model=ProductResponse)
async def update_stock(
    product_id: str,
    body: StockUpdate,
    db: DatabaseSession,
) -> ProductResponse:
    """Set units on hand (``{"stock": n}``, n >= 0)."""
    product = await ProductRepository(db).set_stock(product_id, body.stock)
    return ProductResponse(product=AdminProduct.model_validate(product))


# ---------------------------------------------------------------------------
# Image upload
# ---------------------------------------------------------------------------

@router.post("/upload-image", response_model=UploadImageResponse)
async def upload_image(
    storage: ImageStorage,
    file: Optional[UploadFile] = File(default=None),
) -> UploadImageResponse:
    """
    Upload a product image to the public bucket.

    Multipart field ``file``, at most MAX_UPLOAD_BYTES (5 MB by default).
    The stored object is named ``products/<epoch ms>-<random>.<ext>``.
    """
    if file is None:
        raise ValidationFailed("No file provided")
    if storage is None:
        raise ServiceNotConfigured("Image storage not configured")

    content_type = file.content_type or "application/octet-stream"
    if not content_type.startswith("image/"):
        raise ValidationFailed("Only image uploads are allowed")

    content = await file.read(settings.max_upload_bytes + 1)
    if len(content) > settings.max_upload_bytes:
        raise PayloadTooLarge(
            f"File too large (max {settings.max_upload_bytes // (1024 * 1024)}MB)"
        )

    path = build_image_path(file.filename, content_type)
    url = await storage.upload(path, content, content_type)
    return UploadImageResponse(url=url)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------

@router.get("/orders", response_model=OrdersResponse)
async def list_orders(db: DatabaseSession) -> OrdersResponse:
    """All orders newest first, each with the customer's email when known."""
    rows = await OrderRepository(db).list_with_user_email()
    orders = []
    for order, email in rows:
        item = AdminOrder.model_validate(order)
        item.user_email = email
        orders.append(item)
    return OrdersResponse(orders=orders)


@router.put("/orders/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    db: DatabaseSession,
    admin: CurrentAdmin,
) -> OrderResponse:
    """Move an order to pending, confirmed, shipped, delivered or cancelled."""
    if body.status not in ORDER_STATUSES:
        raise ValidationFailed("Invalid status")

    order = await OrderRepository(db).update_status(order_id, body.status)
    logger.info(
        "Order status changed",
        extra={"order_id": order_id, "status": body.status, "admin_id": admin.user_id}
    )
    return OrderResponse(order=AdminOrder.model_validate(order))
