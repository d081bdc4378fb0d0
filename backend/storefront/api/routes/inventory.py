"""
Public catalog endpoints.

Route order matters: ``/featured`` is registered before ``/{category}`` so
it is not captured as a category slug.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query

from storefront.api.dependencies import DatabaseSession
from storefront.core.exceptions import NotFound
from storefront.repositories.catalog import CategoryRepository, ProductRepository
from storefront.schemas.catalog import (
    CategoryOut,
    CategoryProductsResponse,
    FeaturedResponse,
    ListMeta,
    ProductDetail,
    ProductDetailResponse,
    ProductListResponse,
    ProductSummary,
)

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    db: DatabaseSession,
    category: Optional[str] = None,
    sort: Optional[str] = None,
    min_price: Annotated[Optional[float], Query(ge=0)] = None,
    max_price: Annotated[Optional[float], Query(ge=0)] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 20,
) -> ProductListResponse:
    """
    Page through active products.

    Query parameters:
        category: Category slug filter
        sort: "price_asc" or "price_desc" (anything else: newest first)
        min_price / max_price: Inclusive price bounds
        page: 1-based page (default 1)
        limit: Page size, 1-100 (default 20)

    ``meta.total`` counts every product matching the filters, not just
    the page.
    """
    products, total = await ProductRepository(db).list_active(
        category_slug=category,
        sort=sort,
        min_price=min_price,
        max_price=max_price,
        page=page,
        limit=limit,
    )
    return ProductListResponse(
        data=[ProductSummary.model_validate(p) for p in products],
        meta=ListMeta(page=page, limit=limit, total=total),
    )


@router.get("/featured", response_model=FeaturedResponse)
async def featured_products(db: DatabaseSession) -> FeaturedResponse:
    """Up to eight active featured products, newest first."""
    products = await ProductRepository(db).list_featured()
    return FeaturedResponse(data=[ProductSummary.model_validate(p) for p in products])


@router.get("/{category}", response_model=CategoryProductsResponse)
async def products_by_category(category: str, db: DatabaseSession) -> CategoryProductsResponse:
    found = await CategoryRepository(db).get_by_slug(category)
    if found is None:
        raise NotFound("Category not found")

    products = await ProductRepository(db).list_active_in_category(found.id)
    return CategoryProductsResponse(
        data=[ProductSummary.model_validate(p) for p in products],
        category=CategoryOut.model_validate(found),
    )


@router.get("/{category}/{slug}", response_model=ProductDetailResponse)
async def product_detail(category: str, slug: str, db: DatabaseSession) -> ProductDetailResponse:
    """
    Full product page: specs, tags, images and videos.

    Products are addressed by slug alone; the category segment only
    shapes the URL.
    """
    product = await ProductRepository(db).get_active_by_slug(slug)
    if product is None:
        raise NotFound("Product not found")
    return ProductDetailResponse(data=ProductDetail.model_validate(product))
