"""
Catalog repositories: categories and products.

Storefront queries only ever see active products; the admin queries see
everything. Relationships needed by a response are always eager loaded
with ``selectinload`` because async sessions cannot lazy load.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.core.exceptions import Conflict, NotFound, ValidationFailed
from storefront.models.catalog import Category, Product


FEATURED_LIMIT = 8

# Columns an admin may write through the products endpoints
PRODUCT_FIELDS = (
    "slug",
    "name",
    "description",
    "brand",
    "price",
    "compare_price",
    "stock_qty",
    "category_id",
    "specs",
    "tags",
    "is_active",
    "is_featured",
    "is_solar",
)


class CategoryRepository:
    """Repository for product categories."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_slug(self, slug: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.slug == slug))
        return result.scalar_one_or_none()

    async def get_by_id(self, category_id: str) -> Optional[Category]:
        result = await self.session.execute(select(Category).where(Category.id == category_id))
        return result.scalar_one_or_none()

    async def create(
        self,
        slug: str,
        name: str,
        description: Optional[str] = None,
        sort_order: int = 0
    ) -> Category:
        category = Category(slug=slug, name=name, description=description, sort_order=sort_order)
        self.session.add(category)
        await self.session.flush()
        return category


class ProductRepository:
    """
    Repository for products and their stock levels.

    Attributes:
        session: SQLAlchemy async session for database operations
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Storefront reads
    # ------------------------------------------------------------------

    async def list_active(
        self,
        category_slug: Optional[str] = None,
        sort: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Product], int]:
        """
        Page through active products.

        Args:
            category_slug: Only products in this category
            sort: "price_asc", "price_desc" or None for newest first
            min_price: Inclusive lower price bound
            max_price: Inclusive upper price bound
            page: 1-based page number
            limit: Page size

        Returns:
            Tuple of (products on the page, total matching products)

        Note:
            Products carry ``category`` and ``images`` eager loaded.
        """
        filters = [Product.is_active.is_(True)]
        if min_price is not None:
            filters.append(Product.price >= min_price)
        if max_price is not None:
            filters.append(Product.price <= max_price)

        stmt = select(Product)
        count_stmt = select(func.count(Product.id))
        if category_slug:
            stmt = stmt.join(Category, Product.category_id == Category.id)
            count_stmt = count_stmt.join(Category, Product.category_id == Category.id)
            filters.append(Category.slug == category_slug)

        stmt = stmt.where(*filters)
        count_stmt = count_stmt.where(*filters)

        if sort == "price_asc":
            stmt = stmt.order_by(Product.price.asc(), Product.created_at.desc())
        elif sort == "price_desc":
            stmt = stmt.order_by(Product.price.desc(), Product.created_at.desc())
        else:
            stmt = stmt.order_by(Product.created_at.desc())

        stmt = (
            stmt.options(selectinload(Product.category), selectinload(Product.images))
            .offset((page - 1) * limit)
            .limit(limit)
        )

        products = list((await self.session.execute(stmt)).scalars().all())
        total = (await self.session.execute(count_stmt)).scalar_one()
        return products, total

    async def list_featured(self, limit: int = FEATURED_LIMIT) -> List[Product]:
        stmt = (
            select(Product)
            .where(Product.is_active.is_(True), Product.is_featured.is_(True))
            .options(selectinload(Product.category), selectinload(Product.images))
            .order_by(Product.created_at.desc())
            .limit(limit)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def list_active_in_category(self, category_id: str) -> List[Product]:
        stmt = (
            select(Product)
            .where(Product.is_active.is_(True), Product.category_id == category_id)
            .options(selectinload(Product.category), selectinload(Product.images))
            .order_by(Product.created_at.desc())
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_active_by_slug(self, slug: str) -> Optional[Product]:
        """Active product with category, images and videos loaded."""
        stmt = (
            select(Product)
            .where(Product.slug == slug, Product.is_active.is_(True))
            .options(
                selectinload(Product.category),
                selectinload(Product.images),
                selectinload(Product.videos),
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, product_ids: Sequence[str]) -> Dict[str, Product]:
        if not product_ids:
            return {}
        stmt = select(Product).where(Product.id.in_(set(product_ids)))
        return {p.id: p for p in (await self.session.execute(stmt)).scalars().all()}

    async def count(self) -> int:
        return (await self.session.execute(select(func.count(Product.id)))).scalar_one()

    # ------------------------------------------------------------------
    # Admin writes
    # ------------------------------------------------------------------

    async def list_all(self) -> List[Product]:
        stmt = select(Product).order_by(Product.created_at.desc())
        return list((await self.session.execute(stmt)).scalars().all())

    async def get_by_id(self, product_id: str) -> Optional[Product]:
        result = await self.session.execute(select(Product).where(Product.id == product_id))
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(Product.id).where(Product.slug == slug)
        if exclude_id:
            stmt = stmt.where(Product.id != exclude_id)
        return (await self.session.execute(stmt)).first() is not None

    async def _check_category(self, category_id: Optional[str]) -> None:
        if category_id is None:
            return
        exists = await self.session.execute(select(Category.id).where(Category.id == category_id))
        if exists.first() is None:
            raise ValidationFailed("Category not found")

    async def create(self, data: Dict[str, Any]) -> Product:
        """
        Insert a product from admin-supplied fields.

        Raises:
            Conflict: If the slug is already taken
            ValidationFailed: If category_id names no category
        """
        if await self.slug_exists(data["slug"]):
            raise Conflict(f"Product with slug '{data['slug']}' already exists")
        await self._check_category(data.get("category_id"))

        product = Product(**{k: v for k, v in data.items() if k in PRODUCT_FIELDS})
        self.session.add(product)
        await self.session.flush()
        await self.session.refresh(product)
        return product

    async def update(self, product_id: str, changes: Dict[str, Any]) -> Product:
        """
        Apply a partial update.

        Raises:
            NotFound: If no product has this id
            Conflict: If the new slug belongs to another product
            ValidationFailed: If category_id names no category
        """
        product = await self.get_by_id(product_id)
        if product is None:
            raise NotFound("Product not found")

        if "slug" in changes and await self.slug_exists(changes["slug"], exclude_id=product_id):
            raise Conflict(f"Product with slug '{changes['slug']}' already exists")
        if "category_id" in changes:
            await self._check_category(changes["category_id"])

        for field, value in changes.items():
            if field in PRODUCT_FIELDS:
                setattr(product, field, value)

        await self.session.flush()
        await self.session.refresh(product)
        return product

    async def set_stock(self, product_id: str, stock_qty: int) -> Product:
        return await self.update(product_id, {"stock_qty": stock_qty})

    async def delete(self, product_id: str) -> bool:
        """
        Delete a product.

        Images and videos cascade in the database; order lines keep their
        price and lose the product reference.

        Returns:
            True if a row was deleted, False if the id was unknown
        """
        result = await self.session.execute(delete(Product).where(Product.id == product_id))
        return result.rowcount > 0

    async def decrement_stock(self, product_id: str, quantity: int) -> None:
        """Subtract ``quantity`` from stock, stopping at zero."""
        await self.session.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(
                stock_qty=case(
                    (Product.stock_qty >= quantity, Product.stock_qty - quantity),
                    else_=0,
                )
            )
            .execution_options(synchronize_session=False)
        )
