"""
Seed a demo catalog.

Creates a handful of categories and products (with images) so the
storefront has something to show in development. Skips seeding when the
categories already exist.

Usage:
    DB_CREATE_ALL=1 python scripts/seed_catalog.py
"""

import asyncio
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from storefront.core.database import create_schema, session_scope
from storefront.models.catalog import ProductImage
from storefront.repositories.catalog import CategoryRepository, ProductRepository


DEMO_CATEGORIES = [
    {"slug": "rc-cars", "name": "RC Cars", "description": "Buggies, trucks and crawlers", "sort_order": 1},
    {"slug": "drones", "name": "Drones", "description": "Camera and FPV drones", "sort_order": 2},
    {"slug": "solar-kits", "name": "Solar Kits", "description": "Solar-powered DIY kits", "sort_order": 3},
]

DEMO_PRODUCTS = [
    {
        "category": "rc-cars",
        "slug": "traxxas-slash-4x4",
        "name": "Traxxas Slash 4X4",
        "brand": "Traxxas",
        "price": 38999.0,
        "compare_price": 42999.0,
        "stock_qty": 4,
        "is_featured": True,
        "specs": {"scale": "1:10", "drive": "4WD", "motor": "Brushless"},
        "tags": ["short-course", "4wd"],
    },
    {
        "category": "rc-cars",
        "slug": "axial-scx24-crawler",
        "name": "Axial SCX24 Crawler",
        "brand": "Axial",
        "price": 14999.0,
        "stock_qty": 10,
        "specs": {"scale": "1:24", "drive": "4WD"},
        "tags": ["crawler"],
    },
    {
        "category": "drones",
        "slug": "mini-fpv-quad",
        "name": "Mini FPV Quad",
        "brand": "BetaFPV",
        "price": 9999.0,
        "stock_qty": 6,
        "is_featured": True,
        "specs": {"frame": "75mm", "camera": "1200TVL"},
        "tags": ["fpv", "indoor"],
    },
    {
        "category": "solar-kits",
        "slug": "solar-racer-kit",
        "name": "Solar Racer Kit",
        "brand": "Big Dawgs",
        "price": 1499.0,
        "stock_qty": 25,
        "is_solar": True,
        "specs": {"panel": "1.5V 300mA"},
        "tags": ["stem", "kids"],
    },
]


async def seed_catalog() -> None:
    await create_schema()

    async with session_scope() as session:
        categories = CategoryRepository(session)
        products = ProductRepository(session)

        if await categories.get_by_slug(DEMO_CATEGORIES[0]["slug"]) is not None:
            print("Demo catalog already exists. Skipping...")
            return

        by_slug = {}
        for data in DEMO_CATEGORIES:
            category = await categories.create(**data)
            by_slug[category.slug] = category
            print(f"Created category: {category.slug}")

        for data in DEMO_PRODUCTS:
            data = dict(data)
            category = by_slug[data.pop("category")]
            product = await products.create({**data, "category_id": category.id})
            session.add(ProductImage(
                product_id=product.id,
                url=f"https://placehold.co/800x600?text={product.slug}",
                alt_text=product.name,
                sort_order=0,
            ))
            print(f"Created product: {product.slug} ({product.price})")


if __name__ == "__main__":
    print("Seeding demo catalog...")
    asyncio.run(seed_catalog())
    print("Done!")
