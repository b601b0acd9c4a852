"""
ProductRepository: product and product-variant operations.

Encapsulates product lookups with their associations, catalog listing and
search, identifier uniqueness checks and the variant rows owned by a product.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional, Sequence

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.orm import selectinload

from app.db.models import Product, ProductVariant
from app.db.repositories.base import BaseRepository, log_operation

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {
    "createdAt": Product.created_at,
    "price": Product.price,
    "name": Product.name,
}


def _with_associations(stmt):
    return stmt.options(
        selectinload(Product.category),
        selectinload(Product.brand),
        selectinload(Product.variants),
    )


class ProductRepository(BaseRepository[Product]):
    """Repository for products and their variants."""

    model = Product

    @log_operation()
    async def get_with_details(self, product_id: str) -> Optional[Product]:
        """
        Load a product with category, brand and variants.

        Rows already present in the session are refreshed so that
        collections modified in this transaction are read back from the store.
        """
        if not product_id:
            return None
        stmt = _with_associations(select(Product).where(Product.id == product_id)).execution_options(
            populate_existing=True
        )
        return (await self.session.scalars(stmt)).first()

    @log_operation()
    async def get_many(self, product_ids: Sequence[str]) -> dict[str, Product]:
        """Fetch several products keyed by id; missing ids are absent from the result."""
        ids = {pid for pid in product_ids if pid}
        if not ids:
            return {}
        stmt = select(Product).where(Product.id.in_(ids))
        return {product.id: product for product in (await self.session.scalars(stmt)).all()}

    @log_operation()
    async def list(
        self,
        category_id: Optional[str] = None,
        available: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> list[Product]:
        """
        List products newest first.

        Args:
            category_id: Filter by category
            available: Filter by availability flag
            search: Case-insensitive match on name or description
        """
        stmt = select(Product)
        if category_id:
            stmt = stmt.where(Product.category_id == category_id)
        if available is not None:
            stmt = stmt.where(Product.available == available)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(func.lower(Product.name).like(pattern), func.lower(Product.description).like(pattern))
            )
        stmt = _with_associations(stmt.order_by(desc(Product.created_at)))
        return list((await self.session.scalars(stmt)).all())

    @log_operation()
    async def search(
        self,
        query: str,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        category_id: Optional[str] = None,
        available: Optional[bool] = None,
        sort_by: str = "createdAt",
        sort_order: str = "desc",
    ) -> list[Product]:
        """
        Full-text-ish product search on name, description and SKU.

        Args:
            query: Search text (required)
            min_price: Lower price bound (inclusive)
            max_price: Upper price bound (inclusive)
            category_id: Filter by category
            available: Filter by availability flag
            sort_by: createdAt, price or name
            sort_order: asc or desc
        """
        pattern = f"%{query.lower()}%"
        stmt = select(Product).where(
            or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.description).like(pattern),
                func.lower(Product.sku).like(pattern),
            )
        )
        if min_price is not None:
            stmt = stmt.where(Product.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)
        if category_id:
            stmt = stmt.where(Product.category_id == category_id)
        if available is not None:
            stmt = stmt.where(Product.available == available)

        column = SORTABLE_COLUMNS.get(sort_by, Product.created_at)
        stmt = stmt.order_by(asc(column) if sort_order == "asc" else desc(column))
        return list((await self.session.scalars(_with_associations(stmt))).all())

    @log_operation()
    async def sku_exists(self, sku: str) -> bool:
        stmt = select(func.count()).select_from(Product).where(Product.sku == sku)
        return (await self.session.execute(stmt)).scalar_one() > 0

    @log_operation()
    async def slug_exists(self, slug: str, exclude_id: Optional[str] = None) -> bool:
        stmt = select(func.count()).select_from(Product).where(Product.slug == slug)
        if exclude_id:
            stmt = stmt.where(Product.id != exclude_id)
        return (await self.session.execute(stmt)).scalar_one() > 0

    # === VARIANTES ===

    @log_operation()
    async def list_variants(self, product_id: str, active_only: bool = False) -> list[ProductVariant]:
        """Variants of a product ordered by size then color."""
        stmt = select(ProductVariant).where(ProductVariant.product_id == product_id)
        if active_only:
            stmt = stmt.where(ProductVariant.is_active.is_(True))
        stmt = stmt.order_by(ProductVariant.size, ProductVariant.color).execution_options(populate_existing=True)
        return list((await self.session.scalars(stmt)).all())

    @log_operation()
    async def get_variants(self, variant_ids: Sequence[str]) -> dict[str, ProductVariant]:
        """Fetch several variants keyed by id; missing ids are absent from the result."""
        ids = {vid for vid in variant_ids if vid}
        if not ids:
            return {}
        stmt = select(ProductVariant).where(ProductVariant.id.in_(ids))
        return {variant.id: variant for variant in (await self.session.scalars(stmt)).all()}

    @log_operation()
    async def add_variants(self, variants: Sequence[ProductVariant]) -> None:
        self.session.add_all(variants)
        await self.session.flush()

    @log_operation()
    async def delete_variants(self, variants: Sequence[ProductVariant]) -> None:
        """Delete variant rows and flush before any replacement rows are inserted."""
        for variant in variants:
            await self.session.delete(variant)
        await self.session.flush()
