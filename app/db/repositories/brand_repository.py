"""BrandRepository: brand CRUD and usage counts."""

import logging
from typing import Optional

from sqlalchemy import func, or_, select

from app.db.models import Brand, Product
from app.db.repositories.base import BaseRepository, log_operation

logger = logging.getLogger(__name__)


class BrandRepository(BaseRepository[Brand]):
    """Repository for brands."""

    model = Brand

    @log_operation()
    async def list_with_product_counts(
        self, is_active: Optional[bool] = None, search: Optional[str] = None
    ) -> list[tuple[Brand, int]]:
        """
        List brands ordered by name together with the number of products.

        Args:
            is_active: Filter by active flag
            search: Case-insensitive match on name or description
        """
        product_count = (
            select(func.count(Product.id)).where(Product.brand_id == Brand.id).correlate(Brand).scalar_subquery()
        )
        stmt = select(Brand, product_count)
        if is_active is not None:
            stmt = stmt.where(Brand.is_active == is_active)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                or_(func.lower(Brand.name).like(pattern), func.lower(Brand.description).like(pattern))
            )
        stmt = stmt.order_by(Brand.name)
        rows = await self.session.execute(stmt)
        return [(brand, count) for brand, count in rows.all()]

    @log_operation()
    async def find_by_name(self, name: str, exclude_id: Optional[str] = None) -> Optional[Brand]:
        """Exact name lookup, optionally ignoring one brand (for renames)."""
        stmt = select(Brand).where(Brand.name == name.strip())
        if exclude_id:
            stmt = stmt.where(Brand.id != exclude_id)
        return (await self.session.scalars(stmt.limit(1))).first()

    @log_operation()
    async def count_products(self, brand_id: str) -> int:
        stmt = select(func.count(Product.id)).where(Product.brand_id == brand_id)
        return (await self.session.execute(stmt)).scalar_one()
