"""CategoryRepository: category lookups and creation."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select

from app.db.models import Category
from app.db.repositories.base import BaseRepository, log_operation

logger = logging.getLogger(__name__)


class CategoryRepository(BaseRepository[Category]):
    """Repository for catalog categories."""

    model = Category

    @log_operation()
    async def list(
        self,
        parent_id: Optional[str] = None,
        roots_only: bool = False,
        is_active: Optional[bool] = None,
    ) -> list[Category]:
        """
        List categories ordered by sort order and name.

        Args:
            parent_id: Only children of this category
            roots_only: Only categories without parent
            is_active: Filter by active flag
        """
        stmt = select(Category)
        if parent_id:
            stmt = stmt.where(Category.parent_id == parent_id)
        elif roots_only:
            stmt = stmt.where(Category.parent_id.is_(None))
        if is_active is not None:
            stmt = stmt.where(Category.is_active == is_active)
        stmt = stmt.order_by(Category.sort_order, Category.name)
        return list((await self.session.scalars(stmt)).all())

    @log_operation()
    async def slug_exists(self, slug: str) -> bool:
        stmt = select(func.count()).select_from(Category).where(Category.slug == slug)
        return (await self.session.execute(stmt)).scalar_one() > 0

    @log_operation()
    async def find_by_name(self, name: str, parent_id: Optional[str] = None) -> Optional[Category]:
        """Case-insensitive name lookup among siblings."""
        stmt = select(Category).where(func.lower(Category.name) == name.strip().lower())
        if parent_id:
            stmt = stmt.where(Category.parent_id == parent_id)
        else:
            stmt = stmt.where(Category.parent_id.is_(None))
        return (await self.session.scalars(stmt.limit(1))).first()
