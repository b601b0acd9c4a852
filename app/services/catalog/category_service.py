"""CategoryService - category lookup and creation."""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from app.api.v1.schemas.catalog_schemas import CategoryCreate
from app.db.models import Category
from app.db.repositories import CategoryRepository
from app.utils.error_handler import ConflictException, NotFoundException, ValidationException, is_unique_violation
from app.utils.id_utils import slugify

logger = logging.getLogger(__name__)


class CategoryService:
    """Categories form a two-level tree: roots and subcategories."""

    def __init__(self, category_repo: CategoryRepository):
        self.category_repo = category_repo

    async def list(
        self, parent_id: Optional[str] = None, roots_only: bool = False, is_active: Optional[bool] = None
    ) -> list[Category]:
        return await self.category_repo.list(parent_id=parent_id, roots_only=roots_only, is_active=is_active)

    async def get(self, category_id: str) -> Category:
        category = await self.category_repo.get(category_id)
        if category is None:
            raise NotFoundException(resource="category", resource_id=category_id)
        return category

    async def create(self, payload: CategoryCreate) -> Category:
        """
        Create a category or subcategory.

        Raises:
            NotFoundException: The parent does not exist
            ValidationException: The parent is itself a subcategory
            ConflictException: A sibling with the same name exists
        """
        if payload.parent_id:
            parent = await self.category_repo.get(payload.parent_id)
            if parent is None:
                raise NotFoundException(resource="category", resource_id=payload.parent_id, status_code=400)
            if parent.parent_id is not None:
                raise ValidationException(
                    message="Categories are limited to two levels",
                    field="parentId",
                    invalid_value=payload.parent_id,
                    expected_format="id of a root category",
                )

        if await self.category_repo.find_by_name(payload.name, parent_id=payload.parent_id):
            raise ConflictException(resource="category", field="name", value=payload.name)

        base = slugify(payload.name) or "category"
        slug = base
        suffix = 2
        while await self.category_repo.slug_exists(slug):
            slug = f"{base}-{suffix}"
            suffix += 1

        category = Category(
            name=payload.name,
            slug=slug,
            description=payload.description,
            parent_id=payload.parent_id or None,
            image=payload.image,
            is_active=payload.is_active,
            sort_order=payload.sort_order,
        )
        try:
            await self.category_repo.add(category)
        except IntegrityError as e:
            if is_unique_violation(e, "slug"):
                raise ConflictException(resource="category", field="slug", value=slug) from e
            raise

        logger.info(f"✅ Category created: {category.name} (parent={category.parent_id})")
        return category
