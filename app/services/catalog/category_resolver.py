"""
CategoryResolver - decides which category a product is filed under.

A product write carries a required primary category id and an optional
subcategory id. The subcategory, when given, wins. Whether the subcategory
must actually be a child of the primary category is a configuration choice
(ENFORCE_SUBCATEGORY_PARENT); by default it is treated as an alternate target.
"""

import logging
from typing import Optional

from app.db.models import Category
from app.db.repositories import CategoryRepository
from app.utils.error_handler import ErrorCode, NotFoundException, ValidationException

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Resolves and validates the category reference of a product write."""

    def __init__(self, category_repo: CategoryRepository, enforce_parent: bool = False):
        """
        Args:
            category_repo: Repository for category lookups
            enforce_parent: Require subcategory.parent_id == category_id
        """
        self.category_repo = category_repo
        self.enforce_parent = enforce_parent

    @staticmethod
    def final_category_id(category_id: Optional[str], subcategory_id: Optional[str]) -> Optional[str]:
        """Subcategory id if present, otherwise the primary category id."""
        return subcategory_id or category_id

    async def resolve(self, category_id: Optional[str], subcategory_id: Optional[str] = None) -> Category:
        """
        Resolve the category a product must reference.

        Args:
            category_id: Primary category id
            subcategory_id: Optional subcategory id

        Returns:
            Category: Existing category to store on the product

        Raises:
            NotFoundException: If the resolved category does not exist
            ValidationException: If parent enforcement is on and the subcategory
                does not belong to the primary category
        """
        target_id = self.final_category_id(category_id, subcategory_id)
        category = await self.category_repo.get(target_id) if target_id else None

        if category is None:
            logger.warning(f"Category not found: {target_id}")
            raise NotFoundException(
                resource="category",
                resource_id=target_id,
                error_code=ErrorCode.CATEGORY_NOT_FOUND,
                status_code=400,
            )

        if self.enforce_parent and subcategory_id and category_id and subcategory_id != category_id:
            if category.parent_id != category_id:
                raise ValidationException(
                    message="Subcategory does not belong to the selected category",
                    field="subcategoryId",
                    invalid_value=subcategory_id,
                    expected_format=f"child of category {category_id}",
                )

        logger.debug(f"Resolved category {category.id} (category={category_id}, subcategory={subcategory_id})")
        return category
