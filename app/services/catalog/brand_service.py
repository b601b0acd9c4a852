"""
BrandService - brand management with unique names.

Name conflicts are pre-checked with a read and also detected on write
through the unique constraint, so a concurrent duplicate still ends as a
conflict instead of a second row.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from app.api.v1.schemas.catalog_schemas import BrandCreate, BrandUpdate
from app.db.models import Brand
from app.db.repositories import BrandRepository
from app.utils.error_handler import ConflictException, ErrorCode, NotFoundException, is_unique_violation

logger = logging.getLogger(__name__)


def _url(value: Any) -> Optional[str]:
    return str(value) if value else None


class BrandService:
    """Brand use cases over one request session."""

    def __init__(self, brand_repo: BrandRepository):
        self.brand_repo = brand_repo

    async def list(self, is_active: Optional[bool] = None, search: Optional[str] = None) -> list[tuple[Brand, int]]:
        return await self.brand_repo.list_with_product_counts(is_active=is_active, search=search)

    async def get(self, brand_id: str) -> tuple[Brand, int]:
        brand = await self.brand_repo.get(brand_id)
        if brand is None:
            raise NotFoundException(resource="brand", resource_id=brand_id)
        return brand, await self.brand_repo.count_products(brand_id)

    async def create(self, payload: BrandCreate) -> Brand:
        """
        Create a brand.

        Raises:
            ConflictException: A brand with the same name exists
        """
        if await self.brand_repo.find_by_name(payload.name):
            raise ConflictException(resource="brand", field="name", value=payload.name)

        brand = Brand(
            name=payload.name,
            description=payload.description,
            logo=_url(payload.logo),
            website=_url(payload.website),
            is_active=payload.is_active,
        )
        try:
            await self.brand_repo.add(brand)
        except IntegrityError as e:
            if is_unique_violation(e, "name"):
                raise ConflictException(resource="brand", field="name", value=payload.name) from e
            raise

        logger.info(f"✅ Brand created: {brand.name}")
        return brand

    async def update(self, brand_id: str, payload: BrandUpdate) -> Brand:
        """
        Partially update a brand.

        Raises:
            NotFoundException: Brand does not exist
            ConflictException: The new name belongs to another brand
        """
        brand = await self.brand_repo.get(brand_id)
        if brand is None:
            raise NotFoundException(resource="brand", resource_id=brand_id)

        changes = payload.changes()
        if payload.name and payload.name != brand.name:
            if await self.brand_repo.find_by_name(payload.name, exclude_id=brand_id):
                raise ConflictException(resource="brand", field="name", value=payload.name)

        values: dict[str, Any] = {}
        for key, value in changes.items():
            if key in ("logo", "website"):
                values[key] = _url(value)
            elif key in ("name", "is_active") and value is None:
                continue
            else:
                values[key] = value

        try:
            await self.brand_repo.update(brand, values)
        except IntegrityError as e:
            if is_unique_violation(e, "name"):
                raise ConflictException(resource="brand", field="name", value=payload.name) from e
            raise

        logger.info(f"✅ Brand updated: {brand.id} fields={sorted(values)}")
        return brand

    async def delete(self, brand_id: str) -> None:
        """
        Delete a brand that no product references.

        Raises:
            NotFoundException: Brand does not exist
            ConflictException: Products still reference the brand
        """
        brand = await self.brand_repo.get(brand_id)
        if brand is None:
            raise NotFoundException(resource="brand", resource_id=brand_id)

        product_count = await self.brand_repo.count_products(brand_id)
        if product_count > 0:
            raise ConflictException(
                resource="brand",
                field="products",
                value=product_count,
                message=f"Cannot delete brand: {product_count} products are associated with it",
                error_code=ErrorCode.RESOURCE_IN_USE,
            )

        await self.brand_repo.delete(brand)
        logger.info(f"🗑️ Brand deleted: {brand_id}")
