"""
ProductService - product creation, edition, lookup and search.

Coordinates the CategoryResolver, identifier derivation and the
VariantMatrixManager inside the request transaction.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError

from app.api.v1.schemas.catalog_schemas import ProductCreate, ProductSearchParams, ProductUpdate, VariantInput
from app.db.models import Product, ProductVariant
from app.db.repositories import BrandRepository, ProductRepository
from app.services.catalog.category_resolver import CategoryResolver
from app.services.catalog.variant_matrix import (
    VariantMatrixManager,
    VariantSpec,
    VariantStats,
    compute_variant_stats,
)
from app.utils.error_handler import ConflictException, DatabaseException, NotFoundException, is_unique_violation
from app.utils.id_utils import IdentifierGenerator, generate_unique, slugify

logger = logging.getLogger(__name__)

MERCHANDISING_FIELDS = (
    "short_description",
    "compare_price",
    "tags",
    "featured",
    "is_new_in",
    "meta_title",
    "meta_description",
    "weight",
    "dimensions",
)


def to_variant_specs(variants: Optional[list[VariantInput]]) -> list[VariantSpec]:
    return [VariantSpec(size=v.size, color=v.color, quantity=v.quantity or 0) for v in variants or []]


class ProductService:
    """Product use cases over one request session."""

    def __init__(
        self,
        product_repo: ProductRepository,
        brand_repo: BrandRepository,
        category_resolver: CategoryResolver,
        variant_manager: VariantMatrixManager,
        id_generator: IdentifierGenerator,
        max_identifier_attempts: int = 3,
    ):
        self.product_repo = product_repo
        self.brand_repo = brand_repo
        self.category_resolver = category_resolver
        self.variant_manager = variant_manager
        self.id_generator = id_generator
        self.max_identifier_attempts = max_identifier_attempts

    async def _unique_slug(self, name: str, exclude_id: Optional[str] = None) -> str:
        """Slug of the name; a numeric suffix is appended while it is taken."""
        base = slugify(name) or "product"
        candidate = base
        suffix = 2
        while await self.product_repo.slug_exists(candidate, exclude_id=exclude_id):
            candidate = f"{base}-{suffix}"
            suffix += 1
        return candidate

    async def _check_brand(self, brand_id: Optional[str]) -> None:
        if brand_id and not await self.brand_repo.exists(brand_id):
            raise NotFoundException(resource="brand", resource_id=brand_id, status_code=400)

    async def create(self, payload: ProductCreate) -> Product:
        """
        Create a product with generated SKU/slug and its variant matrix.

        Args:
            payload: Validated product payload

        Returns:
            Product: Created product with category, brand and variants loaded

        Raises:
            NotFoundException: Category or brand does not exist
            ValidationException: Invalid variant matrix
            ConflictException: Slug/SKU collision detected on write
        """
        category = await self.category_resolver.resolve(payload.category_id, payload.subcategory_id)
        await self._check_brand(payload.brand_id)

        specs = to_variant_specs(payload.variants)
        self.variant_manager.validate_specs(specs)

        sku = await generate_unique(
            lambda: self.id_generator.product_sku(payload.name),
            self.product_repo.sku_exists,
            self.max_identifier_attempts,
            "sku",
        )
        slug = await self._unique_slug(payload.name)

        values: dict[str, Any] = {
            "name": payload.name,
            "description": payload.description,
            "price": payload.price,
            "stock": payload.stock,
            "images": list(payload.images),
            "category_id": category.id,
            "brand_id": payload.brand_id or None,
            "available": payload.available,
            "slug": slug,
            "sku": sku,
        }
        values.update(self._merchandising_values(payload.changes(), include_defaults=True))

        try:
            product = await self.product_repo.add(Product(**values))
            await self.variant_manager.create_for_product(product, specs)
        except IntegrityError as e:
            raise self._conflict_from(e) from e

        logger.info(f"✅ Product created: {product.name} ({product.sku}) with {len(specs)} variants")
        return await self.product_repo.get_with_details(product.id)

    async def update(self, product_id: str, payload: ProductUpdate) -> Product:
        """
        Partially update a product.

        The slug is regenerated only when the name changes; the SKU never
        changes. Variants follow the configured update strategy.

        Raises:
            NotFoundException: Product, category or brand does not exist
        """
        product = await self.product_repo.get(product_id)
        if product is None:
            raise NotFoundException(resource="product", resource_id=product_id)

        changes = payload.changes()
        values: dict[str, Any] = {}

        if "category_id" in changes or "subcategory_id" in changes:
            if payload.category_id or payload.subcategory_id:
                category = await self.category_resolver.resolve(
                    payload.category_id or product.category_id, payload.subcategory_id
                )
                values["category_id"] = category.id

        if "brand_id" in changes:
            await self._check_brand(payload.brand_id)
            values["brand_id"] = payload.brand_id or None

        if payload.name is not None and payload.name != product.name:
            values["name"] = payload.name
            values["slug"] = await self._unique_slug(payload.name, exclude_id=product.id)

        for key in ("description", "price", "stock", "available"):
            if changes.get(key) is not None:
                values[key] = changes[key]
        if payload.images is not None:
            values["images"] = list(payload.images)

        values.update(self._merchandising_values(changes))

        try:
            if values:
                await self.product_repo.update(product, values)
            summary = await self.variant_manager.apply_update(product, to_variant_specs(payload.variants))
        except IntegrityError as e:
            raise self._conflict_from(e) from e

        logger.info(
            f"✅ Product updated: {product.id} fields={sorted(values)} "
            f"variants={'unchanged' if summary is None else vars(summary)}"
        )
        return await self.product_repo.get_with_details(product.id)

    async def get(self, product_id: str) -> tuple[Product, list[ProductVariant], VariantStats]:
        """
        Product with its active variants (by size, color) and aggregates.

        Raises:
            NotFoundException: Product does not exist
        """
        product = await self.product_repo.get_with_details(product_id)
        if product is None:
            raise NotFoundException(resource="product", resource_id=product_id)
        active = await self.product_repo.list_variants(product_id, active_only=True)
        return product, active, compute_variant_stats(active)

    async def list_variants(self, product_id: str) -> list[ProductVariant]:
        if not await self.product_repo.exists(product_id):
            raise NotFoundException(resource="product", resource_id=product_id)
        return await self.product_repo.list_variants(product_id)

    async def delete(self, product_id: str) -> None:
        """
        Delete a product; its variants go with it, order items keep their snapshot.

        Raises:
            NotFoundException: Product does not exist
        """
        product = await self.product_repo.get(product_id)
        if product is None:
            raise NotFoundException(resource="product", resource_id=product_id)
        await self.product_repo.delete(product)
        logger.info(f"🗑️ Product deleted: {product_id}")

    async def list(
        self, category_id: Optional[str] = None, available: Optional[bool] = None, search: Optional[str] = None
    ) -> list[Product]:
        return await self.product_repo.list(category_id=category_id, available=available, search=search)

    async def search(self, params: ProductSearchParams) -> list[Product]:
        return await self.product_repo.search(
            query=params.q,
            min_price=params.min_price,
            max_price=params.max_price,
            category_id=params.category_id,
            available=params.available,
            sort_by=params.sort_by,
            sort_order=params.sort_order,
        )

    @staticmethod
    def _merchandising_values(changes: dict[str, Any], include_defaults: bool = False) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for key in MERCHANDISING_FIELDS:
            if key in changes and (changes[key] is not None or key not in ("tags", "featured", "is_new_in")):
                values[key] = changes[key]
        if include_defaults:
            values.setdefault("tags", [])
            values.setdefault("featured", False)
            values.setdefault("is_new_in", False)
        return values

    @staticmethod
    def _conflict_from(error: IntegrityError) -> Exception:
        if is_unique_violation(error, "product_variants"):
            return ConflictException(resource="variant", field="size/color")
        if is_unique_violation(error, "slug"):
            return ConflictException(resource="product", field="slug")
        if is_unique_violation(error, "sku"):
            return ConflictException(resource="product", field="sku")
        return DatabaseException(message="Could not save product", operation="product_write")
