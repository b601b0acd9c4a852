"""
VariantMatrixManager - size/color variant rows owned by a product.

Translates a submitted list of {size, color, quantity} tuples into
ProductVariant rows, applies the configured update strategy and exposes
the aggregate stock views read by the catalog.

Update strategies:
- replace: a non-empty list deletes every existing variant and creates the
  submitted set; an empty or absent list leaves variants untouched.
- reconcile: rows are matched on (size, color); matches are updated in place
  (their ids survive), new keys are inserted and missing keys deleted.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from app.db.models import Product, ProductVariant
from app.db.repositories import ProductRepository
from app.utils.colors import SIZES, is_known_size, resolve_color
from app.utils.error_handler import ErrorCode, ValidationException
from app.utils.id_utils import generate_variant_sku

logger = logging.getLogger(__name__)

VariantKey = tuple[Optional[str], Optional[str]]


def variant_key(size: Optional[str], color: Optional[str]) -> VariantKey:
    """Matrix key of a variant; sizes and colors compare case-insensitively."""
    return (size.strip().upper() if size else None, color.strip().lower() if color else None)


@dataclass(frozen=True)
class VariantSpec:
    """One requested row of the size/color matrix."""

    size: Optional[str] = None
    color: Optional[str] = None
    quantity: int = 0

    @property
    def key(self) -> VariantKey:
        return variant_key(self.size, self.color)


@dataclass
class VariantStats:
    """
    Aggregate view over the active variants of a product.

    Attributes:
        total_stock: Sum of stock over active variants
        available_sizes: Distinct non-empty sizes in size-chart order, unknown
            sizes after them in first-seen order
        available_colors: Distinct non-empty colors, first-seen order
    """

    total_stock: int = 0
    available_sizes: list[str] = field(default_factory=list)
    available_colors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalStock": self.total_stock,
            "availableSizes": self.available_sizes,
            "availableColors": self.available_colors,
        }


@dataclass
class VariantChangeSummary:
    created: int = 0
    updated: int = 0
    deleted: int = 0


def _distinct(values: Iterable[Optional[str]]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value and value not in seen:
            seen[value] = None
    return list(seen)


def _size_rank(size: str) -> int:
    upper = size.upper()
    return SIZES.index(upper) if upper in SIZES else len(SIZES)


def compute_variant_stats(variants: Iterable[ProductVariant]) -> VariantStats:
    """Aggregate stock, sizes and colors over active variants only."""
    active = [variant for variant in variants if variant.is_active]
    return VariantStats(
        total_stock=sum(variant.stock or 0 for variant in active),
        available_sizes=sorted(_distinct(variant.size for variant in active), key=_size_rank),
        available_colors=_distinct(variant.color for variant in active),
    )


class VariantMatrixManager:
    """Builds, replaces or reconciles the variant set of one product."""

    def __init__(
        self,
        product_repo: ProductRepository,
        strategy: str = "replace",
        strict_colors: bool = False,
        strict_sizes: bool = False,
    ):
        """
        Args:
            product_repo: Repository owning variant persistence
            strategy: "replace" or "reconcile"
            strict_colors: Reject colors outside the palette
            strict_sizes: Reject sizes outside the size set
        """
        if strategy not in ("replace", "reconcile"):
            raise ValueError(f"Unknown variant update strategy: {strategy}")
        self.product_repo = product_repo
        self.strategy = strategy
        self.strict_colors = strict_colors
        self.strict_sizes = strict_sizes

    def validate_specs(self, specs: Sequence[VariantSpec]) -> None:
        """
        Check a submitted matrix before any write.

        Raises:
            ValidationException: Duplicate (size, color) pairs, negative
                quantities, or unknown sizes/colors in strict mode
        """
        seen: set[VariantKey] = set()
        for index, spec in enumerate(specs):
            if spec.key in seen:
                raise ValidationException(
                    message=f"Duplicate variant size/color combination: {spec.size}/{spec.color}",
                    field=f"variants[{index}]",
                    invalid_value=f"{spec.size}/{spec.color}",
                    error_code=ErrorCode.INVALID_VARIANT_DATA,
                )
            seen.add(spec.key)

            if spec.quantity is not None and spec.quantity < 0:
                raise ValidationException(
                    message="Variant quantity cannot be negative",
                    field=f"variants[{index}].quantity",
                    invalid_value=spec.quantity,
                    error_code=ErrorCode.INVALID_VARIANT_DATA,
                )

            if self.strict_sizes and spec.size and not is_known_size(spec.size):
                raise ValidationException(
                    message=f"Unknown size: {spec.size}",
                    field=f"variants[{index}].size",
                    invalid_value=spec.size,
                    expected_format=", ".join(SIZES),
                    error_code=ErrorCode.INVALID_VARIANT_DATA,
                )

            if self.strict_colors and spec.color and not resolve_color(spec.color).resolved:
                raise ValidationException(
                    message=f"Unknown color: {spec.color}",
                    field=f"variants[{index}].color",
                    invalid_value=spec.color,
                    error_code=ErrorCode.INVALID_VARIANT_DATA,
                )

    def build_variant(self, product: Product, spec: VariantSpec) -> ProductVariant:
        """
        Derive a new variant row for a product.

        Raises:
            ValueError: If the product has no SKU yet
        """
        if not product.sku:
            raise ValueError(f"Product {product.id} has no SKU; derive identifiers before variants")

        return ProductVariant(
            product_id=product.id,
            size=spec.size.upper() if spec.size else None,
            color=spec.color,
            color_hex=resolve_color(spec.color).hex if spec.color else None,
            sku=generate_variant_sku(product.sku, spec.size, spec.color),
            stock=spec.quantity or 0,
            images=[],
            is_active=True,
            price=None,
            material=None,
        )

    def build_variants(self, product: Product, specs: Sequence[VariantSpec]) -> list[ProductVariant]:
        self.validate_specs(specs)
        return [self.build_variant(product, spec) for spec in specs]

    async def create_for_product(self, product: Product, specs: Sequence[VariantSpec]) -> list[ProductVariant]:
        """Create the initial variant set of a freshly created product."""
        variants = self.build_variants(product, specs)
        if variants:
            await self.product_repo.add_variants(variants)
            logger.info(f"Created {len(variants)} variants for product {product.sku}")
        return variants

    async def apply_update(
        self, product: Product, specs: Optional[Sequence[VariantSpec]]
    ) -> Optional[VariantChangeSummary]:
        """
        Apply a submitted matrix to an existing product.

        Returns:
            VariantChangeSummary, or None when the list is empty/absent (no-op)
        """
        if not specs:
            logger.debug(f"No variants submitted for product {product.id}; keeping existing rows")
            return None

        self.validate_specs(specs)
        if self.strategy == "reconcile":
            return await self._reconcile(product, specs)
        return await self._replace(product, specs)

    async def _replace(self, product: Product, specs: Sequence[VariantSpec]) -> VariantChangeSummary:
        existing = await self.product_repo.list_variants(product.id)
        await self.product_repo.delete_variants(existing)
        variants = [self.build_variant(product, spec) for spec in specs]
        await self.product_repo.add_variants(variants)

        logger.info(f"Replaced {len(existing)} variants with {len(variants)} for product {product.sku}")
        return VariantChangeSummary(created=len(variants), deleted=len(existing))

    async def _reconcile(self, product: Product, specs: Sequence[VariantSpec]) -> VariantChangeSummary:
        existing = await self.product_repo.list_variants(product.id)
        existing_by_key = {variant_key(variant.size, variant.color): variant for variant in existing}
        submitted_keys = {spec.key for spec in specs}
        summary = VariantChangeSummary()

        removed = [variant for key, variant in existing_by_key.items() if key not in submitted_keys]
        if removed:
            await self.product_repo.delete_variants(removed)
            summary.deleted = len(removed)

        new_variants = []
        for spec in specs:
            current = existing_by_key.get(spec.key)
            if current is None:
                new_variants.append(self.build_variant(product, spec))
                continue
            fresh = self.build_variant(product, spec)
            current.size = fresh.size
            current.stock = fresh.stock
            current.sku = fresh.sku
            current.color_hex = fresh.color_hex
            current.is_active = True
            summary.updated += 1

        if new_variants:
            await self.product_repo.add_variants(new_variants)
            summary.created = len(new_variants)
        else:
            await self.product_repo.session.flush()

        logger.info(
            f"Reconciled variants for product {product.sku}: "
            f"{summary.created} created, {summary.updated} updated, {summary.deleted} deleted"
        )
        return summary
