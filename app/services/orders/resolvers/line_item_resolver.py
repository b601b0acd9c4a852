"""
LineItemResolver service - product and variant lookup for order lines.

Every product of the order is checked before anything is written: one
missing product rejects the whole order. Variant lookups have three
outcomes so that callers can tell a line without variant from a line
whose variant could not be found.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

from app.api.v1.schemas.order_schemas import OrderItemInput
from app.db.models import Product, ProductVariant
from app.db.repositories import ProductRepository
from app.utils.error_handler import ErrorCode, NotFoundException

logger = logging.getLogger(__name__)


class VariantLookup(str, Enum):
    """Outcome of the variant lookup of one line."""

    FOUND = "FOUND"
    MISSING = "MISSING"
    NOT_REQUESTED = "NOT_REQUESTED"


@dataclass(frozen=True)
class ResolvedLine:
    """
    An order line with its current catalog rows.

    Attributes:
        item: Submitted line
        product: Referenced product
        variant: Referenced variant, only when the lookup was FOUND
        lookup: Outcome of the variant lookup
    """

    item: OrderItemInput
    product: Product
    variant: Optional[ProductVariant]
    lookup: VariantLookup


class LineItemResolver:
    """Resolves submitted order lines against the catalog."""

    def __init__(self, product_repo: ProductRepository, strict_variant_lookup: bool = False):
        """
        Args:
            product_repo: Repository for products and variants
            strict_variant_lookup: Reject the order when a requested variant
                is missing instead of dropping the variant from the line
        """
        self.product_repo = product_repo
        self.strict_variant_lookup = strict_variant_lookup

    async def resolve(self, items: Sequence[OrderItemInput]) -> list[ResolvedLine]:
        """
        Resolve every line of an order.

        Raises:
            NotFoundException: A product is missing, or a variant is missing
                in strict mode (status 400)
        """
        products = await self.product_repo.get_many([item.product_id for item in items])
        variants = await self.product_repo.get_variants([item.variant_id for item in items if item.variant_id])

        lines = []
        for index, item in enumerate(items):
            product = products.get(item.product_id)
            if product is None:
                logger.warning(f"Order rejected: product {item.product_id} (line {index + 1}) not found")
                raise NotFoundException(
                    resource="product",
                    resource_id=item.product_id,
                    error_code=ErrorCode.INVALID_REFERENCE,
                    status_code=400,
                    details={"line": index},
                )
            lines.append(self._with_variant(index, item, product, variants))
        return lines

    def _with_variant(
        self, index: int, item: OrderItemInput, product: Product, variants: dict[str, ProductVariant]
    ) -> ResolvedLine:
        if not item.variant_id:
            return ResolvedLine(item=item, product=product, variant=None, lookup=VariantLookup.NOT_REQUESTED)

        variant = variants.get(item.variant_id)
        # A variant of another product is not a variant of this line.
        if variant is not None and variant.product_id == product.id:
            return ResolvedLine(item=item, product=product, variant=variant, lookup=VariantLookup.FOUND)

        if self.strict_variant_lookup:
            raise NotFoundException(
                resource="variant",
                resource_id=item.variant_id,
                error_code=ErrorCode.INVALID_REFERENCE,
                status_code=400,
                details={"line": index, "product_id": product.id},
            )

        logger.warning(
            f"Variant {item.variant_id} not found for product {product.id} (line {index + 1}); "
            "line kept without variant"
        )
        return ResolvedLine(item=item, product=product, variant=None, lookup=VariantLookup.MISSING)
