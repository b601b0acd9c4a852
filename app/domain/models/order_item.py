"""
Order Item (Line Item) domain model.

Represents a line of an order with its write-once catalog snapshot.
"""

from dataclasses import dataclass
from typing import Any

from app.domain.value_objects.money import Money


@dataclass(frozen=True)
class VariantInfo:
    """
    Snapshot of the selected variant at order time.

    Attributes:
        size: Variant size, if any
        color: Variant color name, if any
        color_hex: Display hex code of the color, if any
    """

    size: str | None = None
    color: str | None = None
    color_hex: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"size": self.size, "color": self.color, "colorHex": self.color_hex}


@dataclass(frozen=True)
class OrderItemDomain:
    """
    Domain model representing an order line item.

    Prices are the submitted unit prices, not the live product price.
    The snapshot fields (name, sku, variant info) are captured once when
    the line is composed and never recomputed from the catalog.

    Attributes:
        product_id: Referenced product
        quantity: Units ordered (>= 1)
        unit_price: Price per unit at order time
        product_name: Product name snapshot
        product_sku: Product SKU snapshot
        variant_id: Referenced variant, when one was resolved
        variant_info: Variant descriptor snapshot, when one was resolved
    """

    product_id: str
    quantity: int
    unit_price: Money
    product_name: str
    product_sku: str
    variant_id: str | None = None
    variant_info: VariantInfo | None = None

    def __post_init__(self) -> None:
        """Validate line item data after initialization."""
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError(f"Quantity must be a positive integer: {self.quantity}")

        if not self.product_id:
            raise ValueError("Product id is required")

        if (self.variant_id is None) != (self.variant_info is None):
            raise ValueError("Variant id and variant info must be set together")

    @property
    def total_price(self) -> Money:
        """Line total (unit price x quantity)."""
        return self.unit_price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        """Convert line item to dictionary for persistence."""
        return {
            "product_id": self.product_id,
            "variant_id": self.variant_id,
            "quantity": self.quantity,
            "unit_price": self.unit_price.amount,
            "total_price": self.total_price.amount,
            "product_name": self.product_name,
            "product_sku": self.product_sku,
            "variant_info": self.variant_info.to_dict() if self.variant_info else None,
        }
