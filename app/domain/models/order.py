"""
Order domain model (Aggregate Root).

Represents an order with its lifecycle enumerations, line items and
monetary totals.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any

from app.domain.value_objects.money import Money

from .order_item import OrderItemDomain


class OrderStatus(str, Enum):
    """Fulfilment state of an order."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentStatus(str, Enum):
    """Payment state, independent of the fulfilment status."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(str, Enum):
    CARD = "CARD"
    PAYPAL = "PAYPAL"
    APPLE_PAY = "APPLE_PAY"
    GOOGLE_PAY = "GOOGLE_PAY"


# Allowed forward moves when the transition guard is enabled.
# CANCELLED and REFUNDED are terminal.
STATUS_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.REFUNDED}),
    OrderStatus.DELIVERED: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}


def can_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """
    Check whether an order may move from ``current`` to ``new``.

    Re-writing the current status is always allowed.
    """
    if current == new:
        return True
    return new in STATUS_TRANSITIONS[current]


@dataclass(frozen=True)
class OrderTotals:
    """
    Monetary fields of an order.

    Attributes:
        subtotal: Sum of line totals at creation time
        shipping_cost: Shipping adjustment
        tax_amount: Tax adjustment
        discount_amount: Discount subtracted from the total
        total_amount: subtotal + shipping + tax - discount
    """

    subtotal: Money
    shipping_cost: Money
    tax_amount: Money
    discount_amount: Money
    total_amount: Money

    def __post_init__(self) -> None:
        expected = self.subtotal + self.shipping_cost + self.tax_amount
        if expected.amount - self.discount_amount.amount != self.total_amount.amount:
            raise ValueError(
                f"Inconsistent totals: {self.subtotal} + {self.shipping_cost} + {self.tax_amount} "
                f"- {self.discount_amount} != {self.total_amount}"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "subtotal": self.subtotal.amount,
            "shipping_cost": self.shipping_cost.amount,
            "tax_amount": self.tax_amount.amount,
            "discount_amount": self.discount_amount.amount,
            "total_amount": self.total_amount.amount,
        }


@dataclass
class OrderDomain:
    """
    Domain model representing an order (Aggregate Root).

    Attributes:
        order_number: Human-shareable unique order number
        client_id: Ordering client
        shipping_address_id: Shipping address reference
        billing_address_id: Billing address reference
        totals: Monetary fields
        items: Line items (at least one)
        status: Fulfilment status
        payment_status: Payment status
        payment_method: Optional payment method
        notes: Optional free-text notes
    """

    order_number: str
    client_id: str
    shipping_address_id: str
    billing_address_id: str
    totals: OrderTotals
    items: list[OrderItemDomain] = field(default_factory=list)
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod | None = None
    notes: str | None = None

    def __post_init__(self) -> None:
        """Validate order data after initialization."""
        if not self.order_number:
            raise ValueError("Order number is required")

        if not self.items:
            raise ValueError("An order needs at least one item")

        line_sum = sum((item.total_price.amount for item in self.items), Decimal("0"))
        if line_sum != self.totals.subtotal.amount:
            raise ValueError(f"Subtotal {self.totals.subtotal.amount} does not match line items {line_sum}")

    @property
    def items_count(self) -> int:
        """Get total number of line items."""
        return len(self.items)

    @property
    def total_quantity(self) -> int:
        """Get total quantity of all items."""
        return sum(item.quantity for item in self.items)

    def to_dict(self) -> dict[str, Any]:
        """Convert order header to dictionary for persistence."""
        return {
            "order_number": self.order_number,
            "client_id": self.client_id,
            "shipping_address_id": self.shipping_address_id,
            "billing_address_id": self.billing_address_id,
            "status": self.status,
            "payment_status": self.payment_status,
            "payment_method": self.payment_method,
            "notes": self.notes,
            **self.totals.to_dict(),
        }
