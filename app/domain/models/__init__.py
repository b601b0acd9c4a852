"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .order import (
    STATUS_TRANSITIONS,
    OrderDomain,
    OrderStatus,
    OrderTotals,
    PaymentMethod,
    PaymentStatus,
    can_transition,
)
from .order_item import OrderItemDomain, VariantInfo

__all__ = [
    "OrderDomain",
    "OrderItemDomain",
    "OrderStatus",
    "OrderTotals",
    "PaymentMethod",
    "PaymentStatus",
    "STATUS_TRANSITIONS",
    "VariantInfo",
    "can_transition",
]
