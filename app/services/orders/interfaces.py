"""
Interfaces/Protocols for order services (Dependency Inversion Principle).

These protocols define contracts that services must implement,
allowing for loose coupling and easy testing.
"""

from typing import Protocol, Sequence

from app.api.v1.schemas.order_schemas import OrderCreate, OrderItemInput
from app.domain.models import OrderStatus
from app.services.orders.resolvers import OrderReferences, ResolvedLine


class IOrderValidator(Protocol):
    """Protocol for order validation services."""

    def validate_create(self, payload: OrderCreate) -> OrderCreate:
        """Validate an order creation payload."""
        ...

    def validate_status_change(self, current: OrderStatus, new: OrderStatus | None) -> None:
        """Reject a status move that is not allowed."""
        ...


class IReferenceResolver(Protocol):
    """Protocol for client/address resolution services."""

    async def resolve(self, client_id: str, shipping_address_id: str, billing_address_id: str) -> OrderReferences:
        """Load the referenced client and addresses."""
        ...


class ILineItemResolver(Protocol):
    """Protocol for product/variant resolution of order lines."""

    async def resolve(self, items: Sequence[OrderItemInput]) -> list[ResolvedLine]:
        """Resolve every line of an order."""
        ...
