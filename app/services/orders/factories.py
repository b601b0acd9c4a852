"""
OrderFactory - Factory pattern for creating domain objects (OCP).

This factory encapsulates object creation logic, making it easier
to modify without changing client code.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.schemas.order_schemas import OrderCreate
from app.core.config import Settings, get_settings
from app.db.repositories import CustomerRepository, OrderRepository, ProductRepository
from app.domain.models import OrderDomain, OrderItemDomain, OrderTotals, VariantInfo
from app.services.orders.pricing import PricingCalculator
from app.services.orders.resolvers import LineItemResolver, ReferenceResolver, ResolvedLine
from app.services.orders.validators import OrderValidator
from app.utils.colors import color_hex
from app.utils.id_utils import IdentifierGenerator, get_identifier_generator


class OrderFactory:
    """Factory for creating domain objects with proper defaults."""

    @staticmethod
    def create_line(line: ResolvedLine, pricing: PricingCalculator) -> OrderItemDomain:
        """
        Create an OrderItemDomain with its catalog snapshot.

        Args:
            line: Resolved order line
            pricing: Calculator providing the money settings

        Returns:
            OrderItemDomain: Line with product name/SKU and variant descriptor
        """
        variant = line.variant
        variant_info = None
        if variant is not None:
            variant_info = VariantInfo(
                size=variant.size,
                color=variant.color,
                color_hex=variant.color_hex or (color_hex(variant.color) if variant.color else None),
            )

        return OrderItemDomain(
            product_id=line.product.id,
            quantity=line.item.quantity,
            unit_price=pricing.money(line.item.unit_price),
            product_name=line.product.name,
            product_sku=line.product.sku,
            variant_id=variant.id if variant is not None else None,
            variant_info=variant_info,
        )

    @staticmethod
    def create_order(
        order_number: str, payload: OrderCreate, totals: OrderTotals, items: list[OrderItemDomain]
    ) -> OrderDomain:
        """Create an OrderDomain in its initial PENDING state."""
        return OrderDomain(
            order_number=order_number,
            client_id=payload.client_id,
            shipping_address_id=payload.shipping_address_id,
            billing_address_id=payload.billing_address_id,
            totals=totals,
            items=items,
            payment_method=payload.payment_method,
            notes=payload.notes,
        )


def create_order_composer(
    session: AsyncSession,
    settings: Optional[Settings] = None,
    id_generator: Optional[IdentifierGenerator] = None,
):
    """
    Build an OrderComposer wired to the given request session.

    Args:
        session: Session (and transaction) of the current request
        settings: Settings to read toggles from (defaults to the global ones)
        id_generator: Identifier generator (defaults to timestamp + random)
    """
    from app.services.orders.composer import OrderComposer

    settings = settings or get_settings()
    product_repo = ProductRepository(session)
    return OrderComposer(
        order_repo=OrderRepository(session),
        validator=OrderValidator(enforce_status_transitions=settings.ENFORCE_ORDER_STATUS_TRANSITIONS),
        reference_resolver=ReferenceResolver(CustomerRepository(session)),
        line_resolver=LineItemResolver(product_repo, strict_variant_lookup=settings.STRICT_VARIANT_LOOKUP),
        pricing=PricingCalculator(currency=settings.CURRENCY, places=settings.MONEY_DECIMAL_PLACES),
        id_generator=id_generator or get_identifier_generator(),
        max_identifier_attempts=settings.IDENTIFIER_MAX_ATTEMPTS,
    )
