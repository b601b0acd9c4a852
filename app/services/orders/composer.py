"""
OrderComposer - order creation, edition and lookup.

Coordinates the order services inside the request transaction:
- OrderValidator: payload shape and status moves
- ReferenceResolver: client and addresses
- LineItemResolver: products and variants of every line
- PricingCalculator: subtotal and totals
- OrderRepository: persistence of the header and its items

Every check runs before the first write, and the header and all items are
flushed together, so a failed order leaves no rows behind.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from app.api.v1.schemas.order_schemas import OrderCreate, OrderFilters, OrderUpdate
from app.db.models import Order
from app.db.repositories import OrderRepository
from app.services.orders.factories import OrderFactory
from app.services.orders.interfaces import ILineItemResolver, IOrderValidator, IReferenceResolver
from app.services.orders.pricing import PricingCalculator
from app.services.orders.resolvers import VariantLookup
from app.utils.error_handler import ConflictException, NotFoundException, is_unique_violation
from app.utils.id_utils import IdentifierGenerator, generate_unique

logger = logging.getLogger(__name__)

AMOUNT_FIELDS = ("shipping_cost", "tax_amount", "discount_amount")


class OrderComposer:
    """
    Assembles orders from cart-like item lists.

    Each collaborator is injected via constructor so that toggles and
    identifier generation can be replaced in tests.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        validator: IOrderValidator,
        reference_resolver: IReferenceResolver,
        line_resolver: ILineItemResolver,
        pricing: PricingCalculator,
        id_generator: IdentifierGenerator,
        max_identifier_attempts: int = 3,
        factory: OrderFactory | None = None,
    ):
        """
        Initialize composer with service dependencies (DIP).

        Args:
            order_repo: Repository for orders and items
            validator: Service for payload and status validation
            reference_resolver: Service for client/address resolution
            line_resolver: Service for product/variant resolution
            pricing: Totals calculator
            id_generator: Source of order numbers
            max_identifier_attempts: Order number draws before giving up
            factory: Domain object factory
        """
        self.order_repo = order_repo
        self.validator = validator
        self.reference_resolver = reference_resolver
        self.line_resolver = line_resolver
        self.pricing = pricing
        self.id_generator = id_generator
        self.max_identifier_attempts = max_identifier_attempts
        self.factory = factory or OrderFactory()

    async def create(self, payload: OrderCreate) -> Order:
        """
        Create an order with all its items.

        This method orchestrates the complete flow:
        1. Validate payload
        2. Resolve client and addresses
        3. Resolve every product and variant
        4. Compute totals
        5. Persist header and items in one flush

        Args:
            payload: Validated order payload

        Returns:
            Order: Created order with client, addresses and items loaded

        Raises:
            ValidationException: Invalid payload or negative total
            NotFoundException: Missing client, address or product (status 400)
            ConflictException: Order number collision detected on write
        """
        self.validator.validate_create(payload)
        logger.info(f"Composing order for client {payload.client_id} with {len(payload.items)} items")

        # Step 1: References
        await self.reference_resolver.resolve(
            payload.client_id, payload.shipping_address_id, payload.billing_address_id
        )

        # Step 2: Lines (all products verified before any write)
        lines = await self.line_resolver.resolve(payload.items)
        missing = sum(1 for line in lines if line.lookup == VariantLookup.MISSING)
        if missing:
            logger.warning(f"{missing} lines lost their variant reference")
        items = [self.factory.create_line(line, self.pricing) for line in lines]

        # Step 3: Totals
        totals = self.pricing.totals(
            self.pricing.subtotal(items),
            shipping_cost=payload.shipping_cost,
            tax_amount=payload.tax_amount,
            discount_amount=payload.discount_amount,
        )

        # Step 4: Persist
        order_number = await generate_unique(
            self.id_generator.order_number,
            self.order_repo.order_number_exists,
            self.max_identifier_attempts,
            "order_number",
        )
        order = self.factory.create_order(order_number, payload, totals, items)
        try:
            row = await self.order_repo.create_from_domain(order)
        except IntegrityError as e:
            if is_unique_violation(e, "order_number"):
                raise ConflictException(resource="order", field="order_number", value=order_number) from e
            raise

        logger.info(f"✅ Order created: {order_number} total={totals.total_amount} items={order.items_count}")
        return await self.order_repo.get_with_details(row.id)

    async def update(self, order_id: str, payload: OrderUpdate) -> Order:
        """
        Partially update an order.

        Items, client and addresses are immutable. Any amount field
        triggers recomputation of the total from the stored subtotal.

        Raises:
            NotFoundException: Order does not exist
            ValidationException: Disallowed status move or negative total
        """
        order = await self.order_repo.get(order_id)
        if order is None:
            raise NotFoundException(resource="order", resource_id=order_id)

        changes = payload.changes()
        values: dict[str, Any] = {}

        if changes.get("status") is not None:
            self.validator.validate_status_change(order.status, payload.status)
            values["status"] = payload.status
        if changes.get("payment_status") is not None:
            values["payment_status"] = payload.payment_status
        for key in ("payment_method", "notes"):
            if key in changes:
                values[key] = changes[key]

        adjustments = {key: changes[key] for key in AMOUNT_FIELDS if changes.get(key) is not None}
        if adjustments:
            current = self.pricing.from_stored(
                order.subtotal, order.shipping_cost, order.tax_amount, order.discount_amount
            )
            totals = self.pricing.recompute(current, **adjustments)
            values.update(totals.to_dict())

        if values:
            await self.order_repo.update(order, values)
            logger.info(f"✅ Order updated: {order.order_number} fields={sorted(values)}")

        return await self.order_repo.get_with_details(order_id)

    async def delete(self, order_id: str) -> None:
        """
        Delete an order and its items, whatever its status.

        Raises:
            NotFoundException: Order does not exist
        """
        order = await self.order_repo.get(order_id)
        if order is None:
            raise NotFoundException(resource="order", resource_id=order_id)
        order_number, status = order.order_number, order.status
        await self.order_repo.delete(order)
        logger.info(f"🗑️ Order deleted: {order_number} (status {status.value})")

    async def get(self, order_id: str) -> Order:
        order = await self.order_repo.get_with_details(order_id)
        if order is None:
            raise NotFoundException(resource="order", resource_id=order_id)
        return order

    async def list(self, filters: OrderFilters) -> list[Order]:
        return await self.order_repo.list(
            client_id=filters.client_id,
            status=filters.status,
            payment_status=filters.payment_status,
            search=filters.search,
            start_date=filters.start_date,
            end_date=filters.end_date,
        )
