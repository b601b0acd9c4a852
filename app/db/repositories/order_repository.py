"""
OrderRepository: order and order-item persistence.

Orders and their items are written through the request session, so the
header and every line are committed together or not at all.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import desc, func, or_, select
from sqlalchemy.orm import selectinload

from app.db.models import Client, Order, OrderItem
from app.db.repositories.base import BaseRepository, log_operation
from app.domain.models import OrderDomain, OrderStatus, PaymentStatus

logger = logging.getLogger(__name__)


def _with_details(stmt):
    return stmt.options(
        selectinload(Order.client),
        selectinload(Order.shipping_address),
        selectinload(Order.billing_address),
        selectinload(Order.items).selectinload(OrderItem.product),
        selectinload(Order.items).selectinload(OrderItem.variant),
    )


class OrderRepository(BaseRepository[Order]):
    """Repository for orders and order items."""

    model = Order

    @log_operation()
    async def create_from_domain(self, order: OrderDomain) -> Order:
        """
        Stage an order header with all its items and flush once.

        Args:
            order: Composed order aggregate

        Returns:
            Order: Persisted order row (associations not loaded)
        """
        row = Order(**order.to_dict())
        row.items = [OrderItem(**item.to_dict()) for item in order.items]
        self.session.add(row)
        await self.session.flush()
        logger.debug(f"Staged order {row.order_number} with {len(row.items)} items")
        return row

    @log_operation()
    async def get_with_details(self, order_id: str) -> Optional[Order]:
        """Load an order with client, addresses and items with product/variant."""
        if not order_id:
            return None
        stmt = _with_details(select(Order).where(Order.id == order_id)).execution_options(populate_existing=True)
        return (await self.session.scalars(stmt)).first()

    @log_operation()
    async def order_number_exists(self, order_number: str) -> bool:
        stmt = select(func.count()).select_from(Order).where(Order.order_number == order_number)
        return (await self.session.execute(stmt)).scalar_one() > 0

    @log_operation()
    async def list(
        self,
        client_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        search: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> list[Order]:
        """
        List orders newest first.

        Args:
            client_id: Filter by client
            status: Filter by fulfilment status
            payment_status: Filter by payment status
            search: Case-insensitive match on order number or client first/last name
            start_date: Created at or after
            end_date: Created at or before
        """
        stmt = select(Order)
        if client_id:
            stmt = stmt.where(Order.client_id == client_id)
        if status:
            stmt = stmt.where(Order.status == status)
        if payment_status:
            stmt = stmt.where(Order.payment_status == payment_status)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.join(Client, Order.client_id == Client.id).where(
                or_(
                    func.lower(Order.order_number).like(pattern),
                    func.lower(Client.first_name).like(pattern),
                    func.lower(Client.last_name).like(pattern),
                )
            )
        if start_date:
            stmt = stmt.where(Order.created_at >= start_date)
        if end_date:
            stmt = stmt.where(Order.created_at <= end_date)
        stmt = _with_details(stmt.order_by(desc(Order.created_at)))
        return list((await self.session.scalars(stmt)).all())
