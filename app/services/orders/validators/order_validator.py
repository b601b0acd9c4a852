"""
OrderValidator service for order payloads and status changes.

Checks run before any read or write of the order so that an invalid
request never leaves partial state behind.
"""

import logging
from typing import Optional

from app.api.v1.schemas.order_schemas import OrderCreate
from app.domain.models import OrderStatus, can_transition
from app.utils.error_handler import ErrorCode, ValidationException

logger = logging.getLogger(__name__)


class OrderValidator:
    """
    Validates order payloads and lifecycle moves.

    Responsibilities:
    - Validate required references and line items
    - Guard status transitions when enforcement is enabled
    """

    def __init__(self, enforce_status_transitions: bool = False):
        """
        Args:
            enforce_status_transitions: Reject moves outside the transition
                table. When False any status may be written at any time.
        """
        self.enforce_status_transitions = enforce_status_transitions

    def validate_create(self, payload: OrderCreate) -> OrderCreate:
        """
        Validates an order creation payload.

        Returns:
            OrderCreate: The same payload when valid

        Raises:
            ValidationException: If a required field is missing or a line is invalid
        """
        self._validate_required_fields(payload)
        self._validate_items(payload)
        logger.debug(f"Order payload for client {payload.client_id} passed validation ({len(payload.items)} items)")
        return payload

    def _validate_required_fields(self, payload: OrderCreate) -> None:
        for field, value in (
            ("clientId", payload.client_id),
            ("shippingAddressId", payload.shipping_address_id),
            ("billingAddressId", payload.billing_address_id),
        ):
            if not value:
                raise ValidationException(
                    message=f"Missing required field: {field}",
                    field=field,
                    error_code=ErrorCode.INVALID_ORDER_DATA,
                )

        if not payload.items:
            raise ValidationException(
                message="An order needs at least one item",
                field="items",
                invalid_value=[],
                error_code=ErrorCode.INVALID_ORDER_DATA,
            )

    def _validate_items(self, payload: OrderCreate) -> None:
        for index, item in enumerate(payload.items):
            if not item.product_id:
                raise ValidationException(
                    message="Item has no product",
                    field=f"items[{index}].productId",
                    error_code=ErrorCode.INVALID_ORDER_DATA,
                )
            if item.quantity < 1:
                raise ValidationException(
                    message="Item quantity must be at least 1",
                    field=f"items[{index}].quantity",
                    invalid_value=item.quantity,
                    expected_format="integer >= 1",
                    error_code=ErrorCode.INVALID_ORDER_DATA,
                )
            if item.unit_price < 0:
                raise ValidationException(
                    message="Item unit price cannot be negative",
                    field=f"items[{index}].unitPrice",
                    invalid_value=item.unit_price,
                    error_code=ErrorCode.INVALID_ORDER_DATA,
                )

    def validate_status_change(self, current: OrderStatus, new: Optional[OrderStatus]) -> None:
        """
        Check a status change against the transition table.

        Raises:
            ValidationException: If enforcement is on and the move is not allowed
        """
        if new is None or not self.enforce_status_transitions:
            return

        if not can_transition(current, new):
            raise ValidationException(
                message=f"Cannot move order from {current.value} to {new.value}",
                field="status",
                invalid_value=new.value,
                expected_format=f"transition allowed from {current.value}",
                error_code=ErrorCode.INVALID_STATUS_TRANSITION,
            )
