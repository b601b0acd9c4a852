"""
PricingCalculator - monetary totals of an order.

Amounts are fixed-point Money values rounded half-up to the configured
number of decimal places:

    subtotal = sum(unit_price * quantity)   (submitted prices)
    total    = subtotal + shipping + tax - discount

On update the stored subtotal is kept and the adjustments are merged:
a submitted value overrides the stored one, an omitted value keeps it.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional, Union

from app.domain.models import OrderItemDomain, OrderTotals
from app.domain.value_objects import MAX_STORED_AMOUNT, Money
from app.utils.error_handler import ErrorCode, ValidationException

logger = logging.getLogger(__name__)

Amount = Union[Decimal, int, str, None]


class PricingCalculator:
    """Computes and recomputes order totals."""

    def __init__(self, currency: str = "USD", places: int = 2):
        self.currency = currency
        self.places = places

    def money(self, value: Amount) -> Money:
        """
        Raises:
            ValidationException: If the value cannot be held as a fixed-point amount
        """
        try:
            return Money.of(value, currency=self.currency, places=self.places)
        except InvalidOperation as e:
            raise ValidationException(
                message="Amount out of range",
                field="amount",
                invalid_value=value,
                expected_format=f"<= {MAX_STORED_AMOUNT}",
                error_code=ErrorCode.INVALID_ORDER_DATA,
            ) from e

    def subtotal(self, items: Iterable[OrderItemDomain]) -> Money:
        """Sum of line totals."""
        result = Money.zero(self.currency, self.places)
        for item in items:
            result = result + item.total_price
        return result

    def totals(
        self,
        subtotal: Money,
        shipping_cost: Amount = None,
        tax_amount: Amount = None,
        discount_amount: Amount = None,
    ) -> OrderTotals:
        """
        Build the totals of an order; omitted adjustments count as zero.

        Raises:
            ValidationException: If the discount exceeds the rest of the order,
                or the order is larger than a stored amount can hold
        """
        shipping = self.money(shipping_cost)
        tax = self.money(tax_amount)
        discount = self.money(discount_amount)

        gross = subtotal + shipping + tax
        if gross.amount > MAX_STORED_AMOUNT:
            raise ValidationException(
                message="Order amounts exceed the storable maximum",
                field="subtotal",
                invalid_value=gross.amount,
                expected_format=f"<= {MAX_STORED_AMOUNT}",
                error_code=ErrorCode.INVALID_ORDER_DATA,
            )
        if discount.amount > gross.amount:
            raise ValidationException(
                message="Order total cannot be negative",
                field="discountAmount",
                invalid_value=discount.amount,
                expected_format=f"<= {gross.amount}",
                error_code=ErrorCode.NEGATIVE_TOTAL,
            )

        return OrderTotals(
            subtotal=subtotal,
            shipping_cost=shipping,
            tax_amount=tax,
            discount_amount=discount,
            total_amount=gross - discount,
        )

    def recompute(
        self,
        current: OrderTotals,
        shipping_cost: Optional[Amount] = None,
        tax_amount: Optional[Amount] = None,
        discount_amount: Optional[Amount] = None,
    ) -> OrderTotals:
        """
        Re-derive the totals of a stored order after an adjustment change.

        Args:
            current: Totals currently stored on the order
            shipping_cost: New shipping cost, or None to keep the stored one
            tax_amount: New tax amount, or None to keep the stored one
            discount_amount: New discount, or None to keep the stored one
        """
        totals = self.totals(
            current.subtotal,
            shipping_cost=current.shipping_cost.amount if shipping_cost is None else shipping_cost,
            tax_amount=current.tax_amount.amount if tax_amount is None else tax_amount,
            discount_amount=current.discount_amount.amount if discount_amount is None else discount_amount,
        )
        logger.debug(f"Recomputed total {current.total_amount} -> {totals.total_amount}")
        return totals

    def from_stored(
        self,
        subtotal: Amount,
        shipping_cost: Amount,
        tax_amount: Amount,
        discount_amount: Amount,
    ) -> OrderTotals:
        """Rebuild totals from stored columns; the total is derived again."""
        return self.totals(self.money(subtotal), shipping_cost, tax_amount, discount_amount)
