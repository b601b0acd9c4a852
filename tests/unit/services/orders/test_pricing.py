"""Tests unitarios para el cálculo de totales de pedidos."""

from decimal import Decimal

import pytest

from app.domain.models import OrderItemDomain
from app.services.orders.pricing import PricingCalculator
from app.utils.error_handler import ErrorCode, ValidationException


@pytest.fixture
def pricing():
    return PricingCalculator()


def _line(pricing, quantity, unit_price):
    return OrderItemDomain(
        product_id="p1",
        quantity=quantity,
        unit_price=pricing.money(unit_price),
        product_name="Classic Tee",
        product_sku="SKU-TEST-0001",
    )


class TestTotals:
    """Tests para subtotal y total."""

    def test_order_total(self, pricing):
        """2 x 10.00 + 5 de envío + 1.50 de impuesto = 26.50."""
        subtotal = pricing.subtotal([_line(pricing, 2, Decimal("10.00"))])
        totals = pricing.totals(subtotal, shipping_cost=5, tax_amount=Decimal("1.50"), discount_amount=0)

        assert totals.subtotal.amount == Decimal("20.00")
        assert totals.total_amount.amount == Decimal("26.50")

    def test_adjustments_default_to_zero(self, pricing):
        totals = pricing.totals(pricing.money("12.34"))

        assert totals.total_amount.amount == Decimal("12.34")
        assert totals.discount_amount.is_zero

    def test_subtotal_sums_submitted_prices(self, pricing):
        lines = [_line(pricing, 1, "9.99"), _line(pricing, 3, "0.335")]
        # 0.335 se redondea a 0.34 antes de multiplicar
        assert pricing.subtotal(lines).amount == Decimal("11.01")

    def test_negative_total_rejected(self, pricing):
        with pytest.raises(ValidationException) as exc_info:
            pricing.totals(pricing.money("10.00"), shipping_cost=1, discount_amount=Decimal("11.01"))

        assert exc_info.value.error_code == ErrorCode.NEGATIVE_TOTAL
        assert exc_info.value.status_code == 400

    def test_discount_equal_to_gross_gives_zero(self, pricing):
        totals = pricing.totals(pricing.money("10.00"), discount_amount=10)
        assert totals.total_amount.is_zero

    def test_amount_beyond_decimal_precision_rejected(self, pricing):
        with pytest.raises(ValidationException) as exc_info:
            pricing.totals(pricing.money("10.00"), shipping_cost="1e30")

        assert exc_info.value.error_code == ErrorCode.INVALID_ORDER_DATA
        assert exc_info.value.status_code == 400

    def test_order_larger_than_storable_rejected(self, pricing):
        subtotal = pricing.subtotal([_line(pricing, 1000, "999999.99")] * 11)

        with pytest.raises(ValidationException) as exc_info:
            pricing.totals(subtotal)

        assert exc_info.value.field == "subtotal"
        assert exc_info.value.error_code == ErrorCode.INVALID_ORDER_DATA

    def test_largest_storable_total_accepted(self, pricing):
        totals = pricing.totals(pricing.money("9999999999.98"), shipping_cost="0.01")
        assert totals.total_amount.amount == Decimal("9999999999.99")


class TestRecompute:
    """Tests para el recálculo tras editar ajustes."""

    def test_discount_update_keeps_stored_values(self, pricing):
        current = pricing.from_stored(Decimal("20.00"), Decimal("5.00"), Decimal("1.50"), Decimal("0.00"))

        totals = pricing.recompute(current, discount_amount=Decimal("5.00"))

        assert totals.subtotal.amount == Decimal("20.00")
        assert totals.shipping_cost.amount == Decimal("5.00")
        assert totals.tax_amount.amount == Decimal("1.50")
        assert totals.total_amount.amount == Decimal("21.50")

    def test_explicit_zero_overrides_stored_value(self, pricing):
        current = pricing.from_stored("20.00", "5.00", "1.50", "0")

        totals = pricing.recompute(current, shipping_cost=0)

        assert totals.total_amount.amount == Decimal("21.50")

    def test_recompute_rejects_negative_total(self, pricing):
        current = pricing.from_stored("20.00", "0", "0", "0")

        with pytest.raises(ValidationException):
            pricing.recompute(current, discount_amount="25.00")
