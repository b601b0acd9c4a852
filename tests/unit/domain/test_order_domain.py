"""Tests unitarios para el agregado de pedido y sus líneas."""

from decimal import Decimal

import pytest

from app.domain.models import (
    OrderDomain,
    OrderItemDomain,
    OrderStatus,
    OrderTotals,
    VariantInfo,
    can_transition,
)
from app.domain.value_objects import Money


def _item(quantity=2, unit_price="10.00", **kwargs) -> OrderItemDomain:
    return OrderItemDomain(
        product_id="p1",
        quantity=quantity,
        unit_price=Money.of(unit_price),
        product_name="Classic Tee",
        product_sku="SKU-TEST-0001",
        **kwargs,
    )


def _totals(subtotal="20.00", shipping="5.00", tax="1.50", discount="0", total="26.50") -> OrderTotals:
    return OrderTotals(
        subtotal=Money.of(subtotal),
        shipping_cost=Money.of(shipping),
        tax_amount=Money.of(tax),
        discount_amount=Money.of(discount),
        total_amount=Money.of(total),
    )


class TestOrderItemDomain:
    def test_total_price(self):
        assert _item().total_price.amount == Decimal("20.00")

    def test_quantity_must_be_positive(self):
        with pytest.raises(ValueError):
            _item(quantity=0)

    def test_variant_id_requires_variant_info(self):
        with pytest.raises(ValueError):
            _item(variant_id="v1")

    def test_to_dict_snapshot(self):
        item = _item(variant_id="v1", variant_info=VariantInfo(size="M", color="blue", color_hex="#3b82f6"))
        data = item.to_dict()

        assert data["total_price"] == Decimal("20.00")
        assert data["variant_info"] == {"size": "M", "color": "blue", "colorHex": "#3b82f6"}


class TestOrderTotals:
    def test_consistent_totals(self):
        assert _totals().total_amount.amount == Decimal("26.50")

    def test_inconsistent_totals_rejected(self):
        with pytest.raises(ValueError):
            _totals(total="30.00")


class TestOrderDomain:
    def test_subtotal_must_match_lines(self):
        with pytest.raises(ValueError):
            OrderDomain(
                order_number="ORD-1",
                client_id="c1",
                shipping_address_id="a1",
                billing_address_id="a2",
                totals=_totals(subtotal="25.00", total="31.50"),
                items=[_item()],
            )

    def test_needs_items(self):
        with pytest.raises(ValueError):
            OrderDomain(
                order_number="ORD-1",
                client_id="c1",
                shipping_address_id="a1",
                billing_address_id="a2",
                totals=_totals(),
                items=[],
            )

    def test_defaults(self):
        order = OrderDomain(
            order_number="ORD-1",
            client_id="c1",
            shipping_address_id="a1",
            billing_address_id="a2",
            totals=_totals(),
            items=[_item()],
        )

        assert order.status == OrderStatus.PENDING
        assert order.total_quantity == 2
        assert order.to_dict()["total_amount"] == Decimal("26.50")


class TestStatusTransitions:
    """Tests para la tabla de transiciones de estado."""

    def test_forward_moves(self):
        assert can_transition(OrderStatus.PENDING, OrderStatus.CONFIRMED)
        assert can_transition(OrderStatus.SHIPPED, OrderStatus.DELIVERED)
        assert can_transition(OrderStatus.DELIVERED, OrderStatus.REFUNDED)

    def test_backward_move_not_allowed(self):
        assert not can_transition(OrderStatus.DELIVERED, OrderStatus.PENDING)

    def test_terminal_states(self):
        for status in OrderStatus:
            if status != OrderStatus.CANCELLED:
                assert not can_transition(OrderStatus.CANCELLED, status)

    def test_same_status_always_allowed(self):
        for status in OrderStatus:
            assert can_transition(status, status)
