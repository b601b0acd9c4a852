"""
Integration tests for the order endpoints.

Covers totals, the catalog snapshot of every line, atomic creation and the
optional status guard.
"""

import pytest
from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.orders import get_order_composer
from app.core.config import Settings
from app.db.connection import get_db_session
from app.db.models import Order, OrderItem
from app.main import app
from app.services.orders import create_order_composer
from tests.factories import order_payload, product_payload


def order_composer_with(settings: Settings):
    async def dependency(session: AsyncSession = Depends(get_db_session)):
        return create_order_composer(session, settings=settings)

    return dependency


async def _count(session, model) -> int:
    return (await session.execute(select(func.count()).select_from(model))).scalar_one()


@pytest.fixture
async def product(client, seed) -> dict:
    response = await client.post("/api/v1/products", json=product_payload(seed))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
async def order(client, seed, product) -> dict:
    """Pedido de 2 x 10.00 con 5 de envío y 1.50 de impuesto."""
    items = [{"productId": product["id"], "quantity": 2, "unitPrice": "10.00"}]
    payload = order_payload(seed, items, shippingCost=5, taxAmount="1.50", discountAmount=0)
    response = await client.post("/api/v1/orders", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateOrder:
    """Test suite for order creation."""

    async def test_totals(self, order):
        assert order["subtotal"] == 20.0
        assert order["shippingCost"] == 5.0
        assert order["taxAmount"] == 1.5
        assert order["discountAmount"] == 0.0
        assert order["totalAmount"] == 26.5

    async def test_initial_state(self, order, seed):
        assert order["status"] == "PENDING"
        assert order["paymentStatus"] == "PENDING"
        assert order["orderNumber"].startswith("ORD-")
        assert order["client"]["lastName"] == "Mora"
        assert order["shippingAddress"]["city"] == "San José"
        assert order["billingAddress"]["city"] == "Heredia"

    async def test_line_snapshot(self, order, product):
        item = order["items"][0]

        assert item["productName"] == "Classic Tee"
        assert item["productSku"] == product["sku"]
        assert item["unitPrice"] == 10.0
        assert item["totalPrice"] == 20.0
        assert item["variantId"] is None
        assert item["variantInfo"] is None
        assert item["product"]["id"] == product["id"]

    async def test_variant_snapshot(self, client, seed, product):
        variant = next(v for v in product["variants"] if v["size"] == "M")
        items = [{"productId": product["id"], "variantId": variant["id"], "quantity": 1, "unitPrice": "19.99"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items))

        item = response.json()["items"][0]
        assert response.status_code == 201
        assert item["variantId"] == variant["id"]
        assert item["variantInfo"] == {"size": "M", "color": "blue", "colorHex": "#3b82f6"}
        assert item["variant"]["size"] == "M"

    async def test_submitted_price_is_kept(self, client, seed, product):
        """El precio de la línea es el enviado, no el del catálogo."""
        items = [{"productId": product["id"], "quantity": 3, "unitPrice": "7.25"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items))

        assert response.json()["subtotal"] == 21.75
        assert response.json()["totalAmount"] == 21.75

    async def test_snake_case_payload(self, client, seed, product):
        payload = {
            "client_id": seed.client_id,
            "shipping_address_id": seed.address_id,
            "billing_address_id": seed.address_id,
            "items": [{"product_id": product["id"], "quantity": 1, "unit_price": "5"}],
        }

        response = await client.post("/api/v1/orders", json=payload)

        assert response.status_code == 201
        assert response.json()["billingAddressId"] == seed.address_id

    async def test_missing_product_writes_nothing(self, client, seed, product, db_session):
        """Si falla la tercera de cinco líneas no queda ningún pedido ni línea."""
        items = [{"productId": product["id"], "quantity": 1, "unitPrice": "1"} for _ in range(5)]
        items[2]["productId"] = "missing-product"

        response = await client.post("/api/v1/orders", json=order_payload(seed, items))

        body = response.json()
        assert response.status_code == 400
        assert body["error_code"] == "INVALID_REFERENCE"
        assert body["resource"] == "product"
        assert await _count(db_session, Order) == 0
        assert await _count(db_session, OrderItem) == 0

    async def test_missing_client(self, client, seed, product):
        items = [{"productId": product["id"], "quantity": 1, "unitPrice": "1"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items, clientId="ghost"))

        assert response.status_code == 400
        assert response.json()["resource"] == "client"

    async def test_missing_address(self, client, seed, product):
        items = [{"productId": product["id"], "quantity": 1, "unitPrice": "1"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items, billingAddressId="ghost"))

        assert response.status_code == 400
        assert response.json()["resource"] == "address"

    async def test_missing_variant_is_tolerated(self, client, seed, product):
        items = [{"productId": product["id"], "variantId": "gone", "quantity": 1, "unitPrice": "4"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items))

        item = response.json()["items"][0]
        assert response.status_code == 201
        assert item["variantId"] is None
        assert item["variantInfo"] is None

    async def test_missing_variant_strict(self, client, seed, product, db_session):
        app.dependency_overrides[get_order_composer] = order_composer_with(Settings(STRICT_VARIANT_LOOKUP=True))
        items = [{"productId": product["id"], "variantId": "gone", "quantity": 1, "unitPrice": "4"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items))

        assert response.status_code == 400
        assert response.json()["resource"] == "variant"
        assert await _count(db_session, Order) == 0

    async def test_discount_above_total(self, client, seed, product):
        items = [{"productId": product["id"], "quantity": 1, "unitPrice": "10"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items, discountAmount="15"))

        assert response.status_code == 400
        assert response.json()["error_code"] == "NEGATIVE_TOTAL"

    async def test_zero_quantity(self, client, seed, product):
        items = [{"productId": product["id"], "quantity": 0, "unitPrice": "10"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items))

        body = response.json()
        assert response.status_code == 400
        assert body["errors"][0]["field"] == "items.0.quantity"

    async def test_empty_items(self, client, seed):
        response = await client.post("/api/v1/orders", json=order_payload(seed, []))
        assert response.status_code == 400

    async def test_oversized_shipping_cost(self, client, seed, product, db_session):
        items = [{"productId": product["id"], "quantity": 1, "unitPrice": "10"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items, shippingCost="1e30"))

        body = response.json()
        assert response.status_code == 400
        assert [error["field"] for error in body["errors"]] == ["shippingCost"]
        assert await _count(db_session, Order) == 0

    async def test_oversized_quantity(self, client, seed, product):
        items = [{"productId": product["id"], "quantity": 10**27, "unitPrice": "10"}]

        response = await client.post("/api/v1/orders", json=order_payload(seed, items))

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "items.0.quantity"


class TestUpdateOrder:
    """Test suite for partial order updates."""

    async def test_discount_recomputes_total(self, client, order):
        response = await client.put(f"/api/v1/orders/{order['id']}", json={"discountAmount": "5.00"})

        body = response.json()
        assert response.status_code == 200
        assert body["subtotal"] == 20.0
        assert body["shippingCost"] == 5.0
        assert body["discountAmount"] == 5.0
        assert body["totalAmount"] == 21.5

    async def test_negative_total_rejected(self, client, order):
        response = await client.put(f"/api/v1/orders/{order['id']}", json={"discountAmount": "30"})

        assert response.status_code == 400
        assert response.json()["error_code"] == "NEGATIVE_TOTAL"

    async def test_oversized_tax_rejected(self, client, order):
        response = await client.put(f"/api/v1/orders/{order['id']}", json={"taxAmount": "1000000"})

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "taxAmount"

    async def test_notes_and_payment(self, client, order):
        response = await client.put(
            f"/api/v1/orders/{order['id']}",
            json={"notes": "Leave at the door", "paymentStatus": "COMPLETED", "paymentMethod": "CARD"},
        )

        body = response.json()
        assert body["notes"] == "Leave at the door"
        assert body["paymentStatus"] == "COMPLETED"
        assert body["paymentMethod"] == "CARD"
        assert body["totalAmount"] == 26.5

    async def test_any_status_by_default(self, client, order):
        response = await client.put(f"/api/v1/orders/{order['id']}", json={"status": "DELIVERED"})

        assert response.status_code == 200
        assert response.json()["status"] == "DELIVERED"

    async def test_enforced_status_transitions(self, client, order):
        app.dependency_overrides[get_order_composer] = order_composer_with(
            Settings(ENFORCE_ORDER_STATUS_TRANSITIONS=True)
        )

        confirmed = await client.put(f"/api/v1/orders/{order['id']}", json={"status": "CONFIRMED"})
        back = await client.put(f"/api/v1/orders/{order['id']}", json={"status": "PENDING"})

        assert confirmed.status_code == 200
        assert back.status_code == 400
        assert back.json()["error_code"] == "INVALID_STATUS_TRANSITION"

    async def test_unknown_status_value(self, client, order):
        response = await client.put(f"/api/v1/orders/{order['id']}", json={"status": "LOST"})
        assert response.status_code == 400

    async def test_unknown_order(self, client, seed):
        response = await client.put("/api/v1/orders/unknown", json={"notes": "x"})

        assert response.status_code == 404
        assert response.json()["resource"] == "order"


class TestReadAndDeleteOrder:
    async def test_get(self, client, order):
        response = await client.get(f"/api/v1/orders/{order['id']}")

        assert response.status_code == 200
        assert response.json()["orderNumber"] == order["orderNumber"]

    async def test_delete(self, client, order, db_session):
        response = await client.delete(f"/api/v1/orders/{order['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Order deleted successfully"}
        assert (await client.get(f"/api/v1/orders/{order['id']}")).status_code == 404
        assert await _count(db_session, OrderItem) == 0

    async def test_delete_unknown(self, client, seed):
        assert (await client.delete("/api/v1/orders/unknown")).status_code == 404

    async def test_product_deletion_keeps_snapshot(self, client, order, product):
        await client.delete(f"/api/v1/products/{product['id']}")

        response = await client.get(f"/api/v1/orders/{order['id']}")

        item = response.json()["items"][0]
        assert item["productId"] is None
        assert item["product"] is None
        assert item["productName"] == "Classic Tee"
        assert item["productSku"] == product["sku"]

    async def test_list_filters(self, client, order, seed):
        by_client = await client.get("/api/v1/orders", params={"clientId": seed.client_id})
        by_status = await client.get("/api/v1/orders", params={"status": "SHIPPED"})
        by_name = await client.get("/api/v1/orders", params={"search": "mora"})
        by_number = await client.get("/api/v1/orders", params={"search": order["orderNumber"]})

        assert [o["id"] for o in by_client.json()["orders"]] == [order["id"]]
        assert by_status.json()["orders"] == []
        assert len(by_name.json()["orders"]) == 1
        assert len(by_number.json()["orders"]) == 1
