"""Tests unitarios para LineItemResolver y ReferenceResolver."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from app.api.v1.schemas.order_schemas import OrderItemInput
from app.db.models import Address, Client, Product, ProductVariant
from app.services.orders.resolvers import LineItemResolver, ReferenceResolver, VariantLookup
from app.utils.error_handler import ErrorCode, NotFoundException


def _product(product_id: str) -> Product:
    return Product(id=product_id, name=f"Product {product_id}", sku=f"SKU-{product_id}")


def _variant(variant_id: str, product_id: str) -> ProductVariant:
    return ProductVariant(id=variant_id, product_id=product_id, size="M", color="blue", sku="V")


def _item(product_id: str, variant_id=None) -> OrderItemInput:
    return OrderItemInput(product_id=product_id, variant_id=variant_id, quantity=1, unit_price=Decimal("5"))


@pytest.fixture
def product_repo():
    repo = AsyncMock()
    repo.get_many.return_value = {"p1": _product("p1"), "p2": _product("p2")}
    repo.get_variants.return_value = {"v1": _variant("v1", "p1"), "v2": _variant("v2", "p2")}
    return repo


class TestLineItemResolver:
    """Tests para la búsqueda de productos y variantes por línea."""

    async def test_variant_outcomes(self, product_repo):
        lines = await LineItemResolver(product_repo).resolve(
            [_item("p1", "v1"), _item("p2"), _item("p1", "unknown")]
        )

        assert [line.lookup for line in lines] == [
            VariantLookup.FOUND,
            VariantLookup.NOT_REQUESTED,
            VariantLookup.MISSING,
        ]
        assert lines[0].variant.id == "v1"
        assert lines[2].variant is None

    async def test_variant_of_another_product_is_missing(self, product_repo):
        lines = await LineItemResolver(product_repo).resolve([_item("p1", "v2")])

        assert lines[0].lookup == VariantLookup.MISSING
        assert lines[0].variant is None

    async def test_strict_mode_rejects_missing_variant(self, product_repo):
        resolver = LineItemResolver(product_repo, strict_variant_lookup=True)

        with pytest.raises(NotFoundException) as exc_info:
            await resolver.resolve([_item("p1", "unknown")])

        assert exc_info.value.resource == "variant"
        assert exc_info.value.status_code == 400

    async def test_missing_product_rejects_all_lines(self, product_repo):
        items = [_item("p1"), _item("p2"), _item("ghost"), _item("p1"), _item("p2")]

        with pytest.raises(NotFoundException) as exc_info:
            await LineItemResolver(product_repo).resolve(items)

        assert exc_info.value.resource == "product"
        assert exc_info.value.error_code == ErrorCode.INVALID_REFERENCE
        assert exc_info.value.details["line"] == 2

    async def test_lookups_are_batched(self, product_repo):
        await LineItemResolver(product_repo).resolve([_item("p1", "v1"), _item("p2", "v2")])

        product_repo.get_many.assert_awaited_once()
        product_repo.get_variants.assert_awaited_once()


class TestReferenceResolver:
    """Tests para cliente y direcciones del pedido."""

    @pytest.fixture
    def customer_repo(self):
        repo = AsyncMock()
        repo.get_client.return_value = Client(id="c1", first_name="Ana", last_name="Mora")
        repo.get_addresses.return_value = {
            "a1": Address(id="a1", street="Calle 1", city="San José", country="CR"),
            "a2": Address(id="a2", street="Avenida 2", city="Heredia", country="CR"),
        }
        return repo

    async def test_resolves_all_references(self, customer_repo):
        references = await ReferenceResolver(customer_repo).resolve("c1", "a1", "a2")

        assert references.client.id == "c1"
        assert references.billing_address.city == "Heredia"

    async def test_same_address_for_both(self, customer_repo):
        references = await ReferenceResolver(customer_repo).resolve("c1", "a1", "a1")
        assert references.shipping_address is references.billing_address

    async def test_missing_client(self, customer_repo):
        customer_repo.get_client.return_value = None

        with pytest.raises(NotFoundException) as exc_info:
            await ReferenceResolver(customer_repo).resolve("c9", "a1", "a2")

        assert exc_info.value.resource == "client"
        assert exc_info.value.status_code == 400

    async def test_missing_billing_address(self, customer_repo):
        with pytest.raises(NotFoundException) as exc_info:
            await ReferenceResolver(customer_repo).resolve("c1", "a1", "a9")

        assert exc_info.value.resource == "address"
        assert exc_info.value.resource_id == "a9"
