"""
Integration tests for the product endpoints.

Drives the FastAPI app over an in-memory SQLite database and checks the
variant matrix, identifier derivation and category resolution end to end.
"""

import re

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.endpoints.products import get_product_service
from app.core.config import Settings
from app.db.connection import get_db_session
from app.db.models import Product, ProductVariant
from app.main import app
from app.services.catalog import create_product_service
from tests.factories import product_payload

SKU_PATTERN = re.compile(r"^SKU-[0-9A-Z]+-[0-9A-Z]{6}$")


def product_service_with(settings: Settings):
    async def dependency(session: AsyncSession = Depends(get_db_session)):
        return create_product_service(session, settings=settings)

    return dependency


async def _create(client, seed, **overrides) -> dict:
    response = await client.post("/api/v1/products", json=product_payload(seed, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateProduct:
    """Test suite for product creation."""

    async def test_classic_tee(self, client, seed):
        """Two blue variants in M and L give 8 units in stock."""
        product = await _create(client, seed)

        assert product["name"] == "Classic Tee"
        assert product["price"] == 19.99
        assert product["slug"] == "classic-tee"
        assert SKU_PATTERN.match(product["sku"])
        assert len(product["variants"]) == 2
        assert product["stats"] == {"totalStock": 8, "availableSizes": ["M", "L"], "availableColors": ["blue"]}
        assert product["category"]["id"] == seed.category_id

    async def test_variant_rows(self, client, seed):
        product = await _create(client, seed)

        by_size = {variant["size"]: variant for variant in product["variants"]}
        assert by_size["M"]["sku"] == f"{product['sku']}-M-BLU"
        assert by_size["M"]["colorHex"] == "#3b82f6"
        assert by_size["M"]["stock"] == 5
        assert by_size["L"]["isActive"] is True
        assert by_size["L"]["price"] is None
        assert by_size["L"]["images"] == []

    async def test_duplicate_name_gets_suffixed_slug(self, client, seed):
        first = await _create(client, seed)
        second = await _create(client, seed)

        assert first["slug"] == "classic-tee"
        assert second["slug"] == "classic-tee-2"
        assert first["sku"] != second["sku"]

    async def test_subcategory_overrides_category(self, client, seed):
        product = await _create(client, seed, subcategoryId=seed.subcategory_id)

        assert product["categoryId"] == seed.subcategory_id

    async def test_missing_category(self, client, seed):
        response = await client.post("/api/v1/products", json=product_payload(seed, categoryId="nope"))

        assert response.status_code == 400
        assert response.json()["error_code"] == "CATEGORY_NOT_FOUND"

    async def test_missing_brand(self, client, seed):
        response = await client.post("/api/v1/products", json=product_payload(seed, brandId="nope"))

        assert response.status_code == 400
        assert response.json()["resource"] == "brand"

    async def test_brand_is_attached(self, client, seed):
        product = await _create(client, seed, brandId=seed.brand_id)
        assert product["brand"]["name"] == "Acme"

    async def test_duplicate_variant_pair_writes_nothing(self, client, seed, db_session):
        variants = [{"size": "M", "color": "blue", "quantity": 1}, {"size": "M", "color": "blue", "quantity": 2}]

        response = await client.post("/api/v1/products", json=product_payload(seed, variants=variants))

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_VARIANT_DATA"
        assert (await db_session.execute(select(func.count()).select_from(Product))).scalar_one() == 0

    async def test_duplicate_variant_pair_differing_in_case(self, client, seed, db_session):
        variants = [{"size": "m", "color": "Blue", "quantity": 1}, {"size": "M", "color": "blue", "quantity": 2}]

        response = await client.post("/api/v1/products", json=product_payload(seed, variants=variants))

        assert response.status_code == 400
        assert response.json()["field"] == "variants[1]"
        assert (await db_session.execute(select(func.count()).select_from(ProductVariant))).scalar_one() == 0

    async def test_lower_case_size_is_normalized(self, client, seed):
        variants = [{"size": "m", "color": "Blue", "quantity": 1}, {"size": "l", "color": "Blue", "quantity": 1}]

        product = await _create(client, seed, variants=variants)

        assert product["stats"]["availableSizes"] == ["M", "L"]
        assert {variant["size"] for variant in product["variants"]} == {"M", "L"}

    async def test_invalid_payload(self, client, seed):
        response = await client.post("/api/v1/products", json=product_payload(seed, price=0, images=[]))

        body = response.json()
        assert response.status_code == 400
        assert body["error_type"] == "validation_error"
        assert {error["field"] for error in body["errors"]} == {"price", "images"}

    async def test_strict_colors(self, client, seed):
        app.dependency_overrides[get_product_service] = product_service_with(Settings(STRICT_COLOR_RESOLUTION=True))
        variants = [{"size": "M", "color": "teal", "quantity": 1}]

        response = await client.post("/api/v1/products", json=product_payload(seed, variants=variants))

        assert response.status_code == 400
        assert response.json()["field"] == "variants[0].color"

    async def test_merchandising_fields(self, client, seed):
        product = await _create(
            client,
            seed,
            tags=["summer"],
            featured=True,
            isNewIn=True,
            metaTitle="Classic Tee",
            dimensions={"length": 70, "width": 50},
        )

        assert product["tags"] == ["summer"]
        assert product["featured"] is True
        assert product["isNewIn"] is True
        assert product["dimensions"]["length"] == 70


class TestGetProduct:
    async def test_active_variants_and_stats(self, client, seed):
        created = await _create(client, seed)

        response = await client.get(f"/api/v1/products/{created['id']}")

        product = response.json()
        assert response.status_code == 200
        assert [variant["size"] for variant in product["variants"]] == ["L", "M"]
        assert product["stats"]["totalStock"] == 8
        assert product["stats"]["availableSizes"] == ["M", "L"]

    async def test_unknown_product(self, client, seed):
        response = await client.get("/api/v1/products/unknown")

        body = response.json()
        assert response.status_code == 404
        assert body["error_type"] == "not_found_error"
        assert body["resource"] == "product"

    async def test_list_variants(self, client, seed):
        created = await _create(client, seed)

        response = await client.get(f"/api/v1/products/{created['id']}/variants")

        assert response.status_code == 200
        assert len(response.json()["variants"]) == 2

    async def test_list_variants_unknown_product(self, client, seed):
        response = await client.get("/api/v1/products/unknown/variants")
        assert response.status_code == 404


class TestUpdateProduct:
    """Test suite for partial product updates."""

    async def test_name_change_regenerates_slug_only(self, client, seed):
        created = await _create(client, seed)

        response = await client.put(f"/api/v1/products/{created['id']}", json={"name": "Vintage Tee"})

        product = response.json()
        assert response.status_code == 200
        assert product["slug"] == "vintage-tee"
        assert product["sku"] == created["sku"]

    async def test_same_name_keeps_slug(self, client, seed):
        created = await _create(client, seed)

        response = await client.put(
            f"/api/v1/products/{created['id']}", json={"name": "Classic Tee", "price": "24.50"}
        )

        assert response.json()["slug"] == "classic-tee"
        assert response.json()["price"] == 24.5

    async def test_replace_variants(self, client, seed, db_session):
        created = await _create(client, seed)
        old_ids = {variant["id"] for variant in created["variants"]}

        response = await client.put(
            f"/api/v1/products/{created['id']}",
            json={"variants": [{"size": "M", "color": "blue", "quantity": 10}, {"size": "S", "color": "red"}]},
        )

        product = response.json()
        assert response.status_code == 200
        assert {variant["id"] for variant in product["variants"]}.isdisjoint(old_ids)
        assert product["stats"]["totalStock"] == 10
        assert product["stats"]["availableSizes"] == ["S", "M"]
        assert set(product["stats"]["availableColors"]) == {"blue", "red"}
        count = select(func.count()).select_from(ProductVariant)
        assert (await db_session.execute(count)).scalar_one() == 2

    async def test_empty_variant_list_keeps_variants(self, client, seed):
        created = await _create(client, seed)

        response = await client.put(f"/api/v1/products/{created['id']}", json={"variants": [], "stock": 3})

        product = response.json()
        assert product["stock"] == 3
        assert {v["id"] for v in product["variants"]} == {v["id"] for v in created["variants"]}

    async def test_reconcile_keeps_variant_ids(self, client, seed):
        created = await _create(client, seed)
        medium_id = next(v["id"] for v in created["variants"] if v["size"] == "M")
        app.dependency_overrides[get_product_service] = product_service_with(
            Settings(VARIANT_UPDATE_STRATEGY="reconcile")
        )

        response = await client.put(
            f"/api/v1/products/{created['id']}",
            json={"variants": [{"size": "M", "color": "blue", "quantity": 7}, {"size": "XL", "color": "blue"}]},
        )

        by_size = {variant["size"]: variant for variant in response.json()["variants"]}
        assert set(by_size) == {"M", "XL"}
        assert by_size["M"]["id"] == medium_id
        assert by_size["M"]["stock"] == 7

    async def test_category_change(self, client, seed):
        created = await _create(client, seed)

        response = await client.put(
            f"/api/v1/products/{created['id']}", json={"categoryId": seed.other_category_id}
        )

        assert response.json()["category"]["slug"] == "shoes"

    async def test_enforced_subcategory_parent(self, client, seed):
        created = await _create(client, seed)
        app.dependency_overrides[get_product_service] = product_service_with(Settings(ENFORCE_SUBCATEGORY_PARENT=True))

        response = await client.put(
            f"/api/v1/products/{created['id']}",
            json={"categoryId": seed.category_id, "subcategoryId": seed.other_category_id},
        )

        assert response.status_code == 400
        assert response.json()["field"] == "subcategoryId"

    async def test_unknown_product(self, client, seed):
        response = await client.put("/api/v1/products/unknown", json={"name": "Whatever"})
        assert response.status_code == 404


class TestDeleteAndSearch:
    async def test_delete_removes_variants(self, client, seed, db_session):
        created = await _create(client, seed)

        response = await client.delete(f"/api/v1/products/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"message": "Product deleted successfully"}
        assert (await client.get(f"/api/v1/products/{created['id']}")).status_code == 404
        count = select(func.count()).select_from(ProductVariant)
        assert (await db_session.execute(count)).scalar_one() == 0

    async def test_delete_unknown(self, client, seed):
        assert (await client.delete("/api/v1/products/unknown")).status_code == 404

    async def test_search_requires_query(self, client, seed):
        response = await client.get("/api/v1/products/search")

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "q"

    async def test_search_filters_and_sorting(self, client, seed):
        await _create(client, seed, name="Classic Tee", price="19.99")
        await _create(client, seed, name="Premium Tee", price="39.99")
        await _create(client, seed, name="Running Shoe", price="89.00", description="Lightweight running shoe")

        response = await client.get(
            "/api/v1/products/search", params={"q": "tee", "sortBy": "price", "sortOrder": "asc"}
        )
        body = response.json()
        assert body["total"] == 2
        assert [product["name"] for product in body["products"]] == ["Classic Tee", "Premium Tee"]

        response = await client.get("/api/v1/products/search", params={"q": "tee", "minPrice": "20"})
        assert [product["name"] for product in response.json()["products"]] == ["Premium Tee"]

    async def test_search_invalid_sort(self, client, seed):
        response = await client.get("/api/v1/products/search", params={"q": "tee", "sortBy": "stock"})
        assert response.status_code == 400

    async def test_list_filters(self, client, seed):
        await _create(client, seed, name="Classic Tee")
        await _create(client, seed, name="Hidden Tee", available=False)

        response = await client.get("/api/v1/products", params={"available": "true"})
        assert [product["name"] for product in response.json()["products"]] == ["Classic Tee"]

        response = await client.get("/api/v1/products", params={"search": "hidden"})
        assert [product["name"] for product in response.json()["products"]] == ["Hidden Tee"]
