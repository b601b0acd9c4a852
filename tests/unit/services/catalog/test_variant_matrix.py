"""Tests unitarios para VariantMatrixManager y los agregados de variantes."""

from unittest.mock import AsyncMock

import pytest

from app.db.models import Product, ProductVariant
from app.services.catalog.variant_matrix import VariantMatrixManager, VariantSpec, compute_variant_stats
from app.utils.error_handler import ValidationException


def _variant(size, color, stock, is_active=True) -> ProductVariant:
    return ProductVariant(size=size, color=color, stock=stock, is_active=is_active, sku="V")


@pytest.fixture
def product():
    return Product(id="p1", name="Classic Tee", sku="SKU-TEST-0001")


@pytest.fixture
def manager():
    return VariantMatrixManager(AsyncMock())


class TestVariantStats:
    """Tests para totalStock, availableSizes y availableColors."""

    def test_aggregates_active_variants(self):
        stats = compute_variant_stats([_variant("M", "blue", 5), _variant("L", "blue", 3)])

        assert stats.total_stock == 8
        assert stats.available_sizes == ["M", "L"]
        assert stats.available_colors == ["blue"]

    def test_inactive_variants_ignored(self):
        stats = compute_variant_stats([_variant("M", "red", 5), _variant("XL", "green", 7, is_active=False)])

        assert stats.total_stock == 5
        assert stats.available_sizes == ["M"]
        assert stats.available_colors == ["red"]

    def test_sizes_follow_size_chart(self):
        """Las tallas salen en orden de tabla; las desconocidas al final, en orden de aparición."""
        variants = [_variant(size, None, 1) for size in ("XL", "Custom", "S", "M", "S", "42")]

        assert compute_variant_stats(variants).available_sizes == ["S", "M", "XL", "Custom", "42"]

    def test_falsy_values_filtered(self):
        stats = compute_variant_stats([_variant(None, "", 2), _variant("", None, 0)])

        assert stats.total_stock == 2
        assert stats.available_sizes == []
        assert stats.available_colors == []

    def test_to_dict_uses_camel_case(self):
        data = compute_variant_stats([_variant("M", "blue", 5)]).to_dict()
        assert data == {"totalStock": 5, "availableSizes": ["M"], "availableColors": ["blue"]}


class TestBuildVariant:
    def test_derived_fields(self, manager, product):
        variant = manager.build_variant(product, VariantSpec(size="M", color="Blue", quantity=5))

        assert variant.sku == "SKU-TEST-0001-M-BLU"
        assert variant.color_hex == "#3b82f6"
        assert variant.stock == 5
        assert variant.is_active is True
        assert variant.images == []
        assert variant.price is None
        assert variant.material is None

    def test_unknown_color_gets_default_hex(self, manager, product):
        variant = manager.build_variant(product, VariantSpec(size="S", color="teal", quantity=1))
        assert variant.color_hex == "#000000"

    def test_size_is_upper_cased(self, manager, product):
        variant = manager.build_variant(product, VariantSpec(size="xl", color="Blue", quantity=1))

        assert variant.size == "XL"
        assert variant.color == "Blue"
        assert variant.sku == "SKU-TEST-0001-XL-BLU"

    def test_no_color_no_hex(self, manager, product):
        variant = manager.build_variant(product, VariantSpec(size="S"))

        assert variant.color_hex is None
        assert variant.stock == 0

    def test_product_without_sku(self, manager):
        with pytest.raises(ValueError):
            manager.build_variant(Product(id="p1", name="x"), VariantSpec(size="M"))


class TestValidateSpecs:
    """Tests para la validación de la matriz antes de escribir."""

    def test_duplicate_pair_rejected(self, manager):
        specs = [VariantSpec("M", "blue", 1), VariantSpec("M", "blue", 2)]

        with pytest.raises(ValidationException) as exc_info:
            manager.validate_specs(specs)

        assert exc_info.value.field == "variants[1]"

    def test_duplicate_pair_ignores_case(self, manager):
        specs = [VariantSpec("m", "Blue", 1), VariantSpec("M", "blue", 2)]

        with pytest.raises(ValidationException) as exc_info:
            manager.validate_specs(specs)

        assert exc_info.value.field == "variants[1]"

    def test_same_size_other_color_allowed(self, manager):
        manager.validate_specs([VariantSpec("M", "blue", 1), VariantSpec("M", "red", 1)])

    def test_strict_colors(self):
        strict = VariantMatrixManager(AsyncMock(), strict_colors=True)

        with pytest.raises(ValidationException):
            strict.validate_specs([VariantSpec("M", "teal", 1)])

    def test_lenient_colors(self, manager):
        manager.validate_specs([VariantSpec("M", "teal", 1)])

    def test_strict_sizes(self):
        strict = VariantMatrixManager(AsyncMock(), strict_sizes=True)

        with pytest.raises(ValidationException):
            strict.validate_specs([VariantSpec("XXXL", "blue", 1)])

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            VariantMatrixManager(AsyncMock(), strategy="merge")


class TestApplyUpdate:
    async def test_empty_list_is_no_op(self, manager, product):
        assert await manager.apply_update(product, []) is None
        assert await manager.apply_update(product, None) is None
        manager.product_repo.list_variants.assert_not_awaited()

    async def test_replace_deletes_then_creates(self, product):
        repo = AsyncMock()
        existing = [_variant("S", "red", 1), _variant("M", "red", 1)]
        repo.list_variants.return_value = existing
        manager = VariantMatrixManager(repo, strategy="replace")

        summary = await manager.apply_update(product, [VariantSpec("L", "blue", 4)])

        repo.delete_variants.assert_awaited_once_with(existing)
        created = repo.add_variants.await_args.args[0]
        assert [v.sku for v in created] == ["SKU-TEST-0001-L-BLU"]
        assert (summary.created, summary.deleted) == (1, 2)

    async def test_reconcile_keeps_matching_rows(self, product):
        repo = AsyncMock()
        keep = _variant("M", "blue", 1)
        drop = _variant("S", "red", 1)
        repo.list_variants.return_value = [keep, drop]
        manager = VariantMatrixManager(repo, strategy="reconcile")

        summary = await manager.apply_update(
            product, [VariantSpec("M", "blue", 9), VariantSpec("L", "blue", 2)]
        )

        repo.delete_variants.assert_awaited_once_with([drop])
        assert keep.stock == 9
        assert [v.size for v in repo.add_variants.await_args.args[0]] == ["L"]
        assert (summary.created, summary.updated, summary.deleted) == (1, 1, 1)
