"""Tests unitarios para las anotaciones de los métodos que siguen a ``list``."""

from typing import get_type_hints

from app.db.models import Category, Order, Product, ProductVariant
from app.db.repositories import CategoryRepository, OrderRepository, ProductRepository
from app.services.catalog.product_service import ProductService


class TestReturnAnnotations:
    """Un método ``list`` en la clase no debe ocultar el builtin en las anotaciones."""

    def test_product_repository(self):
        assert get_type_hints(ProductRepository.search)["return"] == list[Product]
        assert get_type_hints(ProductRepository.list_variants)["return"] == list[ProductVariant]

    def test_product_service(self):
        assert get_type_hints(ProductService.search)["return"] == list[Product]

    def test_list_methods(self):
        assert get_type_hints(ProductRepository.list)["return"] == list[Product]
        assert get_type_hints(CategoryRepository.list)["return"] == list[Category]
        assert get_type_hints(OrderRepository.list)["return"] == list[Order]
