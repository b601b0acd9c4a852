"""
Catalog services package.

Products with their size/color variant matrix, brands and the two-level
category tree.
"""

from .brand_service import BrandService
from .category_resolver import CategoryResolver
from .category_service import CategoryService
from .factories import create_brand_service, create_category_service, create_product_service
from .product_service import ProductService
from .variant_matrix import VariantMatrixManager, VariantSpec, VariantStats, compute_variant_stats

__all__ = [
    "BrandService",
    "CategoryResolver",
    "CategoryService",
    "ProductService",
    "VariantMatrixManager",
    "VariantSpec",
    "VariantStats",
    "compute_variant_stats",
    "create_brand_service",
    "create_category_service",
    "create_product_service",
]
