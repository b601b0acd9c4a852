"""
Repositories bound to the request session.
"""

from .base import BaseRepository, log_operation
from .brand_repository import BrandRepository
from .category_repository import CategoryRepository
from .customer_repository import CustomerRepository
from .order_repository import OrderRepository
from .product_repository import ProductRepository

__all__ = [
    "BaseRepository",
    "BrandRepository",
    "CategoryRepository",
    "CustomerRepository",
    "OrderRepository",
    "ProductRepository",
    "log_operation",
]
