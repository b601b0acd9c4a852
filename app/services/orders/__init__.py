"""
Order services package.

This package contains the services that compose, price and edit orders,
each with a single responsibility and wired together by the OrderComposer.
"""

from .composer import OrderComposer
from .factories import OrderFactory, create_order_composer
from .pricing import PricingCalculator

__all__ = ["OrderComposer", "OrderFactory", "PricingCalculator", "create_order_composer"]
