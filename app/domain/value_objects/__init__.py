"""
Value objects for the domain layer.

Value objects are immutable objects that represent concepts
with no conceptual identity, only defined by their attributes.
"""

from .money import MAX_STORED_AMOUNT, Money

__all__ = ["MAX_STORED_AMOUNT", "Money"]
