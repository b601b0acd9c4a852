"""
Resolver services that turn payload references into stored rows.
"""

from .line_item_resolver import LineItemResolver, ResolvedLine, VariantLookup
from .reference_resolver import OrderReferences, ReferenceResolver

__all__ = ["LineItemResolver", "OrderReferences", "ReferenceResolver", "ResolvedLine", "VariantLookup"]
