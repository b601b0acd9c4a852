"""
Identifier derivation utilities for catalog and order entities.

This module generates the human-facing identifiers used across the engine:
- Slugs: deterministic, URL-safe forms of a name ("Classic Tee" -> "classic-tee")
- Product SKUs: "SKU-<base36 timestamp>-<6 random chars>", never derived from the name
- Variant SKUs: product SKU + uppercased size + 3-letter uppercased color prefix
- Order numbers: "ORD-<base36 timestamp>-<6 random chars>"

Non-deterministic generation lives behind the IdentifierGenerator protocol so
callers can inject a predictable generator.
"""

import logging
import re
import secrets
import string
import time
from typing import Awaitable, Callable, Optional, Protocol

from app.utils.error_handler import DatabaseException, ErrorCode

logger = logging.getLogger(__name__)

BASE36_ALPHABET = string.digits + string.ascii_uppercase
RANDOM_SUFFIX_LENGTH = 6

_NON_SLUG_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_REPEATED_HYPHENS = re.compile(r"-+")


def slugify(name: str) -> str:
    """
    Convert a name into a URL slug.

    Lowercases and trims the text, drops every character that is not an
    ASCII word character, whitespace or hyphen, then collapses whitespace
    runs and repeated hyphens into a single hyphen. Idempotent.

    Args:
        name: Display name (e.g., "  Café   Bleu!! ")

    Returns:
        Slug (e.g., "caf-bleu")
    """
    if not name:
        return ""

    slug = name.lower().strip()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _REPEATED_HYPHENS.sub("-", slug)
    return slug


def to_base36(number: int) -> str:
    """Encode a non-negative integer in uppercase base 36."""
    if number < 0:
        raise ValueError(f"Cannot encode negative number in base36: {number}")
    if number == 0:
        return "0"

    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def random_suffix(length: int = RANDOM_SUFFIX_LENGTH) -> str:
    """Random uppercase base36 string of ``length`` characters."""
    return "".join(secrets.choice(BASE36_ALPHABET) for _ in range(length))


def generate_variant_sku(product_sku: str, size: Optional[str] = None, color: Optional[str] = None) -> str:
    """
    Derive a variant SKU from the product SKU, size and color.

    Each part is included only when present. Two colors sharing the same
    3-letter prefix produce the same suffix.

    Args:
        product_sku: SKU of the owning product
        size: Variant size (e.g., "m")
        color: Variant color (e.g., "blue")

    Returns:
        Variant SKU (e.g., "SKU-ABC-XYZ123-M-BLU")
    """
    parts = [product_sku]
    if size:
        parts.append(size.upper())
    if color:
        parts.append(color.upper()[:3])
    return "-".join(part for part in parts if part)


class IdentifierGenerator(Protocol):
    """Source of unique, non-deterministic identifiers."""

    def product_sku(self, name: str) -> str:
        """Generate a new product SKU."""
        ...

    def order_number(self) -> str:
        """Generate a new order number."""
        ...


class DefaultIdentifierGenerator:
    """
    Timestamp + random identifier generator.

    Args:
        sku_prefix: Prefix for product SKUs
        order_prefix: Prefix for order numbers
        clock_ms: Callable returning the current time in milliseconds
    """

    def __init__(
        self,
        sku_prefix: str = "SKU",
        order_prefix: str = "ORD",
        clock_ms: Optional[Callable[[], int]] = None,
    ):
        self.sku_prefix = sku_prefix
        self.order_prefix = order_prefix
        self._clock_ms = clock_ms or (lambda: time.time_ns() // 1_000_000)

    def _compose(self, prefix: str) -> str:
        return f"{prefix}-{to_base36(self._clock_ms())}-{random_suffix()}"

    def product_sku(self, name: str) -> str:
        sku = self._compose(self.sku_prefix)
        logger.debug(f"Generated SKU '{sku}' for product '{name}'")
        return sku

    def order_number(self) -> str:
        number = self._compose(self.order_prefix)
        logger.debug(f"Generated order number '{number}'")
        return number


def get_identifier_generator() -> DefaultIdentifierGenerator:
    """Build the default generator from the application settings."""
    from app.core.config import get_settings

    settings = get_settings()
    return DefaultIdentifierGenerator(sku_prefix=settings.SKU_PREFIX, order_prefix=settings.ORDER_NUMBER_PREFIX)


async def generate_unique(
    generate: Callable[[], str], exists: Callable[[str], Awaitable[bool]], max_attempts: int, label: str
) -> str:
    """
    Draw identifiers until one is not taken.

    The unique constraint on the column stays the final guard; this only
    makes a collision on write unlikely.

    Args:
        generate: Produces a candidate identifier
        exists: Tells whether a candidate is already stored
        max_attempts: Number of candidates to try
        label: Identifier name used in logs and errors (e.g., "sku")

    Raises:
        DatabaseException: If every attempt collided
    """
    for attempt in range(1, max_attempts + 1):
        candidate = generate()
        if not await exists(candidate):
            return candidate
        logger.warning(f"{label} collision on attempt {attempt}/{max_attempts}: {candidate}")
    raise DatabaseException(
        message=f"Could not generate a unique {label} after {max_attempts} attempts",
        operation=f"generate_{label}",
        error_code=ErrorCode.IDENTIFIER_EXHAUSTED,
    )
