"""
Color and size tables for product variants.

The palette maps a small set of color names to display hex codes.
`color_hex` is the lenient lookup used for display: any unknown name
resolves to black. `resolve_color` returns a tagged outcome so callers
can tell "explicitly black" from "unknown color".
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_COLOR_HEX = "#000000"

COLOR_PALETTE: dict[str, str] = {
    "red": "#ef4444",
    "blue": "#3b82f6",
    "green": "#10b981",
    "yellow": "#f59e0b",
    "purple": "#8b5cf6",
    "pink": "#ec4899",
    "black": "#000000",
    "white": "#ffffff",
    "gray": "#6b7280",
    "orange": "#f97316",
}

SIZES: tuple[str, ...] = ("XS", "S", "M", "L", "XL", "XXL")


@dataclass(frozen=True)
class ColorResolution:
    """
    Result of a palette lookup.

    Attributes:
        name: Color name as submitted
        hex: Hex code (default black when unresolved)
        resolved: Whether the name is part of the palette
    """

    name: str
    hex: str
    resolved: bool


def resolve_color(name: Optional[str]) -> ColorResolution:
    """Case-insensitive palette lookup returning a tagged outcome."""
    key = (name or "").strip().lower()
    if key in COLOR_PALETTE:
        return ColorResolution(name=name or "", hex=COLOR_PALETTE[key], resolved=True)
    return ColorResolution(name=name or "", hex=DEFAULT_COLOR_HEX, resolved=False)


def color_hex(name: Optional[str]) -> str:
    """Hex code for a color name, falling back to black for unknown names."""
    return resolve_color(name).hex


def is_known_size(size: Optional[str]) -> bool:
    """Check a size against the fixed size set (case-insensitive)."""
    return bool(size) and size.strip().upper() in SIZES
