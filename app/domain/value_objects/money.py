"""
Money value object for handling monetary amounts with currency.

This value object ensures type safety and provides clear semantics
for monetary operations in the domain. Amounts are fixed-point
Decimals quantized to the smallest currency unit with ROUND_HALF_UP.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

DEFAULT_DECIMAL_PLACES = 2

# Largest amount a Numeric(12, 2) column holds
MAX_STORED_AMOUNT = Decimal("9999999999.99")


def quantize_amount(value: Decimal | int | float | str, places: int = DEFAULT_DECIMAL_PLACES) -> Decimal:
    """Convert a value to Decimal and round it half-up to ``places`` decimals."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Money:
    """
    Immutable value object representing a monetary amount with currency.

    Attributes:
        amount: The monetary amount as Decimal for precision
        currency: Currency code (e.g., "USD", "EUR")
        places: Decimal places kept after rounding

    Example:
        >>> price = Money(amount=Decimal("10.00"))
        >>> shipping = Money(amount=Decimal("5"))
        >>> total = price * 2 + shipping
        >>> print(total.amount)
        25.00
    """

    amount: Decimal
    currency: str = "USD"
    places: int = field(default=DEFAULT_DECIMAL_PLACES, compare=False, repr=False)

    def __post_init__(self) -> None:
        """Validate money object after initialization."""
        object.__setattr__(self, "amount", quantize_amount(self.amount, self.places))

        if self.amount < 0:
            raise ValueError(f"Money amount cannot be negative: {self.amount}")

        if not self.currency or len(self.currency) != 3:
            raise ValueError(f"Invalid currency code: {self.currency}")

    def _check_compatible(self, other: "Money", operation: str) -> None:
        if not isinstance(other, Money):
            raise TypeError(f"Cannot {operation} Money with {type(other)}")

        if self.currency != other.currency:
            raise ValueError(f"Cannot {operation} different currencies: {self.currency} and {other.currency}")

    def __add__(self, other: "Money") -> "Money":
        """Add two Money objects with the same currency."""
        self._check_compatible(other, "add")
        return Money(amount=self.amount + other.amount, currency=self.currency, places=self.places)

    def __sub__(self, other: "Money") -> "Money":
        """Subtract two Money objects with the same currency."""
        self._check_compatible(other, "subtract")
        return Money(amount=self.amount - other.amount, currency=self.currency, places=self.places)

    def __mul__(self, multiplier: int | Decimal) -> "Money":
        """Multiply money by a scalar value (line quantity)."""
        if isinstance(multiplier, bool) or not isinstance(multiplier, (int, Decimal)):
            raise TypeError(f"Cannot multiply Money by {type(multiplier)}")

        return Money(amount=self.amount * Decimal(multiplier), currency=self.currency, places=self.places)

    def __str__(self) -> str:
        """String representation of Money."""
        return f"{self.currency} {self.amount:.{self.places}f}"

    def __repr__(self) -> str:
        """Developer-friendly representation."""
        return f"Money(amount=Decimal('{self.amount}'), currency='{self.currency}')"

    @property
    def is_zero(self) -> bool:
        """Check if amount is zero."""
        return self.amount == Decimal("0")

    @property
    def is_positive(self) -> bool:
        """Check if amount is positive."""
        return self.amount > Decimal("0")

    @classmethod
    def zero(cls, currency: str = "USD", places: int = DEFAULT_DECIMAL_PLACES) -> "Money":
        """Create a zero Money object."""
        return cls(amount=Decimal("0"), currency=currency, places=places)

    @classmethod
    def of(cls, amount: Decimal | int | float | str | None, currency: str = "USD",
           places: int = DEFAULT_DECIMAL_PLACES) -> "Money":
        """Create Money from any numeric input; ``None`` means zero."""
        if amount is None:
            return cls.zero(currency, places)
        return cls(amount=Decimal(str(amount)), currency=currency, places=places)
