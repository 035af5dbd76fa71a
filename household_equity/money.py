"""
Money Helpers

DESIGN DECISION: Money enters and leaves the engine as Decimal, but sums are
accumulated as integer cents. Rounding happens only when a value is reported,
always to 2 decimal places with ROUND_HALF_UP.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CENT = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")

Number = Union[Decimal, int, float, str]


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without going through binary float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value: Number, places: int = 2) -> Decimal:
    """Round to a fixed number of decimal places, halves away from zero."""
    exponent = Decimal(1).scaleb(-places)
    return to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP)


def to_cents(amount: Number) -> int:
    """Convert a currency amount to integer cents (rounded half up)."""
    return int((to_decimal(amount) * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_cents(cents: Union[int, Decimal]) -> Decimal:
    """
    Convert a (possibly fractional) cent value back to a 2-place amount.

    Fractional cents come from proportional shares such as 33.33% of 100.
    """
    return round_half_up(Decimal(cents) / HUNDRED)
