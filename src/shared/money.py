"""Currency arithmetic helpers.

Amounts are exposed as floats on aggregates but every calculation goes
through Decimal and is quantized to cents, so sums never drift.
"""

from decimal import ROUND_HALF_UP, Decimal

_CENT = Decimal("0.01")


def to_decimal(amount) -> Decimal:
    if isinstance(amount, Decimal):
        return amount
    # str() first so 0.1 stays 0.1 instead of its binary expansion
    return Decimal(str(amount))


def quantize(amount) -> Decimal:
    return to_decimal(amount).quantize(_CENT, rounding=ROUND_HALF_UP)


def to_minor_units(amount) -> int:
    """Convert a major-unit amount (rupees, dollars) to minor units (paise, cents)."""
    return int((quantize(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
