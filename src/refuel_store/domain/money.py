"""Currency rounding helpers shared by pricing and checkout."""

from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
MILL = Decimal("0.001")


def to_decimal(value: float | int | str | Decimal) -> Decimal:
    """Convert a number to Decimal through its string form."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal) -> Decimal:
    """Round half-up to currency precision."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def round_mills(value: Decimal) -> Decimal:
    """Round half-up to 3 decimals, the precision of price components."""
    return value.quantize(MILL, rounding=ROUND_HALF_UP)


def round_half_up(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def floor_int(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_FLOOR))


def to_minor_units(amount: Decimal) -> int:
    """Convert an amount to integer cents with a single rounding step."""
    return round_half_up(amount * 100)


def from_minor_units(amount_minor: int) -> Decimal:
    return (Decimal(amount_minor) / 100).quantize(CENT)


def format_money(value: Decimal) -> str:
    return f"${value:.2f}"
