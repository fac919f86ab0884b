"""Pricing domain models."""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PriceComponent:
    """One itemized cost in a unit price.

    ``amount`` is the component cost rounded to 3 decimals, the value that
    enters the unit-price sum. ``display_amount`` is its 2-decimal share of
    the unit price; display amounts across a quote add up to the unit price.
    """

    label: str
    amount: Decimal
    display_amount: Decimal


@dataclass(frozen=True)
class PriceQuote:
    """Unit price of a formula with its itemized breakdown."""

    unit_price: Decimal
    breakdown: tuple[PriceComponent, ...]
