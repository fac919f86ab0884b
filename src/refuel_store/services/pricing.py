"""Formula pricing and product line items."""

from decimal import Decimal
from uuid import uuid4

from refuel_store.domain.cart import LineItem
from refuel_store.domain.formula import Flavor, FormulaParameters
from refuel_store.domain.money import (
    floor_int,
    from_minor_units,
    round_half_up,
    round_mills,
    round_money,
    to_decimal,
)
from refuel_store.domain.pricing import PriceComponent, PriceQuote

BASE_PRICE = Decimal("1.20")
MALTODEXTRIN_PER_G = Decimal("0.008")
FRUCTOSE_PER_G = Decimal("0.016")
SODIUM_PER_MG = Decimal("0.0005")
POTASSIUM_PER_MG = Decimal("0.001")
MAGNESIUM_PER_MG = Decimal("0.002")
CAFFEINE_PER_MG = Decimal("0.008")
FLAVOR_SURCHARGE = Decimal("0.10")
THICKNESS_STEP = Decimal("0.04")

PACKET_PRICE = Decimal("15.00")
MIN_POUCHES = 5
MAX_POUCHES = 50
POUCH_STEP = 5


def carb_split(params: FormulaParameters) -> tuple[int, int]:
    """Return (maltodextrin_g, fructose_g) for a formula."""
    carbs = to_decimal(params.carbs_g)
    ratio = to_decimal(params.fructose_ratio)
    maltodextrin = round_half_up(carbs * (1 - ratio))
    fructose = round_half_up(carbs * ratio)
    return maltodextrin, fructose


def price(params: FormulaParameters) -> PriceQuote:
    """Price one pouch of a formula.

    Components are rounded to 3 decimals before they are summed and the sum is
    rounded to cents. The same function prices the product card, the cart line
    and therefore the amount charged at checkout.
    """
    maltodextrin, fructose = carb_split(params)
    caffeine = to_decimal(params.caffeine_mg)
    costs = [
        ("Base", BASE_PRICE),
        (
            f"Carbs ({_format_number(params.carbs_g)}g)",
            maltodextrin * MALTODEXTRIN_PER_G + fructose * FRUCTOSE_PER_G,
        ),
        (
            "Electrolytes",
            to_decimal(params.sodium_mg) * SODIUM_PER_MG
            + to_decimal(params.potassium_mg) * POTASSIUM_PER_MG
            + to_decimal(params.magnesium_mg) * MAGNESIUM_PER_MG,
        ),
        (f"Caffeine ({_format_number(params.caffeine_mg)}mg)", caffeine * CAFFEINE_PER_MG),
        (
            "Flavor",
            Decimal(0) if params.flavor is Flavor.NEUTRAL else FLAVOR_SURCHARGE,
        ),
        ("Consistency", (params.thickness - 1) * THICKNESS_STEP),
    ]
    rounded = [(label, round_mills(cost)) for label, cost in costs]
    unit_price = round_money(sum((cost for _, cost in rounded), Decimal(0)))
    nonzero = [(label, cost) for label, cost in rounded if cost > 0]
    display = _apportion_cents(unit_price, [cost for _, cost in nonzero])
    breakdown = tuple(
        PriceComponent(label=label, amount=cost, display_amount=shown)
        for (label, cost), shown in zip(nonzero, display, strict=True)
    )
    return PriceQuote(unit_price=unit_price, breakdown=breakdown)


def _apportion_cents(total: Decimal, amounts: list[Decimal]) -> list[Decimal]:
    """Split ``total`` into cent amounts proportional to ``amounts``.

    Largest-remainder rounding: every amount is floored to the cent, then the
    leftover cents go to the largest fractional parts (earliest first on ties).
    """
    scaled = [amount * 100 for amount in amounts]
    cents = [floor_int(value) for value in scaled]
    leftover = round_half_up(total * 100) - sum(cents)
    by_remainder = sorted(
        range(len(scaled)), key=lambda index: scaled[index] - cents[index], reverse=True
    )
    for index in by_remainder[: max(leftover, 0)]:
        cents[index] += 1
    return [from_minor_units(value) for value in cents]


def clamp_pouches(pouches: int) -> int:
    """Clamp a pouch count to the product card's 5..50 range in steps of 5."""
    bounded = min(max(pouches, MIN_POUCHES), MAX_POUCHES)
    return bounded - bounded % POUCH_STEP


def describe_formula(params: FormulaParameters, unit_price: Decimal) -> str:
    parts = [
        f"{_format_number(params.carbs_g)}g carbs",
        f"{_format_number(params.sodium_mg)}mg sodium",
    ]
    if params.caffeine_mg:
        parts.append(f"{_format_number(params.caffeine_mg)}mg caffeine")
    parts.append(params.flavor.short_name)
    parts.append(f"${unit_price}/pouch")
    return " · ".join(parts)


def build_gel_line_item(
    params: FormulaParameters, pouches: int, item_id: str | None = None
) -> LineItem:
    """Build the cart entry for a bag of custom gel pouches."""
    count = clamp_pouches(pouches)
    quote = price(params)
    return LineItem(
        id=item_id or f"gel-{uuid4().hex[:12]}",
        name=f"Custom Gel Powder ({count} pouches)",
        emoji=params.flavor.emoji,
        unit_price=quote.unit_price * count,
        quantity=1,
        subtitle=describe_formula(params, quote.unit_price),
    )


def build_packet_line_item(quantity: int, item_id: str | None = None) -> LineItem:
    """Build the cart entry for the reusable gel packet."""
    return LineItem(
        id=item_id or f"packet-{uuid4().hex[:12]}",
        name="Reusable Gel Packet",
        emoji="🧴",
        unit_price=PACKET_PRICE,
        quantity=quantity,
        subtitle="Food-grade silicone · Dishwasher safe",
    )


def _format_number(value: float) -> str:
    """Render slider values without a trailing .0."""
    return f"{value:g}"
