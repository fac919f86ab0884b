"""Row mapping shared by the Supabase repositories."""

from decimal import Decimal

from refuel_store.domain.cart import LineItem
from refuel_store.domain.checkout import ShippingInfo, ShippingTier
from refuel_store.domain.formula import Flavor, FormulaParameters


def line_item_to_row(item: LineItem) -> dict[str, object]:
    return {
        "id": item.id,
        "name": item.name,
        "emoji": item.emoji,
        "price": str(item.unit_price),
        "qty": item.quantity,
        "subtitle": item.subtitle,
    }


def line_item_from_row(row: dict[str, object]) -> LineItem:
    return LineItem(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        emoji=str(row.get("emoji", "")),
        unit_price=Decimal(str(row["price"])),
        quantity=int(row["qty"]),
        subtitle=row.get("subtitle"),
    )


def shipping_to_row(shipping: ShippingInfo) -> dict[str, object]:
    return {
        "firstName": shipping.first_name,
        "lastName": shipping.last_name,
        "email": shipping.email,
        "address": shipping.address,
        "city": shipping.city,
        "state": shipping.region,
        "zip": shipping.postal_code,
        "shippingMethod": shipping.shipping_tier.value,
    }


def shipping_from_row(row: dict[str, object]) -> ShippingInfo:
    return ShippingInfo(
        first_name=str(row.get("firstName", "")),
        last_name=str(row.get("lastName", "")),
        email=str(row.get("email", "")),
        address=str(row.get("address", "")),
        city=str(row.get("city", "")),
        region=str(row.get("state", "")),
        postal_code=str(row.get("zip", "")),
        shipping_tier=ShippingTier(row.get("shippingMethod", ShippingTier.STANDARD)),
    )


def formula_to_row(parameters: FormulaParameters) -> dict[str, object]:
    return {
        "carbs": parameters.carbs_g,
        "fructoseRatio": parameters.fructose_ratio,
        "sodium": parameters.sodium_mg,
        "potassium": parameters.potassium_mg,
        "magnesium": parameters.magnesium_mg,
        "caffeine": parameters.caffeine_mg,
        "thickness": parameters.thickness,
        "flavor": parameters.flavor.value,
    }


def formula_from_row(row: dict[str, object]) -> FormulaParameters:
    return FormulaParameters(
        carbs_g=float(row["carbs"]),
        fructose_ratio=float(row["fructoseRatio"]),
        sodium_mg=float(row["sodium"]),
        potassium_mg=float(row["potassium"]),
        magnesium_mg=float(row["magnesium"]),
        caffeine_mg=float(row["caffeine"]),
        thickness=int(row["thickness"]),
        flavor=Flavor(row["flavor"]),
    )
