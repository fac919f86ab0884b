"""Domain models for checkout and orders."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from refuel_store.domain.cart import LineItem


class ShippingTier(StrEnum):
    """Shipping speeds offered at checkout."""

    STANDARD = "standard"
    EXPRESS = "express"
    OVERNIGHT = "overnight"


@dataclass(frozen=True)
class ShippingOption:
    """Flat-rate shipping option shown at checkout."""

    tier: ShippingTier
    label: str
    detail: str
    rate: Decimal


SHIPPING_OPTIONS: dict[ShippingTier, ShippingOption] = {
    ShippingTier.STANDARD: ShippingOption(
        ShippingTier.STANDARD, "Standard Shipping", "5–7 business days", Decimal("6.99")
    ),
    ShippingTier.EXPRESS: ShippingOption(
        ShippingTier.EXPRESS, "Express Shipping", "2–3 business days", Decimal("14.99")
    ),
    ShippingTier.OVERNIGHT: ShippingOption(
        ShippingTier.OVERNIGHT, "Overnight", "Next business day", Decimal("29.99")
    ),
}

US_STATES = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA", "HI", "ID", "IL",
    "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS", "MO", "MT",
    "NE", "NV", "NH", "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI",
    "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI", "WY",
)  # fmt: skip


@dataclass(frozen=True)
class ShippingInfo:
    """Recipient and delivery choice captured in the first checkout step."""

    first_name: str
    last_name: str
    email: str
    address: str
    city: str
    region: str
    postal_code: str
    shipping_tier: ShippingTier = ShippingTier.STANDARD

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class PaymentDetails:
    """Card details entered in the payment step.

    ``payment_method`` is the gateway token for the card (for Stripe, a
    PaymentMethod id produced client-side); the raw fields are only used for
    local format checks and the masked review display.
    """

    card_number: str
    name_on_card: str
    expiry: str
    cvv: str
    payment_method: str | None = None
    billing_same_as_shipping: bool = True


class CheckoutPhase(StrEnum):
    """States of the checkout flow."""

    SHIPPING = "shipping"
    AUTHORIZING = "authorizing"
    REVIEWING = "reviewing"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class OrderTotals:
    """Authoritative money amounts for one checkout.

    ``total`` is derived from ``amount_minor`` so the displayed total and the
    amount reserved with the gateway never disagree.
    """

    subtotal: Decimal
    shipping_cost: Decimal
    tax: Decimal
    total: Decimal
    amount_minor: int


@dataclass(frozen=True)
class Authorization:
    """Gateway-side reservation of funds."""

    id: str
    amount_minor: int
    currency: str
    client_secret: str | None = None


class PaymentStatus(StrEnum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class PaymentResult:
    """Outcome of a gateway confirmation or status lookup."""

    status: PaymentStatus
    reference: str
    message: str | None = None
    reusable: bool = True


@dataclass(frozen=True)
class OrderSnapshot:
    """Immutable record of a confirmed order, handed to the order repository."""

    created_at: datetime
    owner_id: str | None
    items: tuple[LineItem, ...]
    shipping: ShippingInfo
    totals: OrderTotals
    currency: str
    authorization_id: str
    payment_reference: str
    status: str = "Confirmed"


@dataclass(frozen=True)
class OrderRecord:
    """An order as stored by the order repository."""

    reference: str
    snapshot: OrderSnapshot
