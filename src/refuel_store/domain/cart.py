"""Domain models for the shopping cart."""

from dataclasses import dataclass
from decimal import Decimal

from refuel_store.domain.money import round_money, to_decimal


@dataclass(frozen=True)
class LineItem:
    """One priced, quantified entry in a cart."""

    id: str
    name: str
    emoji: str
    unit_price: Decimal
    quantity: int
    subtitle: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Line item id is required")
        if self.quantity <= 0:
            raise ValueError("Line item quantity must be positive")
        object.__setattr__(self, "unit_price", round_money(to_decimal(self.unit_price)))

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int) -> "LineItem":
        return LineItem(
            id=self.id,
            name=self.name,
            emoji=self.emoji,
            unit_price=self.unit_price,
            quantity=quantity,
            subtitle=self.subtitle,
        )
