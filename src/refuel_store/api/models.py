"""Pydantic models for the storefront API."""

from decimal import Decimal

from pydantic import BaseModel, Field

from refuel_store.domain.formula import Flavor
from refuel_store.services.pricing import MIN_POUCHES


class FormulaPayload(BaseModel):
    """Slider values for one gel formula."""

    carbs_g: float = Field(default=30, ge=0)
    fructose_ratio: float = Field(default=0.35, ge=0, le=1)
    sodium_mg: float = Field(default=250, ge=0)
    potassium_mg: float = Field(default=100, ge=0)
    magnesium_mg: float = Field(default=20, ge=0)
    caffeine_mg: float = Field(default=0, ge=0)
    thickness: int = Field(default=3, ge=1, le=5)
    flavor: Flavor = Flavor.NEUTRAL


class QuoteRequest(FormulaPayload):
    """Formula plus the pouch count selected on the product card."""

    pouches: int = MIN_POUCHES


class PriceComponentModel(BaseModel):
    label: str
    amount: Decimal
    display_amount: Decimal


class QuoteResponse(BaseModel):
    """Unit price, breakdown and bag total for a formula."""

    unit_price: Decimal
    pouches: int
    bag_price: Decimal
    breakdown: list[PriceComponentModel]
    summary: str


class ShippingOptionModel(BaseModel):
    tier: str
    label: str
    detail: str
    rate: Decimal


class QuizQuestionModel(BaseModel):
    id: str
    text: str
    options: list[str]


class QuizAnswers(BaseModel):
    """Answers keyed by question id; unanswered questions use defaults."""

    answers: dict[str, str] = Field(default_factory=dict)
