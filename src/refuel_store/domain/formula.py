"""Domain models for gel formulas."""

from dataclasses import dataclass
from enum import StrEnum


class Flavor(StrEnum):
    """Flavors offered for the custom gel."""

    TROPICAL_MANGO = "Tropical Mango"
    STRAWBERRY_LEMONADE = "Strawberry Lemonade"
    ORANGE_CITRUS = "Orange Citrus"
    WATERMELON_MINT = "Watermelon Mint"
    NEUTRAL = "Neutral / Unflavored"

    @property
    def emoji(self) -> str:
        return _FLAVOR_EMOJI[self]

    @property
    def short_name(self) -> str:
        """First word of the label, as shown on cart subtitles."""
        return self.value.split(" ")[0]


_FLAVOR_EMOJI = {
    Flavor.TROPICAL_MANGO: "🥭",
    Flavor.STRAWBERRY_LEMONADE: "🍓",
    Flavor.ORANGE_CITRUS: "🍊",
    Flavor.WATERMELON_MINT: "🍉",
    Flavor.NEUTRAL: "💧",
}

THICKNESS_LABELS = {
    1: "Liquid",
    2: "Thin",
    3: "Standard",
    4: "Thick",
    5: "Extra Thick",
}


@dataclass(frozen=True)
class ParameterRange:
    """Slider range for a formula parameter."""

    minimum: float
    maximum: float
    step: float

    def clamp(self, value: float) -> float:
        return min(max(value, self.minimum), self.maximum)


FORMULA_RANGES: dict[str, ParameterRange] = {
    "carbs_g": ParameterRange(15, 90, 1),
    "fructose_ratio": ParameterRange(0.10, 0.50, 0.05),
    "sodium_mg": ParameterRange(0, 600, 25),
    "potassium_mg": ParameterRange(0, 300, 10),
    "magnesium_mg": ParameterRange(0, 80, 5),
    "caffeine_mg": ParameterRange(0, 150, 25),
    "thickness": ParameterRange(1, 5, 1),
}


@dataclass(frozen=True)
class FormulaParameters:
    """Continuously adjustable recipe for one gel pouch."""

    carbs_g: float = 30
    fructose_ratio: float = 0.35
    sodium_mg: float = 250
    potassium_mg: float = 100
    magnesium_mg: float = 20
    caffeine_mg: float = 0
    thickness: int = 3
    flavor: Flavor = Flavor.NEUTRAL

    def __post_init__(self) -> None:
        for name in (
            "carbs_g",
            "sodium_mg",
            "potassium_mg",
            "magnesium_mg",
            "caffeine_mg",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        if not 0 <= self.fructose_ratio <= 1:
            raise ValueError("fructose_ratio must be between 0 and 1")
        if self.thickness not in THICKNESS_LABELS:
            raise ValueError("thickness must be an integer from 1 to 5")
        if not isinstance(self.flavor, Flavor):
            raise ValueError(f"Unknown flavor: {self.flavor!r}")

    @classmethod
    def from_sliders(  # noqa: PLR0913
        cls,
        *,
        carbs_g: float,
        fructose_ratio: float,
        sodium_mg: float,
        potassium_mg: float,
        magnesium_mg: float,
        caffeine_mg: float,
        thickness: int,
        flavor: Flavor,
    ) -> "FormulaParameters":
        """Build parameters from raw slider values, clamped to their ranges."""
        return cls(
            carbs_g=FORMULA_RANGES["carbs_g"].clamp(carbs_g),
            fructose_ratio=FORMULA_RANGES["fructose_ratio"].clamp(fructose_ratio),
            sodium_mg=FORMULA_RANGES["sodium_mg"].clamp(sodium_mg),
            potassium_mg=FORMULA_RANGES["potassium_mg"].clamp(potassium_mg),
            magnesium_mg=FORMULA_RANGES["magnesium_mg"].clamp(magnesium_mg),
            caffeine_mg=FORMULA_RANGES["caffeine_mg"].clamp(caffeine_mg),
            thickness=int(FORMULA_RANGES["thickness"].clamp(thickness)),
            flavor=flavor,
        )

    @property
    def thickness_label(self) -> str:
        return THICKNESS_LABELS[self.thickness]

    @property
    def caffeine_description(self) -> str:
        if self.caffeine_mg == 0:
            return "No caffeine"
        if self.caffeine_mg <= 50:  # noqa: PLR2004
            return "Light boost"
        if self.caffeine_mg <= 100:  # noqa: PLR2004
            return "Moderate boost"
        return "Race-day kick"


@dataclass(frozen=True)
class SavedFormula:
    """A formula stored on a customer's account."""

    id: str
    owner_id: str
    name: str
    parameters: FormulaParameters
    quiz_generated: bool
    saved_at: str
