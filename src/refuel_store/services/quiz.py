"""Diagnostic quiz that seeds a starting formula."""

from dataclasses import dataclass

from refuel_store.domain.formula import Flavor, FormulaParameters


@dataclass(frozen=True)
class QuizQuestion:
    """A single-choice quiz question."""

    id: str
    text: str
    options: tuple[str, ...]


QUESTIONS: tuple[QuizQuestion, ...] = (
    QuizQuestion(
        "sport",
        "What is your primary sport?",
        ("Running", "Cycling", "Triathlon", "Trail / Ultra", "Other"),
    ),
    QuizQuestion(
        "duration",
        "Average training duration?",
        ("Under 1 hour", "1–2 hours", "2–3 hours", "3+ hours"),
    ),
    QuizQuestion(
        "sweat",
        "How would you describe your sweat rate?",
        ("Light", "Moderate", "Heavy", "Very Heavy / Very Salty"),
    ),
    QuizQuestion(
        "gut",
        "How sensitive is your stomach during intense efforts?",
        ("Iron Stomach", "Normal", "Somewhat Sensitive", "Very Sensitive"),
    ),
    QuizQuestion(
        "caffeine",
        "Do you want caffeine in your gel?",
        ("Yes — every dose", "Yes — race day only", "No thanks"),
    ),
    QuizQuestion(
        "flavor",
        "What flavor sounds best?",
        tuple(flavor.value for flavor in Flavor),
    ),
    QuizQuestion(
        "thickness",
        "What gel consistency do you prefer?",
        ("Thin & Liquid", "Standard Gel", "Thick & Concentrated"),
    ),
)

_CARBS_BY_DURATION = {
    "Under 1 hour": 20,
    "1–2 hours": 30,
    "2–3 hours": 45,
    "3+ hours": 60,
}
_SODIUM_BY_SWEAT = {
    "Light": 100,
    "Moderate": 250,
    "Heavy": 400,
    "Very Heavy / Very Salty": 550,
}
_CAFFEINE_BY_CHOICE = {
    "Yes — every dose": 75,
    "Yes — race day only": 50,
    "No thanks": 0,
}
_THICKNESS_BY_CHOICE = {
    "Thin & Liquid": 1,
    "Standard Gel": 3,
    "Thick & Concentrated": 5,
}
# Lower fructose is gentler on sensitive stomachs.
_FRUCTOSE_BY_GUT = {
    "Iron Stomach": 0.5,
    "Normal": 0.35,
    "Somewhat Sensitive": 0.25,
    "Very Sensitive": 0.15,
}
_FLAVOR_BY_LABEL = {flavor.value: flavor for flavor in Flavor}


def map_answers(answers: dict[str, str]) -> FormulaParameters:
    """Translate quiz answers into a starting formula.

    Every question has a default, so partial or unknown answers still produce
    a valid formula. Sport is informational only; potassium and magnesium keep
    the product card defaults.
    """
    defaults = FormulaParameters()
    return FormulaParameters(
        carbs_g=_CARBS_BY_DURATION.get(answers.get("duration", ""), defaults.carbs_g),
        fructose_ratio=_FRUCTOSE_BY_GUT.get(
            answers.get("gut", ""), defaults.fructose_ratio
        ),
        sodium_mg=_SODIUM_BY_SWEAT.get(answers.get("sweat", ""), defaults.sodium_mg),
        potassium_mg=defaults.potassium_mg,
        magnesium_mg=defaults.magnesium_mg,
        caffeine_mg=_CAFFEINE_BY_CHOICE.get(
            answers.get("caffeine", ""), defaults.caffeine_mg
        ),
        thickness=_THICKNESS_BY_CHOICE.get(
            answers.get("thickness", ""), defaults.thickness
        ),
        flavor=_FLAVOR_BY_LABEL.get(answers.get("flavor", ""), defaults.flavor),
    )
