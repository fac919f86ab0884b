"""Tests for the quiz mapper."""

from refuel_store.domain.formula import Flavor, FormulaParameters
from refuel_store.services.quiz import QUESTIONS, map_answers


def test_map_answers_full_quiz() -> None:
    params = map_answers(
        {
            "sport": "Trail / Ultra",
            "duration": "3+ hours",
            "sweat": "Very Heavy / Very Salty",
            "gut": "Very Sensitive",
            "caffeine": "Yes — race day only",
            "flavor": "Tropical Mango",
            "thickness": "Thin & Liquid",
        }
    )

    assert params == FormulaParameters(
        carbs_g=60,
        fructose_ratio=0.15,
        sodium_mg=550,
        potassium_mg=100,
        magnesium_mg=20,
        caffeine_mg=50,
        thickness=1,
        flavor=Flavor.TROPICAL_MANGO,
    )


def test_map_answers_defaults_for_missing_or_unknown() -> None:
    params = map_answers({"duration": "forever", "flavor": "Bacon"})

    assert params == FormulaParameters()


def test_every_option_maps_to_valid_formula() -> None:
    for question in QUESTIONS:
        for option in question.options:
            params = map_answers({question.id: option})
            assert isinstance(params, FormulaParameters)


def test_flavor_question_lists_all_flavors() -> None:
    flavor_question = next(q for q in QUESTIONS if q.id == "flavor")

    assert set(flavor_question.options) == {flavor.value for flavor in Flavor}
