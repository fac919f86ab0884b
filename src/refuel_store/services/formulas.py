"""Saved formulas on a customer's account."""

import logging
from dataclasses import dataclass
from typing import Protocol

from refuel_store.domain.errors import SignInRequiredError
from refuel_store.domain.formula import FormulaParameters, SavedFormula
from refuel_store.domain.session import SessionContext

MAX_SAVED_FORMULAS = 10

_logger = logging.getLogger(__name__)


class FormulaRepository(Protocol):
    """Persistence interface for saved formulas."""

    def create_formula(
        self,
        owner_id: str,
        name: str,
        parameters: FormulaParameters,
        quiz_generated: bool,
    ) -> SavedFormula:
        """Store a formula and return it."""

    def list_formulas(self, owner_id: str) -> list[SavedFormula]:
        """Return an owner's formulas, newest first."""

    def delete_formula(self, formula_id: str) -> None:
        """Delete a saved formula."""


def formula_name(parameters: FormulaParameters) -> str:
    """Name a formula the way the product card labels it."""
    name = f"{parameters.flavor.short_name} · {parameters.carbs_g:g}g carbs"
    if parameters.caffeine_mg:
        name += f" · {parameters.caffeine_mg:g}mg caffeine"
    return name


@dataclass
class FormulaLibraryService:
    """Save and list formulas, keeping only the most recent ones."""

    repository: FormulaRepository
    max_saved: int = MAX_SAVED_FORMULAS

    def save(
        self,
        session: SessionContext | None,
        parameters: FormulaParameters,
        quiz_generated: bool = False,
    ) -> SavedFormula:
        if session is None:
            raise SignInRequiredError("Sign in to save formulas.")
        saved = self.repository.create_formula(
            owner_id=session.session_id,
            name=formula_name(parameters),
            parameters=parameters,
            quiz_generated=quiz_generated,
        )
        for stale in self.repository.list_formulas(session.session_id)[self.max_saved :]:
            self.repository.delete_formula(stale.id)
            _logger.info(
                "Pruned saved formula: owner=%s id=%s", session.session_id, stale.id
            )
        return saved

    def list(self, session: SessionContext | None) -> list[SavedFormula]:
        if session is None:
            return []
        return self.repository.list_formulas(session.session_id)
