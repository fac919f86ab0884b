"""Supabase-backed saved formula repository."""

from dataclasses import dataclass

from supabase import Client

from refuel_store.adapters.serialization import formula_from_row, formula_to_row
from refuel_store.domain.formula import FormulaParameters, SavedFormula
from refuel_store.services.formulas import FormulaRepository


@dataclass
class SupabaseFormulaRepository(FormulaRepository):
    """Supabase implementation for saved formulas."""

    client: Client

    def create_formula(
        self,
        owner_id: str,
        name: str,
        parameters: FormulaParameters,
        quiz_generated: bool,
    ) -> SavedFormula:
        """Insert a formula row and return it."""
        response = (
            self.client.table("saved_formulas")
            .insert(
                {
                    "owner_id": owner_id,
                    "name": name,
                    "parameters": formula_to_row(parameters),
                    "quiz_generated": quiz_generated,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to save formula")
        return _formula_from_row(response.data[0])

    def list_formulas(self, owner_id: str) -> list[SavedFormula]:
        """Return an owner's formulas, newest first."""
        response = (
            self.client.table("saved_formulas")
            .select("id, owner_id, name, parameters, quiz_generated, saved_at")
            .eq("owner_id", owner_id)
            .order("saved_at", desc=True)
            .execute()
        )
        return [_formula_from_row(row) for row in response.data or []]

    def delete_formula(self, formula_id: str) -> None:
        """Delete a formula row."""
        self.client.table("saved_formulas").delete().eq("id", formula_id).execute()


def _formula_from_row(row: dict[str, object]) -> SavedFormula:
    return SavedFormula(
        id=str(row["id"]),
        owner_id=str(row["owner_id"]),
        name=str(row["name"]),
        parameters=formula_from_row(row["parameters"]),
        quiz_generated=bool(row.get("quiz_generated", False)),
        saved_at=str(row.get("saved_at", "")),
    )
