"""Supabase-backed cart repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from refuel_store.adapters.serialization import line_item_from_row, line_item_to_row
from refuel_store.domain.cart import LineItem
from refuel_store.services.cart import CartRepository


@dataclass
class SupabaseCartRepository(CartRepository):
    """Supabase implementation for per-session carts."""

    client: Client

    def load(self, session_id: str) -> list[LineItem] | None:
        """Return the stored cart for a session, if present."""
        response = (
            self.client.table("carts")
            .select("session_id, items")
            .eq("session_id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        rows = response.data[0].get("items") or []
        return [line_item_from_row(row) for row in rows]

    def save(self, session_id: str, items: list[LineItem]) -> None:
        """Upsert the cart row for a session."""
        self.client.table("carts").upsert(
            {
                "session_id": session_id,
                "items": [line_item_to_row(item) for item in items],
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="session_id",
        ).execute()
