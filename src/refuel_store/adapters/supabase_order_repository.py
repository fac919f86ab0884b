"""Supabase-backed order repository."""

import secrets
import string
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from supabase import Client

from refuel_store.adapters.serialization import (
    line_item_from_row,
    line_item_to_row,
    shipping_from_row,
    shipping_to_row,
)
from refuel_store.domain.checkout import OrderRecord, OrderSnapshot, OrderTotals
from refuel_store.services.checkout import OrderRepository

_REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
_COLUMNS = (
    "reference, owner_id, created_at, items, shipping, subtotal, shipping_cost, "
    "tax, total, amount_minor, currency, authorization_id, payment_reference, status"
)


def new_order_reference() -> str:
    """Generate a customer-facing order number like ORD-7QK2M9XA."""
    suffix = "".join(secrets.choice(_REFERENCE_ALPHABET) for _ in range(8))
    return f"ORD-{suffix}"


@dataclass
class SupabaseOrderRepository(OrderRepository):
    """Supabase implementation for confirmed orders.

    ``payment_reference`` is unique in the orders table, so a duplicate write
    for the same payment is rejected by the database.
    """

    client: Client

    def create_order(self, snapshot: OrderSnapshot) -> str:
        """Insert an order row and return its reference."""
        totals = snapshot.totals
        response = (
            self.client.table("orders")
            .insert(
                {
                    "reference": new_order_reference(),
                    "owner_id": snapshot.owner_id,
                    "created_at": snapshot.created_at.isoformat(),
                    "items": [line_item_to_row(item) for item in snapshot.items],
                    "shipping": shipping_to_row(snapshot.shipping),
                    "subtotal": str(totals.subtotal),
                    "shipping_cost": str(totals.shipping_cost),
                    "tax": str(totals.tax),
                    "total": str(totals.total),
                    "amount_minor": totals.amount_minor,
                    "currency": snapshot.currency,
                    "authorization_id": snapshot.authorization_id,
                    "payment_reference": snapshot.payment_reference,
                    "status": snapshot.status,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create order")
        return str(response.data[0]["reference"])

    def list_orders(self, owner_id: str, limit: int = 20) -> list[OrderRecord]:
        """Return an owner's orders, newest first."""
        response = (
            self.client.table("orders")
            .select(_COLUMNS)
            .eq("owner_id", owner_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return [_record_from_row(row) for row in response.data or []]


def _record_from_row(row: dict[str, object]) -> OrderRecord:
    snapshot = OrderSnapshot(
        created_at=datetime.fromisoformat(str(row["created_at"])),
        owner_id=row.get("owner_id"),
        items=tuple(line_item_from_row(item) for item in row.get("items") or []),
        shipping=shipping_from_row(row.get("shipping") or {}),
        totals=OrderTotals(
            subtotal=Decimal(str(row["subtotal"])),
            shipping_cost=Decimal(str(row["shipping_cost"])),
            tax=Decimal(str(row["tax"])),
            total=Decimal(str(row["total"])),
            amount_minor=int(row["amount_minor"]),
        ),
        currency=str(row.get("currency", "usd")),
        authorization_id=str(row["authorization_id"]),
        payment_reference=str(row["payment_reference"]),
        status=str(row.get("status", "Confirmed")),
    )
    return OrderRecord(reference=str(row["reference"]), snapshot=snapshot)
