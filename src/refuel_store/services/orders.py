"""Order history for signed-in customers."""

from dataclasses import dataclass

from refuel_store.domain.checkout import OrderRecord
from refuel_store.domain.session import SessionContext
from refuel_store.services.checkout import OrderRepository


@dataclass
class OrderHistoryService:
    """Read-only access to a customer's past orders."""

    repository: OrderRepository

    def list_orders(
        self, session: SessionContext | None, limit: int = 20
    ) -> list[OrderRecord]:
        """Return the customer's orders, newest first; guests have none."""
        if session is None:
            return []
        return self.repository.list_orders(session.session_id, limit=limit)
