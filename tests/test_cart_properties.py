"""Property-based tests for cart totals."""

import asyncio
import threading
from decimal import Decimal

from hypothesis import given
from hypothesis import strategies as st

from refuel_store.domain.session import SessionContext
from refuel_store.services.cart import CartStore
from tests.conftest import InMemoryCartRepository, make_line_item

PRICES = {"gel-1": "3.84", "gel-2": "18.80", "packet-1": "15.00"}

operations = st.lists(
    st.tuples(
        st.sampled_from(["add", "update", "remove", "clear"]),
        st.sampled_from(sorted(PRICES)),
        st.integers(min_value=-2, max_value=6),
    ),
    max_size=40,
)


@given(operations)
def test_totals_hold_after_every_operation(steps) -> None:  # type: ignore[no-untyped-def]
    store = CartStore(repository=InMemoryCartRepository())
    expected: dict[str, int] = {}

    for action, item_id, quantity in steps:
        if action == "add":
            added = max(quantity, 1)
            store.add_item(make_line_item(item_id, PRICES[item_id], added))
            expected[item_id] = expected.get(item_id, 0) + added
        elif action == "update":
            store.update_quantity(item_id, quantity)
            if quantity <= 0:
                expected.pop(item_id, None)
            elif item_id in expected:
                expected[item_id] = quantity
        elif action == "remove":
            store.remove_item(item_id)
            expected.pop(item_id, None)
        else:
            store.clear()
            expected.clear()

        assert {item.id: item.quantity for item in store.items} == expected
        assert store.item_count == sum(expected.values())
        assert store.subtotal == sum(
            (Decimal(PRICES[key]) * qty for key, qty in expected.items()),
            Decimal("0.00"),
        )


class _BlockingCartRepository(InMemoryCartRepository):
    """Cart repository whose first save blocks until released."""

    def __init__(self) -> None:
        super().__init__()
        self.started = threading.Event()
        self.release = threading.Event()

    def save(self, session_id, items) -> None:  # type: ignore[no-untyped-def]
        self.started.set()
        self.release.wait(timeout=2)
        super().save(session_id, items)


def test_mutation_during_write_is_carried_by_next_write() -> None:
    repository = _BlockingCartRepository()
    store = CartStore(repository=repository, sync_delay_seconds=0.01)

    async def scenario() -> None:
        await store.sign_in(SessionContext(session_id="user-1", email="a@b.co"))
        store.add_item(make_line_item("gel-1", "3.84", 1))
        await asyncio.to_thread(repository.started.wait, 2)
        store.update_quantity("gel-1", 7)
        await asyncio.sleep(0.05)
        repository.release.set()
        await asyncio.sleep(0.05)
        await store.wait_idle()

    asyncio.run(scenario())

    assert [items[0].quantity for _, items in repository.writes] == [1, 7]
