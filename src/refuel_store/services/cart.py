"""In-memory cart with debounced remote persistence."""

import asyncio
import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Protocol

from refuel_store.domain.cart import LineItem
from refuel_store.domain.errors import CartFrozenError
from refuel_store.domain.session import SessionContext

_logger = logging.getLogger(__name__)


class CartRepository(Protocol):
    """Remote persistence interface for carts keyed by session."""

    def load(self, session_id: str) -> list[LineItem] | None:
        """Return the stored cart for a session, or None if there is none."""

    def save(self, session_id: str, items: list[LineItem]) -> None:
        """Upsert the cart for a session."""


@dataclass
class CartStore:
    """Cart for the active session.

    The in-memory items are authoritative. Each mutation restarts a trailing
    debounce timer; when it fires, one write carries the state at that moment.
    Write failures are logged and dropped, the next mutation schedules a new one.
    """

    repository: CartRepository
    sync_delay_seconds: float = 0.8
    is_open: bool = False
    _items: list[LineItem] = field(default_factory=list, init=False, repr=False)
    _session: SessionContext | None = field(default=None, init=False)
    _frozen: bool = field(default=False, init=False)
    _timer: asyncio.TimerHandle | None = field(default=None, init=False, repr=False)
    _write_lock: asyncio.Lock = field(
        default_factory=asyncio.Lock, init=False, repr=False
    )
    _writes: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    @property
    def items(self) -> tuple[LineItem, ...]:
        return tuple(self._items)

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self._items), Decimal("0.00"))

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    @property
    def session(self) -> SessionContext | None:
        return self._session

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def sync_pending(self) -> bool:
        return self._timer is not None

    def get(self, item_id: str) -> LineItem | None:
        return next((item for item in self._items if item.id == item_id), None)

    def add_item(self, item: LineItem) -> None:
        """Add an item, merging quantities with an existing line of the same id."""
        self._ensure_mutable()
        existing = self.get(item.id)
        if existing is None:
            self._items.append(item)
        else:
            self._replace(existing.with_quantity(existing.quantity + item.quantity))
        self.is_open = True
        self._schedule_sync()

    def update_quantity(self, item_id: str, quantity: int) -> None:
        """Set a line's quantity; zero or less removes it."""
        self._ensure_mutable()
        if quantity <= 0:
            self._items = [item for item in self._items if item.id != item_id]
        else:
            existing = self.get(item_id)
            if existing is None:
                return
            self._replace(existing.with_quantity(quantity))
        self._schedule_sync()

    def remove_item(self, item_id: str) -> None:
        self._ensure_mutable()
        self._items = [item for item in self._items if item.id != item_id]
        self._schedule_sync()

    def clear(self) -> None:
        self._ensure_mutable()
        self._items = []
        self._schedule_sync()

    def freeze(self) -> tuple[LineItem, ...]:
        """Lock the cart for checkout and return the locked contents."""
        self._frozen = True
        return self.items

    def thaw(self) -> None:
        self._frozen = False

    async def sign_in(self, session: SessionContext) -> None:
        """Attach a session and load its stored cart, if any.

        A stored cart replaces the local one outright; the two are never merged.
        """
        self._cancel_timer()
        self._session = session
        try:
            stored = await asyncio.to_thread(self.repository.load, session.session_id)
        except Exception:
            _logger.exception("Cart load failed: session=%s", session.session_id)
            return
        if stored is not None and self._session == session:
            self._items = list(stored)
            _logger.info(
                "Cart restored: session=%s items=%s", session.session_id, len(stored)
            )

    def sign_out(self) -> None:
        """Detach the session and drop the local cart without writing it."""
        self._cancel_timer()
        self._session = None
        self._items = []
        self._frozen = False
        self.is_open = False

    async def flush(self) -> None:
        """Write any pending change now instead of waiting for the timer."""
        if self._timer is None:
            return
        self._cancel_timer()
        await self._write()

    async def wait_idle(self) -> None:
        """Wait for writes already in flight to finish."""
        if self._writes:
            await asyncio.gather(*self._writes)

    async def aclose(self) -> None:
        await self.flush()
        await self.wait_idle()

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise CartFrozenError("Cart is locked while checkout is open")

    def _replace(self, updated: LineItem) -> None:
        self._items = [updated if item.id == updated.id else item for item in self._items]

    def _schedule_sync(self) -> None:
        if self._session is None:
            return
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.sync_delay_seconds, self._start_write)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _start_write(self) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._write())
        self._writes.add(task)
        task.add_done_callback(self._writes.discard)

    async def _write(self) -> None:
        async with self._write_lock:
            session = self._session
            if session is None:
                return
            snapshot = list(self._items)
            try:
                await asyncio.to_thread(self.repository.save, session.session_id, snapshot)
            except Exception:
                _logger.exception("Cart sync failed: session=%s", session.session_id)
                return
            _logger.debug(
                "Cart synced: session=%s items=%s", session.session_id, len(snapshot)
            )
