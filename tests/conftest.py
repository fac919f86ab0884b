"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from decimal import Decimal

import pytest

from refuel_store.config import Settings
from refuel_store.containers import AppContainer
from refuel_store.domain.cart import LineItem
from refuel_store.domain.checkout import (
    Authorization,
    OrderRecord,
    OrderSnapshot,
    PaymentDetails,
    PaymentResult,
    PaymentStatus,
    ShippingInfo,
    ShippingTier,
)
from refuel_store.domain.formula import FormulaParameters, SavedFormula
from refuel_store.services.cart import CartRepository, CartStore
from refuel_store.services.checkout import (
    CheckoutOrchestrator,
    OrderNotifier,
    OrderRepository,
    PaymentGateway,
)
from refuel_store.services.formulas import FormulaLibraryService, FormulaRepository
from refuel_store.services.orders import OrderHistoryService


@dataclass
class InMemoryCartRepository(CartRepository):
    """In-memory cart repository that records writes."""

    carts: dict[str, list[LineItem]] = field(default_factory=dict)
    writes: list[tuple[str, list[LineItem]]] = field(default_factory=list)
    fail_writes: bool = False
    fail_loads: bool = False

    def load(self, session_id: str) -> list[LineItem] | None:
        if self.fail_loads:
            raise RuntimeError("load failed")
        stored = self.carts.get(session_id)
        return list(stored) if stored is not None else None

    def save(self, session_id: str, items: list[LineItem]) -> None:
        if self.fail_writes:
            raise RuntimeError("write failed")
        self.writes.append((session_id, list(items)))
        self.carts[session_id] = list(items)


@dataclass
class FakePaymentGateway(PaymentGateway):
    """Fake gateway with scripted confirmation outcomes.

    Authorizations are keyed by idempotency key, so a replayed request returns
    the first handle. ``confirm_outcomes`` are consumed in order; each is a
    PaymentResult or an exception to raise. When empty, confirmation succeeds.
    """

    created: list[dict[str, object]] = field(default_factory=list)
    confirmed: list[str] = field(default_factory=list)
    retrieved: list[str] = field(default_factory=list)
    confirm_outcomes: list[PaymentResult | Exception] = field(default_factory=list)
    retrieve_result: PaymentResult | None = None
    create_delay: float = 0.0
    confirm_delay: float = 0.0
    _by_key: dict[str, Authorization] = field(default_factory=dict)

    async def create_authorization(
        self,
        amount_minor: int,
        currency: str,
        metadata: dict[str, str],
        idempotency_key: str,
    ) -> Authorization:
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        if idempotency_key in self._by_key:
            return self._by_key[idempotency_key]
        self.created.append(
            {
                "amount_minor": amount_minor,
                "currency": currency,
                "metadata": metadata,
                "idempotency_key": idempotency_key,
            }
        )
        authorization = Authorization(
            id=f"pi_{len(self.created)}",
            amount_minor=amount_minor,
            currency=currency,
            client_secret=f"pi_{len(self.created)}_secret",
        )
        self._by_key[idempotency_key] = authorization
        return authorization

    async def confirm(
        self, authorization: Authorization, details: PaymentDetails
    ) -> PaymentResult:
        if self.confirm_delay:
            await asyncio.sleep(self.confirm_delay)
        self.confirmed.append(authorization.id)
        if self.confirm_outcomes:
            outcome = self.confirm_outcomes.pop(0)
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        return PaymentResult(
            status=PaymentStatus.SUCCEEDED, reference=f"ch_{authorization.id}"
        )

    async def retrieve(self, authorization: Authorization) -> PaymentResult:
        self.retrieved.append(authorization.id)
        if self.retrieve_result is not None:
            return self.retrieve_result
        return PaymentResult(status=PaymentStatus.FAILED, reference=authorization.id)


@dataclass
class InMemoryOrderRepository(OrderRepository):
    """In-memory order repository; ``fail_writes`` rejects that many inserts."""

    orders: list[OrderRecord] = field(default_factory=list)
    fail_writes: int = 0

    def create_order(self, snapshot: OrderSnapshot) -> str:
        if self.fail_writes:
            self.fail_writes -= 1
            raise RuntimeError("insert failed")
        reference = f"ORD-{len(self.orders) + 1:08d}"
        self.orders.append(OrderRecord(reference=reference, snapshot=snapshot))
        return reference

    def list_orders(self, owner_id: str, limit: int = 20) -> list[OrderRecord]:
        owned = [
            record for record in self.orders if record.snapshot.owner_id == owner_id
        ]
        owned.sort(key=lambda record: record.snapshot.created_at, reverse=True)
        return owned[:limit]


@dataclass
class FakeOrderNotifier(OrderNotifier):
    """Fake notifier that records confirmations."""

    sent: list[tuple[str, str]] = field(default_factory=list)
    fail: bool = False

    async def send_order_confirmation(
        self, order_reference: str, recipient_email: str, snapshot: OrderSnapshot
    ) -> None:
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append((order_reference, recipient_email))


@dataclass
class InMemoryFormulaRepository(FormulaRepository):
    """In-memory saved formula repository."""

    formulas: list[SavedFormula] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)

    def create_formula(
        self,
        owner_id: str,
        name: str,
        parameters: FormulaParameters,
        quiz_generated: bool,
    ) -> SavedFormula:
        formula = SavedFormula(
            id=f"formula-{len(self.formulas) + len(self.deleted) + 1}",
            owner_id=owner_id,
            name=name,
            parameters=parameters,
            quiz_generated=quiz_generated,
            saved_at=f"2026-01-01T00:00:{len(self.formulas) + len(self.deleted):02d}",
        )
        self.formulas.append(formula)
        return formula

    def list_formulas(self, owner_id: str) -> list[SavedFormula]:
        owned = [formula for formula in self.formulas if formula.owner_id == owner_id]
        return sorted(owned, key=lambda formula: formula.saved_at, reverse=True)

    def delete_formula(self, formula_id: str) -> None:
        self.deleted.append(formula_id)
        self.formulas = [
            formula for formula in self.formulas if formula.id != formula_id
        ]


def make_line_item(
    item_id: str = "gel-1", unit_price: str = "3.84", quantity: int = 10
) -> LineItem:
    return LineItem(
        id=item_id,
        name="Custom Gel Powder (5 pouches)",
        emoji="💧",
        unit_price=Decimal(unit_price),
        quantity=quantity,
    )


def make_shipping(tier: ShippingTier = ShippingTier.STANDARD) -> ShippingInfo:
    return ShippingInfo(
        first_name="Sam",
        last_name="Rivera",
        email="sam@example.com",
        address="12 Trail Rd",
        city="Boulder",
        region="CO",
        postal_code="80302",
        shipping_tier=tier,
    )


def make_payment() -> PaymentDetails:
    return PaymentDetails(
        card_number="4242 4242 4242 4242",
        name_on_card="Sam Rivera",
        expiry="12/30",
        cvv="123",
        payment_method="pm_card_visa",
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        stripe_secret_key="sk_test_123",
        supabase_url="https://example.supabase.co",
        supabase_service_key="eyJhbGciOiJIUzI1NiJ9.eyJyb2xlIjoic2VydmljZV9yb2xlIn0.signature",
        smtp_username="orders@refuel.example",
        smtp_password="smtp-password",
    )


@pytest.fixture
def cart_repository() -> InMemoryCartRepository:
    return InMemoryCartRepository()


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def order_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def notifier() -> FakeOrderNotifier:
    return FakeOrderNotifier()


@pytest.fixture
def cart(cart_repository: InMemoryCartRepository) -> CartStore:
    return CartStore(repository=cart_repository, sync_delay_seconds=0.01)


@pytest.fixture
def checkout(
    cart: CartStore,
    gateway: FakePaymentGateway,
    order_repository: InMemoryOrderRepository,
    notifier: FakeOrderNotifier,
) -> CheckoutOrchestrator:
    return CheckoutOrchestrator(
        cart=cart, gateway=gateway, orders=order_repository, notifier=notifier
    )


@pytest.fixture
def container(
    settings: Settings,
    cart: CartStore,
    checkout: CheckoutOrchestrator,
    order_repository: InMemoryOrderRepository,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        cart_store=cart,
        checkout=checkout,
        formula_library=FormulaLibraryService(InMemoryFormulaRepository()),
        order_history=OrderHistoryService(order_repository),
        close_resources=close_resources,
    )
