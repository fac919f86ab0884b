"""Checkout state machine: shipping, payment authorization, confirmation."""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any, Protocol, TypeVar
from uuid import uuid4

from refuel_store.domain.cart import LineItem
from refuel_store.domain.checkout import (
    SHIPPING_OPTIONS,
    Authorization,
    CheckoutPhase,
    OrderRecord,
    OrderSnapshot,
    OrderTotals,
    PaymentDetails,
    PaymentResult,
    PaymentStatus,
    ShippingInfo,
    ShippingTier,
)
from refuel_store.domain.errors import (
    CheckoutBusyError,
    CheckoutStateError,
    GatewayAmbiguousError,
    GatewayDeclinedError,
    GatewayError,
    OrderRecordError,
    ValidationError,
)
from refuel_store.domain.money import from_minor_units, round_money, to_minor_units
from refuel_store.domain.session import SessionContext
from refuel_store.services.cart import CartStore
from refuel_store.services.validation import validate_payment, validate_shipping

_logger = logging.getLogger(__name__)

_T = TypeVar("_T")


class PaymentGateway(Protocol):
    """Interface for the external payment processor."""

    async def create_authorization(
        self,
        amount_minor: int,
        currency: str,
        metadata: dict[str, str],
        idempotency_key: str,
    ) -> Authorization:
        """Reserve exactly ``amount_minor`` and return the handle."""

    async def confirm(
        self, authorization: Authorization, details: PaymentDetails
    ) -> PaymentResult:
        """Move funds against an authorization.

        Raises GatewayAmbiguousError when the outcome is unknown.
        """

    async def retrieve(self, authorization: Authorization) -> PaymentResult:
        """Look up the current payment status of an authorization."""


class OrderRepository(Protocol):
    """Persistence interface for confirmed orders."""

    def create_order(self, snapshot: OrderSnapshot) -> str:
        """Store an order and return its reference."""

    def list_orders(self, owner_id: str, limit: int = 20) -> list[OrderRecord]:
        """Return an owner's orders, newest first."""


class OrderNotifier(Protocol):
    """Outbound order confirmation channel."""

    async def send_order_confirmation(
        self, order_reference: str, recipient_email: str, snapshot: OrderSnapshot
    ) -> None:
        """Send the order confirmation to the customer."""


def shipping_cost_for(
    subtotal: Decimal, tier: ShippingTier, free_shipping_threshold: Decimal
) -> Decimal:
    if subtotal >= free_shipping_threshold:
        return Decimal("0.00")
    return SHIPPING_OPTIONS[tier].rate


def quote_totals(
    subtotal: Decimal,
    tier: ShippingTier,
    *,
    tax_rate: Decimal,
    free_shipping_threshold: Decimal,
) -> OrderTotals:
    """Compute the authoritative totals for a checkout.

    The charge is rounded to minor units once, from the unrounded sum, and the
    total is read back from that integer.
    """
    shipping_cost = shipping_cost_for(subtotal, tier, free_shipping_threshold)
    tax = subtotal * tax_rate
    amount_minor = to_minor_units(subtotal + tax + shipping_cost)
    return OrderTotals(
        subtotal=round_money(subtotal),
        shipping_cost=shipping_cost,
        tax=round_money(tax),
        total=from_minor_units(amount_minor),
        amount_minor=amount_minor,
    )


def _utc_today() -> date:
    return datetime.now(tz=UTC).date()


@dataclass
class CheckoutSession:
    """State of one open checkout."""

    customer: SessionContext | None = None
    id: str = field(default_factory=lambda: uuid4().hex)
    phase: CheckoutPhase = CheckoutPhase.SHIPPING
    shipping: ShippingInfo | None = None
    payment: PaymentDetails | None = None
    items: tuple[LineItem, ...] = ()
    authorization: Authorization | None = None
    authorization_attempt: int = 0
    totals: OrderTotals | None = None
    payment_reference: str | None = None
    needs_reconciliation: bool = False
    order_reference: str | None = None
    last_error: str | None = None


def _payment_pending(session: CheckoutSession) -> bool:
    """True while funds may have moved for a checkout without a recorded order."""
    return session.order_reference is None and (
        session.payment_reference is not None or session.needs_reconciliation
    )


@dataclass
class CheckoutOrchestrator:
    """Drives a checkout from shipping capture to a recorded order.

    Only one gateway or order operation runs at a time. Re-submitting shipping
    while the authorization is being created joins that request; any other
    transition requested meanwhile raises CheckoutBusyError.
    """

    cart: CartStore
    gateway: PaymentGateway
    orders: OrderRepository
    notifier: OrderNotifier
    currency: str = "usd"
    tax_rate: Decimal = Decimal("0.08")
    free_shipping_threshold: Decimal = Decimal("50.00")
    today: Callable[[], date] = field(default_factory=lambda: _utc_today)
    _session: CheckoutSession | None = field(default=None, init=False)
    _operation: asyncio.Task[Any] | None = field(default=None, init=False, repr=False)
    _operation_kind: str | None = field(default=None, init=False)
    _notifications: set[asyncio.Task[None]] = field(
        default_factory=set, init=False, repr=False
    )

    @property
    def session(self) -> CheckoutSession | None:
        return self._session

    @property
    def busy(self) -> bool:
        return self._in_flight() is not None

    def open(self, customer: SessionContext | None = None) -> CheckoutSession:
        """Start a checkout for the current cart, or return the open one."""
        if self._session is not None:
            return self._session
        if not self.cart.items:
            raise ValidationError({"cart": "Cart is empty"})
        self._session = CheckoutSession(customer=customer)
        return self._session

    def close(self) -> None:
        """Abandon the checkout and unlock the cart.

        A created authorization is left unconfirmed and expires on the gateway.
        Refused once a payment may have gone through without a recorded order.
        """
        operation = self._in_flight()
        if operation is not None and self._operation_kind == "confirm":
            raise CheckoutBusyError("Payment confirmation is in progress")
        if self._session is not None and _payment_pending(self._session):
            raise CheckoutStateError(
                "Payment was submitted; confirm again to record the order"
            )
        if operation is not None:
            operation.cancel()
        self._operation = None
        self._operation_kind = None
        self._session = None
        self.cart.thaw()

    async def submit_shipping(self, info: ShippingInfo) -> Authorization:
        """Validate shipping and move to the payment step."""
        session = self._require_phase(CheckoutPhase.SHIPPING)
        operation = self._in_flight()
        if operation is not None and self._operation_kind == "authorize":
            return await asyncio.shield(operation)
        self._ensure_idle()
        errors = validate_shipping(info)
        if errors:
            raise ValidationError(errors)
        session.shipping = info
        if not session.items:
            session.items = self.cart.freeze()
        authorization = await self._run("authorize", self._authorize(session))
        session.phase = CheckoutPhase.AUTHORIZING
        return authorization

    async def submit_payment(self, details: PaymentDetails) -> OrderTotals:
        """Validate card details and move to review."""
        session = self._require_phase(CheckoutPhase.AUTHORIZING)
        self._ensure_idle()
        errors = validate_payment(details, self.today())
        if errors:
            raise ValidationError(errors)
        if session.authorization is None:
            await self._run("authorize", self._authorize(session))
        session.payment = details
        session.last_error = None
        if session.totals is None:
            raise CheckoutStateError("Checkout has no authorized total")
        session.phase = CheckoutPhase.REVIEWING
        return session.totals

    def back(self) -> CheckoutPhase:
        """Step back one phase; the cached authorization is kept.

        Not allowed after a payment attempt that may have moved funds, since
        the recorded order must match what was charged.
        """
        session = self._require_session()
        self._ensure_idle()
        if _payment_pending(session):
            raise CheckoutStateError(
                "Payment was submitted; the order can no longer change"
            )
        if session.phase is CheckoutPhase.AUTHORIZING:
            session.phase = CheckoutPhase.SHIPPING
        elif session.phase is CheckoutPhase.REVIEWING:
            session.phase = CheckoutPhase.AUTHORIZING
        else:
            raise CheckoutStateError(f"Cannot go back from {session.phase}")
        return session.phase

    async def confirm(self) -> str:
        """Confirm payment and record the order; returns the order reference."""
        session = self._require_session()
        if session.phase is CheckoutPhase.CONFIRMED and session.order_reference:
            return session.order_reference
        if session.phase is not CheckoutPhase.REVIEWING:
            raise CheckoutStateError(f"Cannot confirm from {session.phase}")
        self._ensure_idle()
        return await self._run("confirm", self._confirm(session))

    async def wait_idle(self) -> None:
        """Wait for outstanding confirmation emails."""
        if self._notifications:
            await asyncio.gather(*self._notifications)

    async def _run(self, kind: str, operation: Coroutine[Any, Any, _T]) -> _T:
        task = asyncio.get_running_loop().create_task(operation)
        self._operation = task
        self._operation_kind = kind
        return await asyncio.shield(task)

    async def _authorize(self, session: CheckoutSession) -> Authorization:
        shipping = session.shipping
        if shipping is None:
            raise CheckoutStateError("Shipping details are missing")
        subtotal = sum((item.line_total for item in session.items), Decimal("0.00"))
        totals = quote_totals(
            subtotal,
            shipping.shipping_tier,
            tax_rate=self.tax_rate,
            free_shipping_threshold=self.free_shipping_threshold,
        )
        current = session.authorization
        if current is not None and current.amount_minor == totals.amount_minor:
            return current
        if current is not None and _payment_pending(session):
            raise CheckoutStateError(
                "Payment was submitted; the total can no longer change"
            )
        if current is not None:
            _logger.info(
                "Replacing authorization: checkout=%s old=%s amount=%s->%s",
                session.id,
                current.id,
                current.amount_minor,
                totals.amount_minor,
            )
            session.authorization_attempt += 1
        authorization = await self.gateway.create_authorization(
            amount_minor=totals.amount_minor,
            currency=self.currency,
            metadata={
                "checkout_id": session.id,
                "customer_name": shipping.full_name,
                "customer_email": shipping.email,
                "ship_to": f"{shipping.city}, {shipping.region}",
            },
            idempotency_key=(
                f"{session.id}:{session.authorization_attempt}:{totals.amount_minor}"
            ),
        )
        if authorization.amount_minor != totals.amount_minor:
            raise GatewayError(
                f"Gateway reserved {authorization.amount_minor}, "
                f"expected {totals.amount_minor}"
            )
        session.authorization = authorization
        session.totals = totals
        _logger.info(
            "Authorization created: checkout=%s authorization=%s amount=%s",
            session.id,
            authorization.id,
            authorization.amount_minor,
        )
        return authorization

    async def _confirm(self, session: CheckoutSession) -> str:
        authorization = session.authorization
        payment = session.payment
        shipping = session.shipping
        totals = session.totals
        if (
            authorization is None
            or payment is None
            or shipping is None
            or totals is None
        ):
            raise CheckoutStateError("Checkout is missing details needed to confirm")
        if session.payment_reference is None:
            result = await self._settle_payment(session, authorization, payment)
            if result.status is PaymentStatus.FAILED:
                self._handle_decline(session, result)
                raise GatewayDeclinedError(session.last_error)
            session.payment_reference = result.reference
            session.needs_reconciliation = False

        snapshot = OrderSnapshot(
            created_at=datetime.now(tz=UTC),
            owner_id=session.customer.session_id if session.customer else None,
            items=session.items,
            shipping=shipping,
            totals=totals,
            currency=authorization.currency,
            authorization_id=authorization.id,
            payment_reference=session.payment_reference,
        )
        if totals.amount_minor != authorization.amount_minor:
            raise CheckoutStateError(
                f"Order total {totals.amount_minor} does not match "
                f"authorized amount {authorization.amount_minor}"
            )
        try:
            reference = await asyncio.to_thread(self.orders.create_order, snapshot)
        except Exception as exc:
            _logger.exception(
                "Order write failed after payment: checkout=%s payment=%s",
                session.id,
                session.payment_reference,
            )
            raise OrderRecordError(
                "Payment was received but the order could not be saved"
            ) from exc

        session.order_reference = reference
        session.phase = CheckoutPhase.CONFIRMED
        self.cart.thaw()
        self.cart.clear()
        self._notify(reference, shipping.email, snapshot)
        _logger.info("Order confirmed: checkout=%s order=%s", session.id, reference)
        return reference

    async def _settle_payment(
        self,
        session: CheckoutSession,
        authorization: Authorization,
        details: PaymentDetails,
    ) -> PaymentResult:
        if session.needs_reconciliation:
            status = await self.gateway.retrieve(authorization)
            if status.status is PaymentStatus.SUCCEEDED or not status.reusable:
                return status
        try:
            return await self.gateway.confirm(authorization, details)
        except GatewayAmbiguousError:
            session.needs_reconciliation = True
            _logger.warning(
                "Payment outcome unknown: checkout=%s authorization=%s",
                session.id,
                authorization.id,
            )
            raise

    def _handle_decline(self, session: CheckoutSession, result: PaymentResult) -> None:
        session.last_error = result.message or "Your payment was declined."
        session.needs_reconciliation = False
        session.payment = None
        session.phase = CheckoutPhase.AUTHORIZING
        if not result.reusable:
            session.authorization = None
            session.totals = None
            session.authorization_attempt += 1
        _logger.info(
            "Payment declined: checkout=%s reusable=%s", session.id, result.reusable
        )

    def _notify(
        self, order_reference: str, recipient_email: str, snapshot: OrderSnapshot
    ) -> None:
        task = asyncio.get_running_loop().create_task(
            self._send_confirmation(order_reference, recipient_email, snapshot)
        )
        self._notifications.add(task)
        task.add_done_callback(self._notifications.discard)

    async def _send_confirmation(
        self, order_reference: str, recipient_email: str, snapshot: OrderSnapshot
    ) -> None:
        try:
            await self.notifier.send_order_confirmation(
                order_reference, recipient_email, snapshot
            )
        except Exception:
            _logger.exception("Order confirmation email failed: order=%s", order_reference)

    def _in_flight(self) -> asyncio.Task[Any] | None:
        if self._operation is None or self._operation.done():
            return None
        return self._operation

    def _require_session(self) -> CheckoutSession:
        if self._session is None:
            raise CheckoutStateError("Checkout is not open")
        return self._session

    def _require_phase(self, phase: CheckoutPhase) -> CheckoutSession:
        session = self._require_session()
        if session.phase is not phase:
            raise CheckoutStateError(f"Expected {phase}, checkout is in {session.phase}")
        return session

    def _ensure_idle(self) -> None:
        if self.busy:
            raise CheckoutBusyError(f"Checkout is busy: {self._operation_kind}")
