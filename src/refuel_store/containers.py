"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from refuel_store.adapters.smtp_notifier import SmtpOrderNotifier
from refuel_store.adapters.stripe_gateway import StripePaymentGateway
from refuel_store.adapters.supabase_cart_repository import SupabaseCartRepository
from refuel_store.adapters.supabase_formula_repository import (
    SupabaseFormulaRepository,
)
from refuel_store.adapters.supabase_order_repository import SupabaseOrderRepository
from refuel_store.config import Settings
from refuel_store.services.cart import CartStore
from refuel_store.services.checkout import CheckoutOrchestrator
from refuel_store.services.formulas import FormulaLibraryService
from refuel_store.services.orders import OrderHistoryService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    cart_store: CartStore
    checkout: CheckoutOrchestrator
    formula_library: FormulaLibraryService
    order_history: OrderHistoryService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    order_repository = SupabaseOrderRepository(supabase_client)
    cart_store = CartStore(
        repository=SupabaseCartRepository(supabase_client),
        sync_delay_seconds=resolved_settings.cart_sync_delay_seconds,
    )
    notifier = SmtpOrderNotifier(
        hostname=resolved_settings.smtp_host,
        port=resolved_settings.smtp_port,
        username=resolved_settings.smtp_username,
        password=resolved_settings.smtp_password,
        sender_name=resolved_settings.mail_sender_name,
        storefront_url=resolved_settings.storefront_url,
    )
    checkout = CheckoutOrchestrator(
        cart=cart_store,
        gateway=StripePaymentGateway(api_key=resolved_settings.stripe_secret_key),
        orders=order_repository,
        notifier=notifier,
        currency=resolved_settings.stripe_currency,
        tax_rate=resolved_settings.tax_rate,
        free_shipping_threshold=resolved_settings.free_shipping_threshold,
    )
    formula_library = FormulaLibraryService(SupabaseFormulaRepository(supabase_client))
    order_history = OrderHistoryService(order_repository)

    async def close_resources() -> None:
        await cart_store.aclose()
        await checkout.wait_idle()

    return AppContainer(
        settings=resolved_settings,
        cart_store=cart_store,
        checkout=checkout,
        formula_library=formula_library,
        order_history=order_history,
        close_resources=close_resources,
    )
