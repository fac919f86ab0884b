"""Tests for container wiring."""

import asyncio

from refuel_store.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)
    assert container.checkout.cart is container.cart_store
    assert container.checkout.tax_rate == settings.tax_rate
    asyncio.run(container.close_resources())
