"""Tests for checkout form validation."""

from dataclasses import replace
from datetime import date

from refuel_store.services.validation import (
    card_brand,
    mask_card_number,
    validate_payment,
    validate_shipping,
)
from tests.conftest import make_payment, make_shipping

TODAY = date(2026, 10, 19)


def test_valid_shipping_has_no_errors() -> None:
    assert validate_shipping(make_shipping()) == {}


def test_shipping_errors_per_field() -> None:
    info = replace(
        make_shipping(),
        first_name=" ",
        email="sam@",
        region="ZZ",
        postal_code="8030",
    )

    errors = validate_shipping(info)

    assert set(errors) == {"first_name", "email", "region", "postal_code"}


def test_zip_plus_four_accepted() -> None:
    assert validate_shipping(replace(make_shipping(), postal_code="80302-1234")) == {}


def test_valid_payment_has_no_errors() -> None:
    assert validate_payment(make_payment(), TODAY) == {}


def test_card_valid_through_expiry_month() -> None:
    assert validate_payment(replace(make_payment(), expiry="10/26"), TODAY) == {}
    errors = validate_payment(replace(make_payment(), expiry="09/26"), TODAY)
    assert set(errors) == {"expiry"}


def test_malformed_payment_fields() -> None:
    details = replace(
        make_payment(),
        card_number="4242 4242",
        name_on_card="",
        expiry="13/2027",
        cvv="12a",
    )

    errors = validate_payment(details, TODAY)

    assert set(errors) == {"card_number", "name_on_card", "expiry", "cvv"}


def test_card_brand_detection() -> None:
    assert card_brand("4242 4242 4242 4242") == "Visa"
    assert card_brand("5555 5555 5555 4444") == "Mastercard"
    assert card_brand("3782 822463 10005") == "Amex"
    assert card_brand("6011 1111 1111 1117") == "Discover"
    assert card_brand("9999") is None


def test_mask_card_number_keeps_last_four() -> None:
    assert mask_card_number("4242 4242 4242 4242") == "•••• •••• •••• 4242"
