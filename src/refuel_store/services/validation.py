"""Field validation for the checkout forms."""

import re
from datetime import date

from refuel_store.domain.checkout import US_STATES, PaymentDetails, ShippingInfo

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_POSTAL_CODE_RE = re.compile(r"^\d{5}(-\d{4})?$")
_MIN_CARD_DIGITS = 15
_MAX_CARD_DIGITS = 19
_MIN_CVV_DIGITS = 3
_MAX_CVV_DIGITS = 4


def validate_shipping(info: ShippingInfo) -> dict[str, str]:
    """Return field errors for a shipping form; empty when valid."""
    errors: dict[str, str] = {}
    if not info.first_name.strip():
        errors["first_name"] = "Required"
    if not info.last_name.strip():
        errors["last_name"] = "Required"
    if not _EMAIL_RE.match(info.email):
        errors["email"] = "Valid email required"
    if not info.address.strip():
        errors["address"] = "Required"
    if not info.city.strip():
        errors["city"] = "Required"
    if info.region not in US_STATES:
        errors["region"] = "Required"
    if not _POSTAL_CODE_RE.match(info.postal_code):
        errors["postal_code"] = "Valid ZIP required"
    return errors


def validate_payment(details: PaymentDetails, today: date) -> dict[str, str]:
    """Return field errors for the card form; empty when valid."""
    errors: dict[str, str] = {}
    digits = card_digits(details.card_number)
    if not _MIN_CARD_DIGITS <= len(digits) <= _MAX_CARD_DIGITS:
        errors["card_number"] = "Enter a valid card number"
    if not details.name_on_card.strip():
        errors["name_on_card"] = "Required"
    if not _expiry_is_valid(details.expiry, today):
        errors["expiry"] = "Invalid expiry date"
    cvv = details.cvv.strip()
    if not (cvv.isdigit() and _MIN_CVV_DIGITS <= len(cvv) <= _MAX_CVV_DIGITS):
        errors["cvv"] = "Invalid CVV"
    return errors


def _expiry_is_valid(expiry: str, today: date) -> bool:
    """Check an MM/YY expiry; a card is valid through its expiry month."""
    month_text, _, year_text = expiry.partition("/")
    month_text, year_text = month_text.strip(), year_text.strip()
    if not (month_text.isdigit() and year_text.isdigit() and len(year_text) == 2):
        return False
    month = int(month_text)
    year = 2000 + int(year_text)
    if not 1 <= month <= 12:  # noqa: PLR2004
        return False
    return (year, month) >= (today.year, today.month)


def card_digits(card_number: str) -> str:
    return "".join(char for char in card_number if char.isdigit())


def card_brand(card_number: str) -> str | None:
    """Guess the card network from the number prefix."""
    digits = card_digits(card_number)
    if digits.startswith("4"):
        return "Visa"
    if re.match(r"^5[1-5]", digits):
        return "Mastercard"
    if re.match(r"^3[47]", digits):
        return "Amex"
    if digits.startswith("6011"):
        return "Discover"
    return None


def mask_card_number(card_number: str) -> str:
    """Mask every digit but the last four, in groups of four."""
    digits = card_digits(card_number)
    masked = "•" * max(len(digits) - 4, 0) + digits[-4:]
    return " ".join(masked[index : index + 4] for index in range(0, len(masked), 4))
