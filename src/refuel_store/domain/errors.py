"""Errors raised by the order-formation pipeline."""


class StoreError(Exception):
    """Base class for storefront errors."""


class ValidationError(StoreError):
    """One or more submitted fields are malformed."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__(", ".join(f"{key}: {value}" for key, value in errors.items()))
        self.errors = errors


class CartFrozenError(StoreError):
    """The cart is locked by an open checkout."""


class SignInRequiredError(StoreError):
    """The operation needs a signed-in customer."""


class CheckoutStateError(StoreError):
    """The requested transition is not valid in the current phase."""


class CheckoutBusyError(CheckoutStateError):
    """Another checkout operation is still in flight."""


class GatewayError(StoreError):
    """Base class for payment gateway failures."""


class GatewayDeclinedError(GatewayError):
    """The payment network rejected the charge."""


class GatewayAmbiguousError(GatewayError):
    """The gateway outcome is unknown (network failure or timeout)."""


class OrderRecordError(StoreError):
    """Payment succeeded but the order could not be recorded."""
