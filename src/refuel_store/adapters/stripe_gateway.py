"""Stripe PaymentIntents adapter for the checkout gateway."""

import asyncio
import logging
from dataclasses import dataclass

import stripe

from refuel_store.domain.checkout import (
    Authorization,
    PaymentDetails,
    PaymentResult,
    PaymentStatus,
)
from refuel_store.domain.errors import GatewayAmbiguousError, GatewayError
from refuel_store.services.checkout import PaymentGateway

_logger = logging.getLogger(__name__)

_AMBIGUOUS_ERRORS = (stripe.APIConnectionError, stripe.APIError, stripe.RateLimitError)
_FINAL_FAILURE_STATUSES = {"canceled"}


@dataclass
class StripePaymentGateway(PaymentGateway):
    """Payment gateway backed by Stripe PaymentIntents.

    The Stripe SDK is synchronous, so calls run in a worker thread. The API key
    is passed per request instead of through the module-level ``stripe.api_key``.
    """

    api_key: str

    async def create_authorization(
        self,
        amount_minor: int,
        currency: str,
        metadata: dict[str, str],
        idempotency_key: str,
    ) -> Authorization:
        """Create a PaymentIntent for the exact order amount."""
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.create,
                amount=amount_minor,
                currency=currency,
                automatic_payment_methods={"enabled": True, "allow_redirects": "never"},
                metadata=metadata,
                idempotency_key=idempotency_key,
                api_key=self.api_key,
            )
        except stripe.StripeError as exc:
            _logger.warning("PaymentIntent create failed: %s", exc)
            raise GatewayError(_user_message(exc)) from exc
        return Authorization(
            id=intent.id,
            amount_minor=intent.amount,
            currency=intent.currency,
            client_secret=intent.client_secret,
        )

    async def confirm(
        self, authorization: Authorization, details: PaymentDetails
    ) -> PaymentResult:
        """Confirm the PaymentIntent with the tokenized card."""
        if not details.payment_method:
            return PaymentResult(
                status=PaymentStatus.FAILED,
                reference=authorization.id,
                message="Card details could not be verified. Please re-enter them.",
            )
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.confirm,
                authorization.id,
                payment_method=details.payment_method,
                api_key=self.api_key,
            )
        except stripe.CardError as exc:
            return PaymentResult(
                status=PaymentStatus.FAILED,
                reference=authorization.id,
                message=_user_message(exc),
            )
        except stripe.InvalidRequestError as exc:
            _logger.warning("PaymentIntent confirm rejected: %s", exc)
            return PaymentResult(
                status=PaymentStatus.FAILED,
                reference=authorization.id,
                message=_user_message(exc),
                reusable=False,
            )
        except _AMBIGUOUS_ERRORS as exc:
            raise GatewayAmbiguousError(str(exc)) from exc
        return _result_from_intent(intent)

    async def retrieve(self, authorization: Authorization) -> PaymentResult:
        """Read the PaymentIntent status without changing it."""
        try:
            intent = await asyncio.to_thread(
                stripe.PaymentIntent.retrieve, authorization.id, api_key=self.api_key
            )
        except _AMBIGUOUS_ERRORS as exc:
            raise GatewayAmbiguousError(str(exc)) from exc
        return _result_from_intent(intent)


def _result_from_intent(intent: stripe.PaymentIntent) -> PaymentResult:
    if intent.status == "succeeded":
        return PaymentResult(
            status=PaymentStatus.SUCCEEDED,
            reference=intent.latest_charge or intent.id,
        )
    if intent.status == "processing":
        raise GatewayAmbiguousError(f"PaymentIntent {intent.id} is still processing")
    error = intent.last_payment_error
    message = error.message if error is not None else None
    if intent.status == "requires_action":
        message = "Your bank requires additional verification for this card."
    return PaymentResult(
        status=PaymentStatus.FAILED,
        reference=intent.id,
        message=message,
        reusable=intent.status not in _FINAL_FAILURE_STATUSES,
    )


def _user_message(exc: stripe.StripeError) -> str:
    return exc.user_message or "Payment failed. Please try again."
