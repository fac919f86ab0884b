"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, status

from refuel_store.api.models import (
    FormulaPayload,
    PriceComponentModel,
    QuizAnswers,
    QuizQuestionModel,
    QuoteRequest,
    QuoteResponse,
    ShippingOptionModel,
)
from refuel_store.app_logging import configure_logging
from refuel_store.containers import AppContainer
from refuel_store.domain.checkout import SHIPPING_OPTIONS
from refuel_store.domain.formula import FormulaParameters
from refuel_store.services.pricing import clamp_pouches, describe_formula, price
from refuel_store.services.quiz import QUESTIONS, map_answers


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/shipping/options")
    async def shipping_options() -> dict[str, object]:
        """Return the shipping tiers and the free shipping threshold."""
        return {
            "options": [
                ShippingOptionModel(
                    tier=option.tier.value,
                    label=option.label,
                    detail=option.detail,
                    rate=option.rate,
                )
                for option in SHIPPING_OPTIONS.values()
            ],
            "free_shipping_threshold": container.settings.free_shipping_threshold,
        }

    @app.post("/pricing/quote")
    async def pricing_quote(request: QuoteRequest) -> QuoteResponse:
        """Price a formula as the product card shows it."""
        params = _to_parameters(request)
        quote = price(params)
        pouches = clamp_pouches(request.pouches)
        logger.debug("Quote: unit=%s pouches=%s", quote.unit_price, pouches)
        return QuoteResponse(
            unit_price=quote.unit_price,
            pouches=pouches,
            bag_price=quote.unit_price * pouches,
            breakdown=[
                PriceComponentModel(
                    label=component.label,
                    amount=component.amount,
                    display_amount=component.display_amount,
                )
                for component in quote.breakdown
            ],
            summary=describe_formula(params, quote.unit_price),
        )

    @app.get("/quiz/questions")
    async def quiz_questions() -> list[QuizQuestionModel]:
        """Return the diagnostic quiz."""
        return [
            QuizQuestionModel(
                id=question.id, text=question.text, options=list(question.options)
            )
            for question in QUESTIONS
        ]

    @app.post("/quiz/formula")
    async def quiz_formula(request: QuizAnswers) -> FormulaPayload:
        """Map quiz answers to a starting formula."""
        params = map_answers(request.answers)
        return FormulaPayload(
            carbs_g=params.carbs_g,
            fructose_ratio=params.fructose_ratio,
            sodium_mg=params.sodium_mg,
            potassium_mg=params.potassium_mg,
            magnesium_mg=params.magnesium_mg,
            caffeine_mg=params.caffeine_mg,
            thickness=params.thickness,
            flavor=params.flavor,
        )

    return app


def _to_parameters(payload: FormulaPayload) -> FormulaParameters:
    try:
        return FormulaParameters(
            carbs_g=payload.carbs_g,
            fructose_ratio=payload.fructose_ratio,
            sodium_mg=payload.sodium_mg,
            potassium_mg=payload.potassium_mg,
            magnesium_mg=payload.magnesium_mg,
            caffeine_mg=payload.caffeine_mg,
            thickness=payload.thickness,
            flavor=payload.flavor,
        )
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)
        ) from exc
