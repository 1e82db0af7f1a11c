# hexagono/routers/pricing.py
from __future__ import annotations

from fastapi import APIRouter

from hexagono.core.logging_config import logger
from hexagono.observability.metrics import price_estimates_counter
from hexagono.schemas.pricing import (
    AvailableFeatureOut,
    AvailableFeaturesResponse,
    FeatureCostOut,
    PriceCalculationRequest,
    PriceEstimateOut,
)
from hexagono.services.pricing_engine import pricing_engine

router = APIRouter(prefix="/api/pricing", tags=["pricing"])


@router.post("/calculate", response_model=PriceEstimateOut)
def calculate_price(payload: PriceCalculationRequest) -> PriceEstimateOut:
    estimate = pricing_engine.estimate(
        payload.service_type, payload.features, payload.custom_requirements
    )
    service = payload.service_type.strip().upper()
    price_estimates_counter.labels(service_type=service).inc()
    logger.info(
        "price_estimated",
        service_type=service,
        features=len(estimate.additional_features),
        total=estimate.total_estimate,
    )
    return PriceEstimateOut(
        base_price=estimate.base_price,
        additional_features=[
            FeatureCostOut(name=f.name, cost=f.cost) for f in estimate.additional_features
        ],
        total_estimate=estimate.total_estimate,
        currency=estimate.currency,
        disclaimer=estimate.disclaimer,
    )


@router.get("/features/{service_type}", response_model=AvailableFeaturesResponse)
def list_features(service_type: str) -> AvailableFeaturesResponse:
    features = pricing_engine.available_features(service_type)
    return AvailableFeaturesResponse(
        service_type=service_type.strip().upper(),
        base_price=pricing_engine.base_price(service_type),
        currency=pricing_engine.currency,
        features=[
            AvailableFeatureOut(
                id=f,
                name=pricing_engine.feature_display_name(f),
                cost=pricing_engine.feature_cost(f),
            )
            for f in features
        ],
    )
