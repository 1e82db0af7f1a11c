# hexagono/schemas/pricing.py
from typing import List, Optional

from pydantic import Field

from hexagono.schemas.common import CamelModel


class PriceCalculationRequest(CamelModel):
    # str y no ServiceType: un tipo desconocido es PRICING_ERROR, no VALIDATION_ERROR
    service_type: str = Field(..., min_length=1, max_length=50)
    features: List[str] = Field(default_factory=list, max_length=50)
    custom_requirements: Optional[str] = Field(None, max_length=1000)


class FeatureCostOut(CamelModel):
    name: str
    cost: int


class PriceEstimateOut(CamelModel):
    base_price: int
    additional_features: List[FeatureCostOut]
    total_estimate: int
    currency: str
    disclaimer: str


class AvailableFeatureOut(CamelModel):
    id: str
    name: str
    cost: int


class AvailableFeaturesResponse(CamelModel):
    service_type: str
    base_price: int
    currency: str
    features: List[AvailableFeatureOut]
