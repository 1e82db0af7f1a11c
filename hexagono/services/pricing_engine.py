# hexagono/services/pricing_engine.py
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple

from hexagono.core.errors import InvalidInput
from hexagono.core.logging_config import logger
from hexagono.domain.quotes import Priority, ServiceType, parse_service_type
from hexagono.services.i18n import translate

RULES_PATH = Path(__file__).resolve().parent.parent / "rules" / "pricing_rules.json"

DISCLAIMER = translate("pricing.disclaimer", "es")


@dataclass(frozen=True)
class FeatureCost:
    name: str
    cost: int


@dataclass(frozen=True)
class PriceEstimate:
    base_price: int
    additional_features: Tuple[FeatureCost, ...] = field(default_factory=tuple)
    total_estimate: int = 0
    currency: str = "ARS"
    disclaimer: str = DISCLAIMER


class PricingEngine:
    """
    Motor de precios: tipo de servicio + features → PriceEstimate.

    Las tablas se cargan una sola vez desde `rules/pricing_rules.json` y se
    exponen como mappings de solo lectura. `estimate()` es pura: mismo input,
    mismo output, sin efectos.
    """

    def __init__(self, rules_file: Optional[Path] = None):
        self.rules_file = Path(rules_file) if rules_file else RULES_PATH
        rules = self._load_rules()

        self.currency: str = rules.get("currency", "ARS")
        self.base_prices: Mapping[ServiceType, int] = MappingProxyType(
            {ServiceType(k): int(v) for k, v in rules["base_prices"].items()}
        )
        self.feature_costs: Mapping[str, int] = MappingProxyType(
            {k: int(v) for k, v in rules["feature_costs"].items()}
        )
        self.display_names: Mapping[str, str] = MappingProxyType(
            dict(rules.get("feature_display_names", {}))
        )
        self.common_features: Tuple[str, ...] = tuple(rules.get("common_features", []))
        self.services_without_common = frozenset(
            ServiceType(s) for s in rules.get("services_without_common", [])
        )
        self.service_features: Mapping[ServiceType, Tuple[str, ...]] = MappingProxyType(
            {ServiceType(k): tuple(v) for k, v in rules.get("service_features", {}).items()}
        )
        thresholds = rules.get("priority_thresholds", {})
        self.high_threshold = int(thresholds.get("HIGH", 300000))
        self.medium_threshold = int(thresholds.get("MEDIUM", 150000))

    def _load_rules(self) -> dict:
        try:
            with open(self.rules_file, "r", encoding="utf-8") as f:
                return json.load(f)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            raise RuntimeError(f"No se pudieron cargar las reglas de precios: {e}")

    # ---- tablas ----

    def _service(self, service_type) -> ServiceType:
        parsed = parse_service_type(service_type)
        if parsed is None or parsed not in self.base_prices:
            raise InvalidInput(
                "errors.unknown_service_type",
                field="serviceType",
                service_type=service_type,
            )
        return parsed

    def base_price(self, service_type) -> int:
        return self.base_prices[self._service(service_type)]

    def feature_cost(self, feature_id: str) -> int:
        """0 para ids desconocidos."""
        return self.feature_costs.get(feature_id, 0)

    def feature_display_name(self, feature_id: str) -> str:
        return self.display_names.get(feature_id, feature_id)

    def available_features(self, service_type) -> List[str]:
        service = self._service(service_type)
        specific = list(self.service_features.get(service, ()))
        if service in self.services_without_common:
            return specific
        out = list(self.common_features)
        out.extend(f for f in specific if f not in out)
        return out

    def validate_features(
        self, service_type, features: Iterable[str]
    ) -> Tuple[List[str], List[str]]:
        allowed = set(self.available_features(service_type))
        valid: List[str] = []
        invalid: List[str] = []
        for f in features:
            (valid if f in allowed else invalid).append(f)
        return valid, invalid

    # ---- cálculo ----

    def estimate(
        self,
        service_type,
        features: Optional[Iterable[str]] = None,
        custom_requirements: Optional[str] = None,
    ) -> PriceEstimate:
        service = self._service(service_type)
        base = self.base_prices[service]

        items: List[FeatureCost] = []
        seen = set()
        for feature_id in features or ():
            if feature_id in seen:
                continue
            seen.add(feature_id)
            cost = self.feature_costs.get(feature_id)
            if cost is None:
                continue
            items.append(FeatureCost(name=feature_id, cost=cost))

        if custom_requirements:
            # no tiene precio fijo: lo revisa el equipo a mano
            logger.debug(
                "custom_requirements_received",
                service_type=service.value,
                length=len(custom_requirements),
            )

        return PriceEstimate(
            base_price=base,
            additional_features=tuple(items),
            total_estimate=base + sum(i.cost for i in items),
            currency=self.currency,
            disclaimer=DISCLAIMER,
        )

    def calculate_priority(self, estimated_price: Optional[int]) -> Priority:
        price = estimated_price or 0
        if price >= self.high_threshold:
            return Priority.HIGH
        if price >= self.medium_threshold:
            return Priority.MEDIUM
        return Priority.LOW


# instancia compartida (las tablas son inmutables)
pricing_engine = PricingEngine()
