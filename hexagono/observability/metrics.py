# hexagono/observability/metrics.py
from fastapi import APIRouter
from starlette.responses import Response

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

router = APIRouter(tags=["observability"])

quotes_created_counter = Counter(
    "hexagono_quotes_created_total",
    "Cotizaciones creadas",
    ["service_type", "priority"],
)

status_updates_counter = Counter(
    "hexagono_quote_status_updates_total",
    "Cambios de estado de cotizaciones",
    ["result"],  # changed|noop|rejected
)

notifications_counter = Counter(
    "hexagono_notifications_total",
    "Mails enviados por tipo",
    ["kind", "result"],  # result: sent|failed
)

price_estimates_counter = Counter(
    "hexagono_price_estimates_total",
    "Estimaciones de precio calculadas",
    ["service_type"],
)

latency_hist = Histogram(
    "hexagono_api_latency_seconds",
    "Latencia de la API por ruta",
    ["route"],
)


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    # Prometheus espera text/plain; version=0.0.4
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
