# hexagono/main.py
import time

import sentry_sdk
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sentry_sdk.integrations.fastapi import FastApiIntegration
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from sqlalchemy.orm import Session

from hexagono import models  # noqa: F401  (registra los modelos SQLAlchemy)
from hexagono.core.errors import QuoteError
from hexagono.core.logging_config import logger, setup_logging
from hexagono.core.rate_limit import exempt, limiter
from hexagono.core.settings import settings
from hexagono.db import Base, engine, get_db
from hexagono.middleware.request_id import RequestIdMiddleware
from hexagono.observability.metrics import latency_hist
from hexagono.observability.metrics import router as metrics_router
from hexagono.repositories import quotes as quotes_repo
from hexagono.routers import cron, pricing, quotes, tracking
from hexagono.services.i18n import get_request_language, translate

setup_logging()

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.APP_ENV,
        integrations=[FastApiIntegration()],
        traces_sample_rate=0.1,
        send_default_pii=False,
    )

# ----------------------------------------------------
# App init
# ----------------------------------------------------
app = FastAPI(title="Hexágono Web - Cotizaciones", version="0.1.0")

logger.info("startup", service="hexagono-api", env=settings.APP_ENV)


# ----------------------------------------------------
# Health
# ----------------------------------------------------
@app.get("/health", include_in_schema=True)
@exempt
def health(request: Request, db: Session = Depends(get_db)):
    try:
        db.execute(text("SELECT 1"))
        counts = quotes_repo.count_by_status(db)
    except Exception as e:
        logger.error("health_db_failed", error=str(e))
        return JSONResponse(
            status_code=503,
            content={"status": "error", "database": "unavailable"},
        )
    return {
        "status": "ok",
        "database": "ok",
        "environment": settings.APP_ENV,
        "quotes": {"total": sum(counts.values()), "byStatus": counts},
    }


# ----------------------------------------------------
# Logging middleware
# ----------------------------------------------------
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start = time.time()

    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID", "unknown"
    )
    client_ip = request.client.host if request.client else "unknown"

    bound_logger = logger.bind(
        request_id=request_id,
        ip=client_ip,
        endpoint=str(request.url.path),
        method=request.method,
    )

    bound_logger.info("request_started")
    response = await call_next(request)
    latency = time.time() - start

    route = request.scope.get("route")
    latency_hist.labels(route=getattr(route, "path", "unmatched")).observe(latency)
    bound_logger.bind(
        status_code=response.status_code, latency_ms=round(latency * 1000, 2)
    ).info("request_finished")
    return response


# ----------------------------------------------------
# Middleware
# ----------------------------------------------------
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# el último agregado corre primero: el request id queda disponible para el logging
app.add_middleware(RequestIdMiddleware)


# ----------------------------------------------------
# Errores
# ----------------------------------------------------
@app.exception_handler(QuoteError)
def quote_error_handler(request: Request, exc: QuoteError):
    lang = get_request_language(request)
    log = logger.bind(code=exc.code, status_code=exc.status_code, **exc.context)
    if exc.status_code >= 500:
        log.error("quote_error", message=exc.message("es"))
    else:
        log.warning("quote_error", message=exc.message("es"))
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_payload(lang),
        headers=exc.headers,
    )


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    lang = get_request_language(request)
    details = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        details.append({"field": ".".join(loc), "message": err.get("msg", "")})
    logger.warning("request_validation_failed", endpoint=str(request.url.path), details=details)
    return JSONResponse(
        status_code=400,
        content={
            "error": translate("errors.validation", lang),
            "code": "VALIDATION_ERROR",
            "details": details,
        },
    )


@app.exception_handler(RateLimitExceeded)
def ratelimit_handler(request: Request, exc: RateLimitExceeded):
    lang = get_request_language(request)
    logger.warning("rate_limited", endpoint=str(request.url.path), limit=str(exc.detail))
    return JSONResponse(
        status_code=429,
        content={"error": translate("errors.rate_limited", lang), "code": "RATE_LIMITED"},
    )


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled_error", endpoint=str(request.url.path), error=repr(exc))
    return JSONResponse(
        status_code=500,
        content={"error": translate("errors.internal", get_request_language(request)), "code": "INTERNAL_ERROR"},
    )


# ----------------------------------------------------
# Routers
# ----------------------------------------------------
app.include_router(pricing.router)
app.include_router(tracking.router)  # antes que quotes: /track/{token}
app.include_router(quotes.router)
app.include_router(cron.router)
app.include_router(metrics_router)  # /metrics


# ----------------------------------------------------
# Startup
# ----------------------------------------------------
@app.on_event("startup")
def on_startup():
    Base.metadata.create_all(bind=engine)
