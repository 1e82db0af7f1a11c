# hexagono/routers/cron.py
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from hexagono.core.logging_config import logger
from hexagono.core.rate_limit import exempt
from hexagono.core.security import require_cron_secret
from hexagono.core.settings import settings
from hexagono.dependencies import get_lifecycle
from hexagono.schemas.quote import BulkReminderResponse
from hexagono.services.i18n import translate
from hexagono.services.lifecycle import QuoteLifecycleManager

router = APIRouter(prefix="/api/cron", tags=["cron"])


@router.post("/reminders", response_model=BulkReminderResponse)
@exempt
def run_reminders(
    _: None = Depends(require_cron_secret),
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
):
    result = lifecycle.send_bulk_reminders()
    logger.info("cron_reminders_finished", trigger="cron", **result)
    return BulkReminderResponse(**result)


@router.get("/reminders", response_model=BulkReminderResponse)
def run_reminders_manually(lifecycle: QuoteLifecycleManager = Depends(get_lifecycle)):
    """Disparo manual, solo en desarrollo."""
    if not settings.is_development:
        return JSONResponse(
            status_code=403,
            content={"error": translate("errors.forbidden_env"), "code": "FORBIDDEN"},
        )
    result = lifecycle.send_bulk_reminders()
    logger.info("cron_reminders_finished", trigger="manual", **result)
    return BulkReminderResponse(**result)
