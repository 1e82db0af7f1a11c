# hexagono/routers/quotes.py
import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from hexagono.core.errors import ValidationError
from hexagono.core.rate_limit import limiter
from hexagono.core.security import AdminIdentity, require_admin
from hexagono.core.settings import settings
from hexagono.db import get_db
from hexagono.dependencies import get_lifecycle
from hexagono.domain.quotes import Priority, ServiceType, parse_status
from hexagono.repositories import quotes as repo
from hexagono.schemas.quote import (
    NoteCreateRequest,
    NoteOut,
    QuoteCreatedResponse,
    QuoteCreateRequest,
    QuoteDetailOut,
    QuoteListResponse,
    QuoteSummaryOut,
    QuoteUpdateRequest,
    ReminderResponse,
    StatusHistoryEntryOut,
    StatusHistoryResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from hexagono.services.lifecycle import QuoteLifecycleManager

router = APIRouter(prefix="/api/quotes", tags=["quotes"])


# ---- público ----


@router.post("", response_model=QuoteCreatedResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_QUOTE_CREATE)
def create_quote(
    request: Request,
    payload: QuoteCreateRequest,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
) -> QuoteCreatedResponse:
    quote = lifecycle.create_quote(payload)
    return QuoteCreatedResponse.model_validate(quote)


# ---- admin ----


@router.get("", response_model=QuoteListResponse)
def list_quotes(
    status_filter: Optional[str] = Query(None, alias="status"),
    priority: Optional[Priority] = Query(None),
    service_type: Optional[ServiceType] = Query(None, alias="serviceType"),
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    admin: AdminIdentity = Depends(require_admin),
) -> QuoteListResponse:
    parsed_status = None
    if status_filter:
        parsed_status = parse_status(status_filter)
        if parsed_status is None:
            raise ValidationError("errors.invalid_status", field="status", status=status_filter)

    items, total = repo.list_quotes(
        db,
        status=parsed_status,
        priority=priority,
        service_type=service_type,
        assigned_to=assigned_to,
        page=page,
        limit=limit,
    )
    return QuoteListResponse(
        quotes=[QuoteSummaryOut.model_validate(q) for q in items],
        total=total,
        page=page,
        limit=limit,
        pages=math.ceil(total / limit) if total else 0,
    )


@router.get("/{quote_id}", response_model=QuoteDetailOut)
def get_quote(
    quote_id: str,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
    admin: AdminIdentity = Depends(require_admin),
) -> QuoteDetailOut:
    return QuoteDetailOut.from_quote(lifecycle.get_quote(quote_id))


@router.patch("/{quote_id}", response_model=QuoteSummaryOut)
def update_quote(
    quote_id: str,
    payload: QuoteUpdateRequest,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
    admin: AdminIdentity = Depends(require_admin),
) -> QuoteSummaryOut:
    quote = lifecycle.update_details(quote_id, payload.model_dump(exclude_unset=True))
    return QuoteSummaryOut.model_validate(quote)


@router.patch("/{quote_id}/status", response_model=StatusUpdateResponse)
def update_status(
    quote_id: str,
    payload: StatusUpdateRequest,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
    admin: AdminIdentity = Depends(require_admin),
) -> StatusUpdateResponse:
    result = lifecycle.update_status(
        quote_id,
        payload.status,
        changed_by=payload.changed_by,
        notes=payload.notes,
    )
    return StatusUpdateResponse.model_validate(result)


@router.get("/{quote_id}/status", response_model=StatusHistoryResponse)
def get_status_history(
    quote_id: str,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
    admin: AdminIdentity = Depends(require_admin),
) -> StatusHistoryResponse:
    history = lifecycle.get_status_history(quote_id)
    return StatusHistoryResponse(
        current_status=history.current_status,
        status_history=[StatusHistoryEntryOut.model_validate(h) for h in history.entries],
    )


@router.post("/{quote_id}/notes", response_model=NoteOut, status_code=status.HTTP_201_CREATED)
def add_note(
    quote_id: str,
    payload: NoteCreateRequest,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
    admin: AdminIdentity = Depends(require_admin),
) -> NoteOut:
    note = lifecycle.add_note(quote_id, payload.author, payload.note, payload.is_internal)
    return NoteOut.model_validate(note)


@router.post("/{quote_id}/reminder", response_model=ReminderResponse)
def send_reminder(
    quote_id: str,
    lifecycle: QuoteLifecycleManager = Depends(get_lifecycle),
    admin: AdminIdentity = Depends(require_admin),
) -> ReminderResponse:
    return ReminderResponse(reminder_sent=lifecycle.send_reminder(quote_id))
